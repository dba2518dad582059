"""Allow ``python -m cms_context.cli`` execution."""

import sys

from cms_context.cli.main import main

sys.exit(main())
