"""Command-line interface for cms-context."""
