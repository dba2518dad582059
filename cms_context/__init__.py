"""cms-context: turn content-lake documents into ranked, size-bounded LLM context."""

__version__ = "1.0.0"
