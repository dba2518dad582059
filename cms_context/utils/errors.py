"""Custom exception hierarchy for cms-context.

All application exceptions inherit from :class:`ContentContextError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "sanity") caused the failure.

The hierarchy follows the three kinds of failure that abort an operation:

    ContentContextError  (base -- catch-all for any cms-context error)
    +-- ConfigurationError      (missing / incomplete connection settings)
    +-- DocumentNotFoundError   (requested document id is absent)
    +-- QueryError              (malformed query or upstream transport failure)

Best-effort steps (schema sampling, flattened-text lookup) never raise
these; they degrade to a safe default inside the component that owns them.
The tool layer (:mod:`cms_context.api.tools`) converts every
``ContentContextError`` into a ``{"success": False, "error": ...}`` envelope.
"""


class ContentContextError(Exception):
    """Base exception for all cms-context errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[sanity] HTTP 400: expected ']' following expression``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(ContentContextError):
    """Raised when the document-store connection is not configured or incomplete."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentNotFoundError(ContentContextError):
    """Raised when a requested document id does not exist in the store."""

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class QueryError(ContentContextError):
    """Raised when a store query or mutation fails.

    Covers malformed GROQ, non-2xx HTTP responses and transport failures;
    the underlying message is preserved so callers can report it verbatim.
    """

    def __init__(
        self,
        message: str = "Document store query failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
