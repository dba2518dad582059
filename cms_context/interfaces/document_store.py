"""Abstract base class for document-store providers.

Defines the contract the content pipeline needs from a content lake:
fetch by id, run a GROQ query, count, and the handful of mutations the
tool layer exposes.  The concrete implementation wraps the Sanity HTTP API
(:class:`~cms_context.providers.store.sanity_http_provider.SanityHTTPProvider`);
tests substitute an ``AsyncMock`` built against this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IDocumentStore(ABC):
    """Contract for the document store used by every service.

    All methods are async; each call is one store round-trip.  Failures are
    raised as :class:`~cms_context.utils.errors.QueryError`.
    """

    @abstractmethod
    async def get_document(self, document_id: str) -> dict[str, Any] | None:
        """Return the document with *document_id*, or ``None`` if absent."""

    @abstractmethod
    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Execute a GROQ *query* with bound ``$params`` and return its result.

        The result is whatever the query produces: a list for ``*[...]``
        queries, a scalar for ``count(...)``, a mapping for object queries.
        """

    @abstractmethod
    async def count(self, query_filter: str, params: dict[str, Any] | None = None) -> int:
        """Return the number of documents matching the GROQ filter expression."""

    @abstractmethod
    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create *document* and return it as stored (with ``_id`` and ``_rev``)."""

    @abstractmethod
    async def patch(self, document_id: str, set_fields: dict[str, Any]) -> dict[str, Any]:
        """Set *set_fields* on an existing document and return the result."""

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Delete the document with *document_id*."""

    @abstractmethod
    async def replace_and_delete(self, document: dict[str, Any], delete_id: str) -> dict[str, Any]:
        """Create or replace *document* and delete *delete_id* in one atomic transaction.

        Used to move a document between its draft and published identities:
        if the store rejects the transaction, neither change is applied.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this store (e.g. ``"sanity"``)."""
