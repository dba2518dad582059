"""Content tool operations exposed to the surrounding agent/tool layer.

Every public coroutine on :class:`ContentTools` takes primitive parameters
and returns a plain ``dict`` envelope:

* ``{"success": True, <payload keys>}`` on success
* ``{"success": False, "error": "<message>"}`` on any failure

Nothing raises past this boundary.  Domain errors
(:class:`~cms_context.utils.errors.ContentContextError`) are reported with
their message; anything unexpected is logged with a traceback and reported
the same way.

The store is resolved per call from the current settings, so a missing or
incomplete connection is reported by whichever operation hits it first.
"""

from __future__ import annotations

import functools
import json
import uuid
from typing import Any, Awaitable, Callable

import httpx
import structlog

from cms_context.config.settings import Settings
from cms_context.interfaces.document_store import IDocumentStore
from cms_context.models.document import draft_id, published_id
from cms_context.providers.store.sanity_http_provider import SanityHTTPProvider
from cms_context.services.catalog_builder import CatalogBuilder
from cms_context.services.chunker import TextChunker
from cms_context.services.context_assembler import ContextAssembler
from cms_context.services.field_resolver import FieldResolver
from cms_context.services.schema_sampler import SchemaSampler
from cms_context.utils.errors import ContentContextError, DocumentNotFoundError, QueryError
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

TOOL_NAME = "Sanity Content Tool"
TOOL_VERSION = "1.0.0"

# Store-owned fields dropped when copying a document to a new identity.
_COPY_EXCLUDED_FIELDS = ("_id", "_rev")

_Operation = Callable[..., Awaitable[dict[str, Any]]]


def tool_operation(name: str) -> Callable[[_Operation], _Operation]:
    """Wrap an operation so it always returns a success/failure envelope."""

    def decorator(func: _Operation) -> _Operation:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
            with structlog.contextvars.bound_contextvars(operation=name):
                try:
                    payload = await func(*args, **kwargs)
                except ContentContextError as exc:
                    logger.warning("tool_operation_failed", error=str(exc))
                    return {"success": False, "error": str(exc)}
                except Exception as exc:  # noqa: BLE001 - boundary: every failure becomes an envelope
                    logger.error("tool_operation_error", error=str(exc), exc_info=True)
                    return {"success": False, "error": str(exc) or "Unknown error occurred"}
            return {"success": True, **payload}

        return wrapper

    return decorator


def parse_additional_fields(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    """Decode an optional JSON-object payload of extra document fields.

    Malformed input is logged and ignored (an empty dict is returned).
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("additional_fields_unparsable", error=str(exc))
        return {}
    if not isinstance(decoded, dict):
        logger.warning("additional_fields_not_object", received=type(decoded).__name__)
        return {}
    return decoded


class ContentTools:
    """Facade over the content services, one coroutine per tool.

    Parameters
    ----------
    settings:
        Application settings (connection, chunk size, search defaults).
    store:
        Optional pre-built store.  When omitted a :class:`SanityHTTPProvider`
        is built from *settings* on each call.
    http_client:
        Optional shared ``httpx.AsyncClient`` for the Sanity provider.  One is
        created lazily (and closed by :meth:`aclose`) when not supplied.
    """

    def __init__(
        self,
        settings: Settings,
        store: IDocumentStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._http = http_client
        self._owns_http = http_client is None

    async def __aenter__(self) -> ContentTools:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _get_store(self) -> IDocumentStore:
        if self._store is not None:
            return self._store
        if self._http is None:
            self._http = httpx.AsyncClient()
        return SanityHTTPProvider.from_settings(self._settings, self._http)

    def _resolver(self, store: IDocumentStore) -> FieldResolver:
        return FieldResolver(SchemaSampler(store))

    def _assembler(self, store: IDocumentStore) -> ContextAssembler:
        return ContextAssembler(
            store=store,
            chunker=TextChunker(max_size=self._settings.content_chunk_size),
            default_max_results=self._settings.max_search_results,
            default_kinds=self._settings.document_types(),
        )

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    @tool_operation("get_tool_info")
    async def get_tool_info(self) -> dict[str, Any]:
        return {
            "name": TOOL_NAME,
            "version": TOOL_VERSION,
            "description": "Tool for Sanity CMS content operations and RAG",
            "capabilities": [
                "get_tool_info - Get tool information",
                "get_document - Fetch a single document by ID",
                "query_documents - Execute GROQ queries",
                "create_document - Create new documents",
                "update_document - Update existing documents",
                "delete_document - Delete documents",
                "publish_document - Publish draft documents",
                "unpublish_document - Unpublish documents",
                "search_content - Full-text search",
                "get_document_types - List available document types",
                "resolve_field - Convert text to the field's stored shape",
                "get_rag_context - Ranked, chunked context for a query",
                "get_content_catalog - Describe kinds and their fields",
            ],
        }

    @tool_operation("get_document")
    async def get_document(self, document_id: str) -> dict[str, Any]:
        document = await self._get_store().get_document(document_id)
        if not document:
            raise DocumentNotFoundError(f'Document with ID "{document_id}" not found')
        return {"document": document}

    @tool_operation("query_documents")
    async def query_documents(self, query: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        results = await self._get_store().fetch(query, params or {})
        results = results if isinstance(results, list) else [results]
        return {"results": results, "count": len(results)}

    @tool_operation("create_document")
    async def create_document(
        self,
        document_type: str,
        document_data: dict[str, Any] | None = None,
        publish: bool = False,
        text_fields: dict[str, str] | None = None,
        additional_fields: str | None = None,
    ) -> dict[str, Any]:
        store = self._get_store()
        data = dict(document_data or {})
        data.update(parse_additional_fields(additional_fields))
        if text_fields:
            data.update(await self._resolver(store).resolve_fields(document_type, text_fields))

        base_id = str(data.pop("_id", "") or uuid.uuid4().hex)
        document_id = published_id(base_id) if publish else draft_id(base_id)
        result = await store.create({"_type": document_type, **data, "_id": document_id})
        return {"document_id": result.get("_id", document_id), "document": result}

    @tool_operation("update_document")
    async def update_document(
        self,
        document_id: str,
        updates: dict[str, Any] | None = None,
        text_fields: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        store = self._get_store()
        changes = dict(updates or {})
        if text_fields:
            existing = await store.get_document(document_id)
            if not existing:
                raise DocumentNotFoundError(f'Document with ID "{document_id}" not found')
            changes.update(await self._resolver(store).resolve_fields(existing["_type"], text_fields))
        if not changes:
            raise QueryError("No updates supplied")
        result = await store.patch(document_id, changes)
        return {"document": result}

    @tool_operation("delete_document")
    async def delete_document(self, document_id: str) -> dict[str, Any]:
        await self._get_store().delete(document_id)
        return {"deleted_id": document_id}

    @tool_operation("publish_document")
    async def publish_document(self, document_id: str) -> dict[str, Any]:
        store = self._get_store()
        source_id, target_id = draft_id(document_id), published_id(document_id)
        draft = await store.get_document(source_id)
        if not draft:
            raise DocumentNotFoundError(f'Draft document "{source_id}" not found')
        await store.replace_and_delete(self._copy_as(draft, target_id), source_id)
        return {"published_id": target_id}

    @tool_operation("unpublish_document")
    async def unpublish_document(self, document_id: str) -> dict[str, Any]:
        store = self._get_store()
        source_id, target_id = published_id(document_id), draft_id(document_id)
        published = await store.get_document(source_id)
        if not published:
            raise DocumentNotFoundError(f'Published document "{source_id}" not found')
        await store.replace_and_delete(self._copy_as(published, target_id), source_id)
        return {"draft_id": target_id}

    @tool_operation("search_content")
    async def search_content(
        self,
        search_query: str,
        document_types: list[str] | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        self._require_query(search_query)
        hits = await self._assembler(self._get_store()).search(
            search_query, kinds=document_types, limit=limit
        )
        return {"results": [h.model_dump() for h in hits], "count": len(hits)}

    @tool_operation("get_document_types")
    async def get_document_types(self) -> dict[str, Any]:
        types = await CatalogBuilder(self._get_store()).list_kinds()
        return {"types": types}

    @tool_operation("resolve_field")
    async def resolve_field(self, document_type: str, field_name: str, text: str) -> dict[str, Any]:
        field_type, value = await self._resolver(self._get_store()).resolve_with_type(
            document_type, field_name, text
        )
        return {"field_type": field_type, "value": value}

    @tool_operation("get_rag_context")
    async def get_rag_context(
        self,
        query: str,
        document_types: list[str] | None = None,
        max_results: int | None = None,
        max_chars: int = 0,
        include_metadata: bool = True,
        search_fields: list[str] | None = None,
    ) -> dict[str, Any]:
        self._require_query(query)
        result = await self._assembler(self._get_store()).assemble(
            query,
            kinds=document_types,
            max_results=max_results,
            max_chars=max_chars,
            include_metadata=include_metadata,
            search_fields=search_fields,
        )
        return {
            "query": result.query,
            "context": [b.model_dump() for b in result.blocks],
            "total_chunks": result.total_chunks,
            "total_chars": result.total_chars,
            "sources_used": result.sources_used,
        }

    @tool_operation("get_content_catalog")
    async def get_content_catalog(self, document_type: str | None = None) -> dict[str, Any]:
        builder = CatalogBuilder(self._get_store())
        if document_type:
            catalog = await builder.describe_kind(document_type, detail=True)
        else:
            catalog = await builder.summarize()
        return {"catalog": catalog.model_dump()}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _copy_as(document: dict[str, Any], new_id: str) -> dict[str, Any]:
        copy = {k: v for k, v in document.items() if k not in _COPY_EXCLUDED_FIELDS}
        copy["_id"] = new_id
        return copy

    @staticmethod
    def _require_query(query: str) -> None:
        if not query or not query.strip():
            raise QueryError("Search query must not be empty")
