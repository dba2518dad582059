"""Assemble ranked, budgeted LLM context from content-lake documents.

Data flow for one :meth:`ContextAssembler.assemble` call:

  1. RANK     -- boosted full-text search returns up to N hits, best first.
  2. PROJECT  -- the first hit's shape decides which rich-text fields the
                 store should flatten server-side (best effort).
  3. FETCH    -- full records for every ranked id in a single query.
  4. FLATTEN  -- each record becomes labelled plain text; empty ones drop out.
  5. CHUNK    -- each document is chunked independently.
  6. PACK     -- chunks are emitted in rank order, then chunk order, until
                 the global character budget is spent.

Steps 1 and 3 are the only hard dependencies on the store: if either fails
the whole call fails and no partial result is returned.  Budget accounting
lives in :func:`pack_blocks`, a pure fold that is independent of chunking.
"""

from __future__ import annotations

from typing import Any

import structlog

from cms_context.interfaces.document_store import IDocumentStore
from cms_context.models.document import FlattenProjection
from cms_context.models.rag import Chunk, ContextBlock, ContextResult, SearchHit
from cms_context.services import query_builder
from cms_context.services.chunker import ELLIPSIS, TextChunker
from cms_context.services.rich_text import build_flatten_projection, flatten_document
from cms_context.utils.errors import QueryError
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

# Hard ceiling on ranked sources per call, whatever the caller asks for.
MAX_SOURCES = 20


def metadata_header(kind: str, title: str, source_id: str) -> str:
    """One-line attribution prefixed to a document's first chunk."""
    return f"[{kind}] {title} (id: {source_id})\n"


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, ending in an ellipsis when there is room."""
    if len(text) <= limit:
        return text
    if limit > len(ELLIPSIS):
        return text[: limit - len(ELLIPSIS)] + ELLIPSIS
    return text[:limit]


def pack_blocks(candidates: list[ContextBlock], max_chars: int) -> list[ContextBlock]:
    """Emit *candidates* in order until *max_chars* is spent.

    A block that only partially fits is truncated with an ellipsis and ends
    the emission.  ``max_chars <= 0`` means no budget.
    """
    if max_chars <= 0:
        return list(candidates)

    emitted: list[ContextBlock] = []
    remaining = max_chars
    for block in candidates:
        if remaining <= 0:
            break
        if block.char_count <= remaining:
            emitted.append(block)
            remaining -= block.char_count
            continue
        text = truncate(block.text, remaining)
        emitted.append(block.model_copy(update={"text": text, "char_count": len(text)}))
        break
    return emitted


def _document_title(record: dict[str, Any], hit: SearchHit) -> str:
    for key in ("title", "name"):
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return hit.title or hit.id


class ContextAssembler:
    """Builds :class:`ContextResult` objects for natural-language queries.

    Parameters
    ----------
    store:
        Document store used for ranking and fetching.
    chunker:
        Chunker configured with the content chunk size.
    default_max_results:
        Number of sources used when the caller does not specify one.
    default_kinds:
        Document kinds searched when the caller does not restrict them.
    """

    def __init__(
        self,
        store: IDocumentStore,
        chunker: TextChunker,
        default_max_results: int = MAX_SOURCES,
        default_kinds: list[str] | None = None,
    ) -> None:
        self._store = store
        self._chunker = chunker
        self._default_max_results = default_max_results
        self._default_kinds = list(default_kinds or [])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        kinds: list[str] | None = None,
        limit: int | None = None,
        search_fields: list[str] | None = None,
    ) -> list[SearchHit]:
        """Run the boosted full-text search and return hits by descending score."""
        limit = limit if limit and limit > 0 else self._default_max_results
        groq, params = query_builder.search_query(
            limit=limit,
            kinds=kinds if kinds else self._default_kinds,
            extra_fields=search_fields,
        )
        params["searchTerm"] = query_builder.search_term(query)
        results = await self._store.fetch(groq, params)
        if not isinstance(results, list):
            return []
        hits = [SearchHit.from_store(r) for r in results if isinstance(r, dict) and r.get("_id")]
        return hits[:limit]

    async def assemble(
        self,
        query: str,
        kinds: list[str] | None = None,
        max_results: int | None = None,
        max_chars: int = 0,
        include_metadata: bool = True,
        search_fields: list[str] | None = None,
    ) -> ContextResult:
        """Rank, flatten, chunk and pack documents matching *query*.

        Raises
        ------
        QueryError
            If ranking or fetching fails.  No partial result is returned.
        """
        requested = max_results if max_results and max_results > 0 else self._default_max_results
        limit = min(requested, MAX_SOURCES)
        budget = max(0, max_chars or 0)

        hits = await self.search(query, kinds=kinds, limit=limit, search_fields=search_fields)
        if not hits:
            logger.info("context_no_matches", query=query)
            return ContextResult(query=query, max_chars=budget)

        projection = await self._seed_projection(hits[0].id)
        records = await self._fetch_records([h.id for h in hits], projection)

        candidates: list[ContextBlock] = []
        for hit in hits:
            record = records.get(hit.id)
            if record is None:
                continue
            document, flat_fields = projection.split(record)
            text = flatten_document(document, flat_fields)
            if not text:
                continue
            candidates.extend(
                self._to_blocks(hit, record, self._chunker.chunk(text), include_metadata)
            )

        blocks = pack_blocks(candidates, budget)
        result = ContextResult(
            query=query,
            blocks=blocks,
            total_chunks=len(blocks),
            total_chars=sum(b.char_count for b in blocks),
            sources_used=len({b.source_id for b in blocks}),
            max_chars=budget,
        )
        logger.info(
            "context_assembled",
            query=query,
            ranked=len(hits),
            candidates=len(candidates),
            chunks=result.total_chunks,
            chars=result.total_chars,
            sources=result.sources_used,
        )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _seed_projection(self, document_id: str) -> FlattenProjection:
        """Derive the flatten projection from one document; pass-through on failure."""
        try:
            seed = await self._store.get_document(document_id)
        except Exception as exc:  # noqa: BLE001 - local flattening still works
            logger.warning("flatten_projection_seed_failed", document_id=document_id, error=str(exc))
            return FlattenProjection()
        if not seed:
            return FlattenProjection()
        return build_flatten_projection(seed)

    async def _fetch_records(
        self, ids: list[str], projection: FlattenProjection
    ) -> dict[str, dict[str, Any]]:
        groq = query_builder.documents_by_ids_query(projection.to_groq())
        records = await self._store.fetch(groq, {"ids": ids})
        if records is None:
            return {}
        if not isinstance(records, list):
            raise QueryError("Unexpected response shape when fetching documents")
        return {r["_id"]: r for r in records if isinstance(r, dict) and r.get("_id")}

    @staticmethod
    def _to_blocks(
        hit: SearchHit,
        record: dict[str, Any],
        chunks: list[Chunk],
        include_metadata: bool,
    ) -> list[ContextBlock]:
        title = _document_title(record, hit)
        kind = record.get("_type") or hit.kind
        blocks: list[ContextBlock] = []
        for chunk in chunks:
            text = chunk.text
            if include_metadata and chunk.index == 0:
                text = metadata_header(kind, title, hit.id) + text
            blocks.append(
                ContextBlock(
                    source_id=hit.id,
                    source_kind=kind,
                    title=title,
                    updated_at=record.get("_updatedAt") or hit.updated_at,
                    relevance_score=hit.score,
                    chunk_index=chunk.index,
                    total_chunks=chunk.total_in_group,
                    text=text,
                    char_count=len(text),
                )
            )
        return blocks
