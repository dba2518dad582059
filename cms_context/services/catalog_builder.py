"""Describe what content exists: kinds, fields, searchable fields, freshness.

Detail mode (:meth:`CatalogBuilder.describe_kind`) samples the five most
recently updated documents of one kind and additionally reports the average
flattened-text length of the three newest.  Summary mode
(:meth:`CatalogBuilder.summarize`) lists every non-system kind and samples
them concurrently, skipping the text-length pass.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

import structlog

from cms_context.interfaces.document_store import IDocumentStore
from cms_context.models.catalog import ContentCatalog, FieldInfo, KindCatalog, SampleDocument
from cms_context.models.document import FieldType, is_system_field
from cms_context.services import query_builder
from cms_context.services.field_classifier import classify
from cms_context.services.rich_text import flatten_document
from cms_context.utils.concurrency import raise_first_error, throttled_gather
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

SAMPLE_SIZE = 5
TEXT_LENGTH_SAMPLES = 3

_SEARCHABLE_TYPES = frozenset({FieldType.STRING.value, FieldType.RICH_TEXT.value})


def infer_fields(samples: list[dict[str, Any]]) -> dict[str, str]:
    """Map each field name to the first non-``unknown`` type seen across *samples*."""
    types: dict[str, str] = {}
    for document in samples:
        for name, value in document.items():
            field_type = classify(value)
            if types.get(name, FieldType.UNKNOWN.value) == FieldType.UNKNOWN.value:
                types[name] = field_type
    return types


def _sample_title(document: dict[str, Any]) -> str | None:
    for key in ("title", "name"):
        value = document.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def average_text_length(samples: list[dict[str, Any]]) -> int:
    if not samples:
        return 0
    return round(sum(len(flatten_document(d)) for d in samples) / len(samples))


class CatalogBuilder:
    """Builds catalog reports from sampled documents."""

    def __init__(self, store: IDocumentStore, sample_size: int = SAMPLE_SIZE) -> None:
        self._store = store
        self._sample_size = sample_size

    async def list_kinds(self) -> list[dict[str, Any]]:
        """Return ``[{"type": kind, "count": n}, ...]`` for non-system kinds, sorted by kind."""
        rows = await self._store.fetch(query_builder.document_kinds_query())
        counts = Counter(r["_type"] for r in rows or [] if isinstance(r, dict) and r.get("_type"))
        return [{"type": kind, "count": counts[kind]} for kind in sorted(counts)]

    async def describe_kind(self, kind: str, detail: bool = True) -> KindCatalog:
        """Sample *kind* and report its fields; *detail* adds the text-length average."""
        params = {"kind": kind}
        total, update_range, samples = raise_first_error(
            await asyncio.gather(
                self._store.count("_type == $kind", params),
                self._store.fetch(query_builder.update_range_query(), params),
                self._store.fetch(query_builder.recent_documents_query(self._sample_size), params),
                return_exceptions=True,
            )
        )
        samples = [s for s in samples or [] if isinstance(s, dict)]
        update_range = update_range if isinstance(update_range, dict) else {}

        field_types = infer_fields(samples)
        fields = [FieldInfo(name=name, type=field_types[name]) for name in sorted(field_types)]
        searchable = [
            f.name for f in fields if not is_system_field(f.name) and f.type in _SEARCHABLE_TYPES
        ]

        catalog = KindCatalog(
            kind=kind,
            total_documents=int(total or 0),
            fields=fields,
            searchable_fields=searchable,
            earliest_update=update_range.get("earliest"),
            latest_update=update_range.get("latest"),
            samples=[
                SampleDocument(
                    id=s.get("_id", ""),
                    title=_sample_title(s),
                    updated_at=s.get("_updatedAt"),
                )
                for s in samples
            ],
            avg_text_length=average_text_length(samples[:TEXT_LENGTH_SAMPLES]) if detail else None,
        )
        logger.debug("kind_described", kind=kind, fields=len(fields), samples=len(samples))
        return catalog

    async def summarize(self) -> ContentCatalog:
        """Describe every non-system kind concurrently."""
        kinds = await self.list_kinds()
        reports = raise_first_error(
            await throttled_gather([self.describe_kind(k["type"], detail=False) for k in kinds])
        )
        total = sum(r.total_documents for r in reports)
        logger.info("catalog_summarized", kinds=len(reports), total_documents=total)
        return ContentCatalog(kinds=list(reports), total_documents=total)
