"""Best-effort field type discovery by sampling existing documents.

The content lake has no queryable schema, so the only evidence of a
field's type is the data already stored in it.  :class:`SchemaSampler`
fetches a few documents of the requested kind where the field is defined
and classifies the first sample.

Sampling is advisory: any failure (bad field name, empty dataset, store
error) is logged and reported as ``unknown``, never raised.
"""

from __future__ import annotations

import structlog

from cms_context.interfaces.document_store import IDocumentStore
from cms_context.models.document import FieldType
from cms_context.services import query_builder
from cms_context.services.field_classifier import classify
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

SAMPLE_SIZE = 3


class SchemaSampler:
    """Infers a field's dominant type from sampled documents.

    Parameters
    ----------
    store:
        Document store to sample from.
    sample_size:
        Maximum number of documents fetched per inference.
    """

    def __init__(self, store: IDocumentStore, sample_size: int = SAMPLE_SIZE) -> None:
        self._store = store
        self._sample_size = sample_size

    async def infer_field_type(self, kind: str, field: str) -> str:
        """Return the type tag of *field* on documents of *kind*.

        Returns ``"unknown"`` when there are no samples or sampling fails.
        """
        if not query_builder.is_identifier(field):
            logger.warning("schema_sampling_invalid_field", kind=kind, field=field)
            return FieldType.UNKNOWN.value

        try:
            samples = await self._store.fetch(
                query_builder.field_sample_query(field, self._sample_size),
                {"kind": kind},
            )
        except Exception as exc:  # noqa: BLE001 - sampling must never fail the caller
            logger.warning("schema_sampling_failed", kind=kind, field=field, error=str(exc))
            return FieldType.UNKNOWN.value

        if not samples or not isinstance(samples, list):
            logger.debug("schema_sampling_empty", kind=kind, field=field)
            return FieldType.UNKNOWN.value

        first = samples[0]
        value = first.get("value") if isinstance(first, dict) else None
        field_type = classify(value)
        logger.debug("schema_sampled", kind=kind, field=field, field_type=field_type, samples=len(samples))
        return field_type
