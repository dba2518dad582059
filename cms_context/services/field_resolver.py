"""Decide how plain text should be written into a document field.

A field like ``body`` may be Portable Text in one dataset and a plain
string in another.  The resolver never guesses from the field name; it asks
the :class:`SchemaSampler` what existing documents of the same kind store
there, encodes to rich text only when they store rich text, and otherwise
passes the string through unchanged.  With no existing data the field is
treated as a plain string.
"""

from __future__ import annotations

from typing import Any

import structlog

from cms_context.models.document import FieldType
from cms_context.services.rich_text import to_rich_text
from cms_context.services.schema_sampler import SchemaSampler
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)


class FieldResolver:
    """Routes text values through the rich-text encoder when the schema calls for it."""

    def __init__(self, sampler: SchemaSampler) -> None:
        self._sampler = sampler

    async def resolve(self, kind: str, field: str, text: str) -> str | list[dict[str, Any]]:
        """Return *text* as stored in ``kind.field``: a string or a block list."""
        _, value = await self.resolve_with_type(kind, field, text)
        return value

    async def resolve_with_type(
        self, kind: str, field: str, text: str
    ) -> tuple[str, str | list[dict[str, Any]]]:
        """Like :meth:`resolve`, also returning the sampled type tag."""
        field_type = await self._sampler.infer_field_type(kind, field)
        if field_type == FieldType.RICH_TEXT.value:
            logger.debug("field_resolved_rich_text", kind=kind, field=field)
            return field_type, to_rich_text(text)
        return field_type, text

    async def resolve_fields(self, kind: str, fields: dict[str, str]) -> dict[str, Any]:
        """Resolve several text fields of one document, preserving key order."""
        resolved: dict[str, Any] = {}
        for field, text in fields.items():
            resolved[field] = await self.resolve(kind, field, text)
        return resolved
