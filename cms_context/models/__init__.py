"""Pydantic v2 models shared across cms-context."""

from cms_context.models.catalog import ContentCatalog, FieldInfo, KindCatalog, SampleDocument
from cms_context.models.document import (
    DRAFT_PREFIX,
    Document,
    FieldType,
    FlattenProjection,
    RichTextBlock,
    RichTextSpan,
    draft_id,
    is_draft,
    is_system_field,
    published_id,
)
from cms_context.models.rag import Chunk, ContextBlock, ContextResult, SearchHit

__all__ = [
    "DRAFT_PREFIX",
    "Chunk",
    "ContentCatalog",
    "ContextBlock",
    "ContextResult",
    "Document",
    "FieldInfo",
    "FieldType",
    "FlattenProjection",
    "KindCatalog",
    "RichTextBlock",
    "RichTextSpan",
    "SampleDocument",
    "SearchHit",
    "draft_id",
    "is_draft",
    "is_system_field",
    "published_id",
]
