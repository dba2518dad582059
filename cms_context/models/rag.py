"""RAG data models: chunks, context blocks, and search hits.

All models are frozen pydantic v2 models.  They are computed fresh per
request and never written back to the document store.

Flow for one ``get_rag_context`` call:

    1. The store ranks documents for the query   -> list[SearchHit]
    2. Each document is flattened and chunked    -> list[Chunk] per document
    3. Chunks are emitted under the char budget  -> list[ContextBlock]
    4. Blocks plus counters are returned         -> ContextResult
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    """A bounded, contiguous slice of one document's flattened text."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="0-based position within the document's group.")
    total_in_group: int = Field(ge=1, description="Number of chunks produced for the document.")
    text: str
    char_count: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_char_count(self) -> Chunk:
        if self.char_count != len(self.text):
            raise ValueError("char_count must equal len(text)")
        return self


class ContextBlock(BaseModel):
    """One ranked, attributed chunk emitted by the context assembler."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    source_kind: str
    title: str
    updated_at: str | None = None
    relevance_score: float = 0.0
    chunk_index: int = Field(ge=0)
    total_chunks: int = Field(ge=1)
    text: str
    char_count: int = Field(ge=0)


class ContextResult(BaseModel):
    """Output of a context assembly run."""

    model_config = ConfigDict(frozen=True)

    query: str
    blocks: list[ContextBlock] = Field(default_factory=list)
    total_chunks: int = Field(default=0, ge=0)
    total_chars: int = Field(default=0, ge=0)
    sources_used: int = Field(default=0, ge=0)
    max_chars: int = Field(default=0, ge=0, description="Requested budget; 0 means unlimited.")


class SearchHit(BaseModel):
    """A ranked document returned by the boosted full-text search."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: str
    score: float = 0.0
    title: str | None = None
    slug: str | None = None
    description: str | None = None
    excerpt: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_store(cls, record: dict[str, Any]) -> SearchHit:
        """Build a hit from a search-projection record (``_id``, ``_score``...)."""
        slug = record.get("slug")
        if isinstance(slug, dict):
            slug = slug.get("current")
        return cls(
            id=record["_id"],
            kind=record.get("_type", ""),
            score=float(record.get("_score") or 0.0),
            title=_text(record.get("title")) or _text(record.get("name")),
            slug=_text(slug),
            description=_text(record.get("description")),
            excerpt=_text(record.get("excerpt")),
            updated_at=_text(record.get("_updatedAt")),
        )


def _text(value: Any) -> str | None:
    # Localized or structured values (e.g. {"en": ..., "de": ...}) are not display text.
    return value if isinstance(value, str) and value else None
