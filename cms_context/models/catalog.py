"""Content catalog models: what kinds exist and what their fields look like."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FieldInfo(BaseModel):
    """A field name with the first non-``unknown`` type seen across samples."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str


class SampleDocument(BaseModel):
    """A representative document, reduced to identity and title."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str | None = None
    updated_at: str | None = None


class KindCatalog(BaseModel):
    """Field and freshness report for one document kind."""

    model_config = ConfigDict(frozen=True)

    kind: str
    total_documents: int = Field(default=0, ge=0)
    fields: list[FieldInfo] = Field(default_factory=list)
    searchable_fields: list[str] = Field(default_factory=list)
    earliest_update: str | None = None
    latest_update: str | None = None
    samples: list[SampleDocument] = Field(default_factory=list)
    # Only computed in single-kind detail mode.
    avg_text_length: int | None = None


class ContentCatalog(BaseModel):
    """Summary across every document kind in the dataset."""

    model_config = ConfigDict(frozen=True)

    kinds: list[KindCatalog] = Field(default_factory=list)
    total_documents: int = Field(default=0, ge=0)
