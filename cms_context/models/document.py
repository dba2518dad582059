"""Document-shape models for the content lake.

A document is a JSON mapping of field names to values.  Fields prefixed with
an underscore (``_id``, ``_type``, ``_rev``, ``_createdAt``, ``_updatedAt``)
are system fields owned by the store.  Rich text is stored as Portable Text:
an ordered list of ``block`` nodes, each holding ``span`` children.

The models here describe the pieces this package *builds* (rich-text blocks
on the write path, flatten projections on the read path).  Documents read
from the store stay plain ``dict`` objects.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Closed set of JSON value shapes a document field can hold.
FieldValue = Union[str, int, float, bool, None, dict[str, Any], list[Any]]
Document = dict[str, FieldValue]

DRAFT_PREFIX = "drafts."

SYSTEM_FIELDS = frozenset({"_id", "_type", "_rev", "_createdAt", "_updatedAt"})


class FieldType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Fixed semantic type tags produced by the field classifier.

    The classifier may also return open-ended tags that are not members of
    this enum: ``array-of-<kind>`` for typed arrays and a mapping's own
    ``_type`` for custom objects.  All tags compare equal to plain strings.
    """

    STRING = "string"
    DATETIME = "datetime"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SLUG = "slug"
    IMAGE = "image"
    REFERENCE = "reference"
    ARRAY = "array"
    ARRAY_OF_REFERENCE = "array-of-reference"
    RICH_TEXT = "rich-text"
    OBJECT = "object"
    UNKNOWN = "unknown"


def is_system_field(name: str) -> bool:
    """Return ``True`` for store-owned fields (anything starting with ``_``)."""
    return name.startswith("_")


def is_draft(document_id: str) -> bool:
    return document_id.startswith(DRAFT_PREFIX)


def published_id(document_id: str) -> str:
    """Strip the draft prefix, if present."""
    if is_draft(document_id):
        return document_id[len(DRAFT_PREFIX):]
    return document_id


def draft_id(document_id: str) -> str:
    """Return the draft identity for *document_id* (idempotent)."""
    return f"{DRAFT_PREFIX}{published_id(document_id)}"


# ---------------------------------------------------------------------------
# Portable Text write-path models
# ---------------------------------------------------------------------------
class RichTextSpan(BaseModel):
    """One inline run of text inside a block."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(default="span", alias="_type")
    key: str = Field(alias="_key")
    text: str
    marks: list[str] = Field(default_factory=list)


class RichTextBlock(BaseModel):
    """One paragraph-level block node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = Field(default="block", alias="_type")
    key: str = Field(alias="_key")
    style: str = "normal"
    mark_defs: list[dict[str, Any]] = Field(default_factory=list, alias="markDefs")
    children: list[RichTextSpan] = Field(default_factory=list)

    def to_store(self) -> dict[str, Any]:
        """Serialize with the store's wire keys (``_type``, ``_key``, ``markDefs``)."""
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Read-path projection
# ---------------------------------------------------------------------------
class FlattenProjection(BaseModel):
    """Request for server-side rich-text flattening.

    ``derived`` maps each derived key (``bodyText``) to the rich-text field
    it flattens (``body``).  An empty mapping is a pass-through projection.
    """

    model_config = ConfigDict(frozen=True)

    derived: dict[str, str] = Field(default_factory=dict)

    @property
    def is_passthrough(self) -> bool:
        return not self.derived

    def to_groq(self) -> str:
        """Render as a GROQ projection, e.g. ``{..., "bodyText": pt::text(body)}``."""
        if self.is_passthrough:
            return "{...}"
        computed = ", ".join(
            f'"{derived_key}": pt::text({source})' for derived_key, source in self.derived.items()
        )
        return f"{{..., {computed}}}"

    def split(self, record: dict[str, Any]) -> tuple[Document, dict[str, str]]:
        """Separate derived keys from a projected record.

        Returns the document without derived keys, plus a mapping of
        source field name -> flattened text for every derived key present.
        """
        document = {k: v for k, v in record.items() if k not in self.derived}
        flat_fields: dict[str, str] = {}
        for derived_key, source in self.derived.items():
            value = record.get(derived_key)
            if isinstance(value, str):
                flat_fields[source] = value
        return document, flat_fields
