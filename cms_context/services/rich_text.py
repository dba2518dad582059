"""Portable Text codec: plain text in, plain text out.

Write path
    :func:`to_rich_text` turns plain text into a list of ``block`` nodes, one
    per blank-line separated paragraph, each with a single unmarked span.

Read path
    :func:`flatten_document` reduces a whole document to labelled plain-text
    sections (``"Title: ..."``, ``"Body: ..."``) joined by blank lines.
    Rich-text fields are taken from server-side flattened text when the
    store computed it (see :func:`build_flatten_projection`), otherwise they
    are flattened locally from their spans.

Both directions are lossy: marks, styles, annotations and embedded objects
are dropped.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from cms_context.models.document import (
    FieldType,
    FlattenProjection,
    RichTextBlock,
    RichTextSpan,
    is_system_field,
)
from cms_context.services import query_builder
from cms_context.services.field_classifier import classify

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

SECTION_SEPARATOR = "\n\n"
DERIVED_SUFFIX = "Text"


def format_label(name: str) -> str:
    """``"meta_description"`` -> ``"Meta description"``."""
    label = name.replace("_", " ")
    return label[:1].upper() + label[1:]


def to_rich_text(text: str) -> list[dict[str, Any]]:
    """Encode *text* as Portable Text blocks ready to be stored."""
    blocks: list[RichTextBlock] = []
    for paragraph in _PARAGRAPH_BREAK.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        n = len(blocks)
        blocks.append(
            RichTextBlock(
                key=f"block{n}",
                children=[RichTextSpan(key=f"span{n}", text=paragraph)],
            )
        )
    return [block.to_store() for block in blocks]


def rich_text_to_plain(blocks: list[Any]) -> str:
    """Concatenate span text per block; blocks are separated by a blank line.

    Non-block items (images, embeds) and non-text children are skipped.
    """
    paragraphs: list[str] = []
    for block in blocks:
        if not isinstance(block, dict) or block.get("_type") != "block":
            continue
        spans = block.get("children") or []
        text = "".join(
            span.get("text", "") for span in spans if isinstance(span, dict) and isinstance(span.get("text"), str)
        )
        if text.strip():
            paragraphs.append(text.strip())
    return SECTION_SEPARATOR.join(paragraphs)


def _section(name: str, value: Any, flat_fields: Mapping[str, str]) -> str | None:
    if name in flat_fields:
        text = flat_fields[name].strip()
        return f"{format_label(name)}: {text}" if text else None

    if isinstance(value, str):
        text = value.strip()
        return f"{format_label(name)}: {text}" if text else None

    field_type = classify(value)
    if field_type == FieldType.SLUG.value:
        current = value.get("current") if isinstance(value, dict) else None
        if isinstance(current, str) and current.strip():
            return f"{format_label(name)}: {current.strip()}"
        return None
    if field_type == FieldType.RICH_TEXT.value:
        text = rich_text_to_plain(value)
        return f"{format_label(name)}: {text}" if text else None

    # Images, references, numbers and nested objects carry no prose.
    return None


def flatten_document(document: Mapping[str, Any], flat_fields: Mapping[str, str] | None = None) -> str:
    """Flatten a document into labelled plain-text sections.

    Parameters
    ----------
    document:
        The stored document.  System fields (``_id``, ``_type``...) are skipped.
    flat_fields:
        Precomputed flattened text keyed by the *source* field name, as
        returned by :meth:`FlattenProjection.split`.

    Returns
    -------
    str
        Sections in field order joined by blank lines; empty if the
        document has no textual content.
    """
    flat_fields = flat_fields or {}
    sections: list[str] = []
    for name, value in document.items():
        if is_system_field(name):
            continue
        section = _section(name, value, flat_fields)
        if section:
            sections.append(section)
    return SECTION_SEPARATOR.join(sections)


def build_flatten_projection(document: Mapping[str, Any]) -> FlattenProjection:
    """Ask the store to flatten every rich-text field of *document*'s shape.

    Each ``rich-text`` field ``body`` becomes a derived key ``bodyText``
    computed with ``pt::text(body)``.  Documents without rich text get a
    pass-through projection.
    """
    derived: dict[str, str] = {}
    for name, value in document.items():
        if is_system_field(name) or not query_builder.is_identifier(name):
            continue
        if classify(value) == FieldType.RICH_TEXT.value:
            derived[f"{name}{DERIVED_SUFFIX}"] = name
    return FlattenProjection(derived=derived)
