"""Classify a single sampled field value into a semantic type tag.

The classifier is a fixed-priority match over the closed set of JSON value
shapes.  It never raises: any input, including ``None``, yields a tag.

Order of checks:

1. ``None``                        -> ``unknown``
2. ``str``  with ISO-date prefix   -> ``datetime``, otherwise ``string``
3. ``bool``                        -> ``boolean`` (before numbers: bool is an int)
4. whole number                    -> ``integer``, other numbers -> ``number``
5. ``list``: empty -> ``array``; first item ``_type`` ``block`` -> ``rich-text``;
   ``reference`` -> ``array-of-reference``; else ``array-of-<_type|objects>``
6. ``dict``: ``_type`` ``slug``/``image``/``reference`` -> that tag; an
   ``asset`` sub-mapping -> ``image``; else its ``_type`` or ``object``
"""

from __future__ import annotations

import re
from typing import Any

from cms_context.models.document import FieldType

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2})?")

_DISCRIMINATOR = "_type"


def _discriminator(value: Any) -> str | None:
    if isinstance(value, dict):
        tag = value.get(_DISCRIMINATOR)
        if isinstance(tag, str) and tag:
            return tag
    return None


def _classify_sequence(value: list[Any]) -> str:
    if not value:
        return FieldType.ARRAY.value
    tag = _discriminator(value[0])
    if tag == "block":
        return FieldType.RICH_TEXT.value
    if tag == "reference":
        return FieldType.ARRAY_OF_REFERENCE.value
    return f"array-of-{tag or 'objects'}"


def _classify_mapping(value: dict[str, Any]) -> str:
    tag = _discriminator(value)
    if tag in (FieldType.SLUG.value, FieldType.IMAGE.value, FieldType.REFERENCE.value):
        return tag
    if isinstance(value.get("asset"), dict):
        return FieldType.IMAGE.value
    return tag or FieldType.OBJECT.value


def classify(value: Any) -> str:
    """Return the type tag for one field value.

    >>> classify("2024-01-15T10:00:00Z")
    'datetime'
    >>> classify({"_type": "slug", "current": "my-post"})
    'slug'
    """
    if value is None:
        return FieldType.UNKNOWN.value
    if isinstance(value, str):
        return FieldType.DATETIME.value if _ISO_DATE.match(value) else FieldType.STRING.value
    if isinstance(value, bool):
        return FieldType.BOOLEAN.value
    if isinstance(value, int):
        return FieldType.INTEGER.value
    if isinstance(value, float):
        return FieldType.INTEGER.value if value.is_integer() else FieldType.NUMBER.value
    if isinstance(value, list):
        return _classify_sequence(value)
    if isinstance(value, dict):
        return _classify_mapping(value)
    return FieldType.UNKNOWN.value
