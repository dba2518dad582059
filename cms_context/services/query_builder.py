"""GROQ query templates used by the services.

Queries are assembled from fixed templates; user-supplied *values* are
always bound through ``$params``.  Field names cannot be bound in GROQ, so
any caller-supplied field name is checked against :data:`IDENTIFIER`
before it is spliced into a query.

Relevance boosts (title/name > description > body-like fields) only have
to preserve that ordering; the exact multipliers are tunable.
"""

from __future__ import annotations

import re

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

TITLE_FIELDS: tuple[str, ...] = ("title", "name")
DESCRIPTION_FIELDS: tuple[str, ...] = ("description",)
BODY_FIELDS: tuple[str, ...] = ("body", "content", "text")

TITLE_BOOST = 3
DESCRIPTION_BOOST = 2

# Kinds owned by the studio / platform, hidden from catalogs.
_SYSTEM_KIND_FILTER = '!(_type match "system.*") && !(_type match "sanity.*")'

SEARCH_PROJECTION = """{
  _id,
  _type,
  _score,
  _updatedAt,
  title,
  name,
  slug,
  description,
  "excerpt": coalesce(description, pt::text(body[0..2]), pt::text(content[0..2]))
}"""


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER.match(name))


def search_term(query: str) -> str:
    """Wrap a free-text query as a GROQ ``match`` wildcard pattern."""
    return f"*{query.strip()}*"


def kind_filter(kinds: list[str] | None) -> tuple[str, dict[str, list[str]]]:
    """Return a ``_type in $kinds`` clause (with trailing ``&&``) and its params."""
    if not kinds:
        return "", {}
    return "_type in $kinds && ", {"kinds": list(kinds)}


def search_query(
    limit: int,
    kinds: list[str] | None = None,
    extra_fields: list[str] | None = None,
    projection: str = SEARCH_PROJECTION,
) -> tuple[str, dict[str, object]]:
    """Build the boosted full-text search query.

    *extra_fields* extend the body-like baseline set; names that are not
    plain identifiers are dropped.  The caller binds ``$searchTerm``.
    """
    body_fields = list(BODY_FIELDS)
    for field in extra_fields or []:
        if is_identifier(field) and field not in body_fields and field not in TITLE_FIELDS + DESCRIPTION_FIELDS:
            body_fields.append(field)

    all_fields = ", ".join([*TITLE_FIELDS, *DESCRIPTION_FIELDS, *body_fields])
    type_clause, params = kind_filter(kinds)
    query = (
        f"*[{type_clause}[{all_fields}] match $searchTerm] | score("
        f"boost([{', '.join(TITLE_FIELDS)}] match $searchTerm, {TITLE_BOOST}), "
        f"boost([{', '.join(DESCRIPTION_FIELDS)}] match $searchTerm, {DESCRIPTION_BOOST}), "
        f"[{', '.join(body_fields)}] match $searchTerm"
        f") | order(_score desc) [0...{int(limit)}] {projection}"
    )
    return query, dict(params)


def documents_by_ids_query(projection: str) -> str:
    """Fetch full records for ``$ids`` with the given projection."""
    return f"*[_id in $ids] {projection}"


def field_sample_query(field: str, limit: int = 3) -> str:
    """Sample values of *field* from documents of kind ``$kind``.

    *field* must already be validated with :func:`is_identifier`.
    """
    return f'*[_type == $kind && defined({field})][0...{int(limit)}]{{"value": {field}}}'


def recent_documents_query(limit: int) -> str:
    """Most recently updated documents of kind ``$kind``."""
    return f"*[_type == $kind] | order(_updatedAt desc) [0...{int(limit)}]"


def update_range_query() -> str:
    """Earliest and latest ``_updatedAt`` for kind ``$kind`` in one round-trip."""
    return (
        "{"
        '"earliest": *[_type == $kind] | order(_updatedAt asc) [0]._updatedAt, '
        '"latest": *[_type == $kind] | order(_updatedAt desc) [0]._updatedAt'
        "}"
    )


def document_kinds_query() -> str:
    """Every non-system document's ``_type`` (one row per document)."""
    return f"*[{_SYSTEM_KIND_FILTER}] {{ _type }} | order(_type asc)"
