"""Shared pytest fixtures for the cms-context test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from cms_context.config.settings import Settings

# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


def make_block(text: str, key: str = "b0") -> dict[str, Any]:
    """Build one Portable Text block with a single unmarked span."""
    return {
        "_type": "block",
        "_key": key,
        "style": "normal",
        "markDefs": [],
        "children": [{"_type": "span", "_key": f"{key}s", "text": text, "marks": []}],
    }


@pytest.fixture
def sample_post() -> dict[str, Any]:
    """A published post with every field shape the pipeline has to handle."""
    return {
        "_id": "post-1",
        "_type": "post",
        "_rev": "rev-1",
        "_createdAt": "2024-01-10T09:00:00Z",
        "_updatedAt": "2024-01-15T10:00:00Z",
        "title": "Getting started with the API",
        "slug": {"_type": "slug", "current": "getting-started"},
        "description": "A short tour of authentication and queries.",
        "publishedAt": "2024-01-15T10:00:00Z",
        "views": 42,
        "featured": True,
        "mainImage": {"_type": "image", "asset": {"_ref": "image-abc-200x200-png", "_type": "reference"}},
        "author": {"_type": "reference", "_ref": "author-1"},
        "body": [
            make_block("Create a token in the management console.", "b0"),
            make_block("Send it as a bearer token with every request.", "b1"),
        ],
    }


@pytest.fixture
def sample_author() -> dict[str, Any]:
    return {
        "_id": "author-1",
        "_type": "author",
        "_updatedAt": "2023-11-02T08:30:00Z",
        "name": "Ada Writer",
        "bio": [make_block("Ada writes the developer docs.")],
        "photo": {"asset": {"_ref": "image-def", "_type": "reference"}},
    }


@pytest.fixture
def sample_book_text() -> str:
    """Multi-paragraph prose for chunker tests."""
    return (
        "Structured content treats every piece of text as data. Editors write "
        "once and the same content is delivered to web pages, apps and voice "
        "assistants without copy and paste.\n\n"
        "Portable Text is the rich-text format used for that content. It stores "
        "paragraphs as blocks and inline formatting as marks on spans, which "
        "keeps the text queryable and renderer-agnostic.\n\n"
        "Queries select documents with filters and reshape them with "
        "projections. A projection can compute new keys on the server, such as "
        "a plain-text rendering of a rich-text field.\n\n"
        "Retrieval pipelines need plain text in predictable sizes. Chunking "
        "splits long documents at paragraph and sentence boundaries so each "
        "piece fits the model's context budget."
    )


# ---------------------------------------------------------------------------
# Settings / store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings that never touch the environment's .env."""
    return Settings(
        _env_file=None,
        sanity_project_id="proj123",
        sanity_dataset="production",
        sanity_api_token="sk-test",
        content_chunk_size=200,
        max_search_results=25,
    )


@pytest.fixture
def mock_store() -> AsyncMock:
    """An AsyncMock standing in for IDocumentStore; tests set return values."""
    store = AsyncMock()
    store.get_document = AsyncMock(return_value=None)
    store.fetch = AsyncMock(return_value=[])
    store.count = AsyncMock(return_value=0)
    store.create = AsyncMock(side_effect=lambda doc: {**doc, "_rev": "rev-new"})
    store.patch = AsyncMock(side_effect=lambda doc_id, fields: {"_id": doc_id, **fields})
    store.delete = AsyncMock(return_value=None)
    store.replace_and_delete = AsyncMock(side_effect=lambda doc, delete_id: doc)
    return store
