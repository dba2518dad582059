"""Unit tests for document, RAG and catalog models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cms_context.models.catalog import FieldInfo, KindCatalog
from cms_context.models.document import (
    FieldType,
    RichTextBlock,
    RichTextSpan,
    draft_id,
    is_draft,
    is_system_field,
    published_id,
)
from cms_context.models.rag import Chunk, ContextBlock, SearchHit
from cms_context.utils.errors import ContentContextError, DocumentNotFoundError, QueryError


class TestDocumentIds:
    def test_draft_and_published_ids(self) -> None:
        assert draft_id("abc") == "drafts.abc"
        assert draft_id("drafts.abc") == "drafts.abc"
        assert published_id("drafts.abc") == "abc"
        assert published_id("abc") == "abc"
        assert is_draft("drafts.abc")
        assert not is_draft("abc")

    def test_system_fields(self) -> None:
        assert is_system_field("_updatedAt")
        assert not is_system_field("title")


class TestFieldType:
    def test_tags_compare_as_strings(self) -> None:
        assert FieldType.RICH_TEXT == "rich-text"
        assert FieldType.ARRAY_OF_REFERENCE.value == "array-of-reference"


class TestRichTextModels:
    def test_wire_keys(self) -> None:
        block = RichTextBlock(key="b0", children=[RichTextSpan(key="s0", text="Hi")])
        assert block.to_store() == {
            "_type": "block",
            "_key": "b0",
            "style": "normal",
            "markDefs": [],
            "children": [{"_type": "span", "_key": "s0", "text": "Hi", "marks": []}],
        }

    def test_frozen(self) -> None:
        span = RichTextSpan(key="s0", text="Hi")
        with pytest.raises(ValidationError):
            span.text = "changed"


class TestChunk:
    def test_char_count_must_match(self) -> None:
        with pytest.raises(ValidationError):
            Chunk(index=0, total_in_group=1, text="abc", char_count=2)

    def test_total_in_group_positive(self) -> None:
        with pytest.raises(ValidationError):
            Chunk(index=0, total_in_group=0, text="", char_count=0)

    def test_valid(self) -> None:
        chunk = Chunk(index=1, total_in_group=2, text="abc", char_count=3)
        assert chunk.char_count == 3


class TestContextBlock:
    def test_defaults(self) -> None:
        block = ContextBlock(
            source_id="a", source_kind="post", title="A", chunk_index=0, total_chunks=1, text="x", char_count=1
        )
        assert block.relevance_score == 0.0
        assert block.updated_at is None


class TestSearchHit:
    def test_from_store(self) -> None:
        hit = SearchHit.from_store(
            {
                "_id": "a",
                "_type": "author",
                "_score": 1.5,
                "name": "Ada",
                "slug": {"_type": "slug", "current": "ada"},
                "description": None,
                "excerpt": "Ada writes docs.",
                "_updatedAt": "2024-01-01T00:00:00Z",
            }
        )
        assert hit.id == "a"
        assert hit.kind == "author"
        assert hit.score == 1.5
        assert hit.title == "Ada"
        assert hit.slug == "ada"
        assert hit.description is None
        assert hit.excerpt == "Ada writes docs."

    def test_missing_score(self) -> None:
        assert SearchHit.from_store({"_id": "a"}).score == 0.0

    def test_localized_title_is_not_text(self) -> None:
        hit = SearchHit.from_store(
            {"_id": "p1", "_type": "post", "title": {"en": "Hello", "de": "Hallo"}, "slug": {"current": 3}}
        )
        assert hit.title is None
        assert hit.slug is None

    def test_falls_back_to_string_name(self) -> None:
        hit = SearchHit.from_store({"_id": "p1", "title": {"en": "Hello"}, "name": "Named"})
        assert hit.title == "Named"


class TestCatalogModels:
    def test_kind_catalog_defaults(self) -> None:
        catalog = KindCatalog(kind="post", fields=[FieldInfo(name="title", type="string")])
        assert catalog.avg_text_length is None
        assert catalog.samples == []


class TestErrors:
    def test_provider_prefix(self) -> None:
        assert str(QueryError("bad", provider_name="sanity")) == "[sanity] bad"
        assert str(DocumentNotFoundError("gone")) == "gone"

    def test_hierarchy(self) -> None:
        err = QueryError("bad")
        assert isinstance(err, ContentContextError)
        assert err.message == "bad"
        assert err.provider_name is None
