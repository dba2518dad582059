"""Unit tests for the field-type classifier."""

from __future__ import annotations

import pytest

from cms_context.services.field_classifier import classify


class TestScalars:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, "unknown"),
            ("hello", "string"),
            ("", "string"),
            ("2024-01-15", "datetime"),
            ("2024-01-15T10:00:00Z", "datetime"),
            ("15/01/2024", "string"),
            ("Meeting on 2024-01-15", "string"),
            (7, "integer"),
            (7.0, "integer"),
            (7.25, "number"),
            (True, "boolean"),
            (False, "boolean"),
        ],
    )
    def test_scalar_tags(self, value: object, expected: str) -> None:
        assert classify(value) == expected

    def test_boolean_is_not_integer(self) -> None:
        # bool subclasses int in Python; it must still classify as boolean.
        assert classify(True) != "integer"


class TestSequences:
    def test_empty_array(self) -> None:
        assert classify([]) == "array"

    def test_block_array_is_rich_text(self) -> None:
        assert classify([{"_type": "block", "children": []}]) == "rich-text"

    def test_reference_array(self) -> None:
        assert classify([{"_type": "reference", "_ref": "a"}]) == "array-of-reference"

    def test_typed_object_array(self) -> None:
        assert classify([{"_type": "faqItem", "question": "?"}]) == "array-of-faqItem"

    def test_untyped_array(self) -> None:
        assert classify([{"label": "x"}]) == "array-of-objects"
        assert classify(["tag-a", "tag-b"]) == "array-of-objects"


class TestMappings:
    def test_slug(self) -> None:
        assert classify({"_type": "slug", "current": "my-post"}) == "slug"

    def test_image_by_type(self) -> None:
        assert classify({"_type": "image", "asset": {"_ref": "x"}}) == "image"

    def test_image_by_asset(self) -> None:
        assert classify({"asset": {"_ref": "image-123"}}) == "image"

    def test_reference(self) -> None:
        assert classify({"_type": "reference", "_ref": "author-1"}) == "reference"

    def test_custom_object_uses_its_type(self) -> None:
        assert classify({"_type": "seo", "metaTitle": "x"}) == "seo"

    def test_plain_object(self) -> None:
        assert classify({"lat": 1.0, "lng": 2.0}) == "object"


class TestTotality:
    @pytest.mark.parametrize("value", [object(), b"bytes", (1, 2), {1, 2}, float("nan")])
    def test_never_raises(self, value: object) -> None:
        assert isinstance(classify(value), str)
