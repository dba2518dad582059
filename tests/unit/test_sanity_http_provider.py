"""Unit tests for the Sanity HTTP provider adapter."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from cms_context.config.settings import Settings
from cms_context.providers.store.sanity_http_provider import SanityHTTPProvider
from cms_context.utils.errors import ConfigurationError, QueryError

Handler = Callable[[httpx.Request], httpx.Response]


def _provider(handler: Handler, **kwargs: Any) -> SanityHTTPProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    params: dict[str, Any] = {
        "project_id": "proj123",
        "dataset": "production",
        "api_token": "sk-test",
    }
    params.update(kwargs)
    return SanityHTTPProvider(http_client=client, **params)


class _Recorder:
    """Handler that records requests and replies with a canned response."""

    def __init__(self, status: int = 200, body: Any = None) -> None:
        self.status = status
        self.body = body if body is not None else {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)

    @property
    def last_json(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


# ======================================================================
# Construction
# ======================================================================


class TestFromSettings:
    def test_builds_provider(self, settings: Settings) -> None:
        provider = SanityHTTPProvider.from_settings(settings, httpx.AsyncClient())
        assert provider.get_provider_name() == "sanity"

    def test_nothing_configured(self) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            SanityHTTPProvider.from_settings(Settings(_env_file=None), httpx.AsyncClient())

    def test_partially_configured(self) -> None:
        settings = Settings(_env_file=None, sanity_project_id="p", sanity_dataset="d")
        with pytest.raises(ConfigurationError) as exc_info:
            SanityHTTPProvider.from_settings(settings, httpx.AsyncClient())
        assert "incomplete" in str(exc_info.value)
        assert "API token" in str(exc_info.value)
        assert "project ID" not in str(exc_info.value).split("missing:")[1]


# ======================================================================
# Reads
# ======================================================================


class TestReads:
    @pytest.mark.asyncio()
    async def test_fetch_posts_query_and_params(self) -> None:
        recorder = _Recorder(body={"ms": 3, "query": "...", "result": [{"_id": "a"}]})
        provider = _provider(recorder)

        result = await provider.fetch("*[_type == $kind]", {"kind": "post"})

        assert result == [{"_id": "a"}]
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://proj123.api.sanity.io/v2024-01-01/data/query/production"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert recorder.last_json == {"query": "*[_type == $kind]", "params": {"kind": "post"}}

    @pytest.mark.asyncio()
    async def test_cdn_used_for_reads(self) -> None:
        recorder = _Recorder(body={"result": None})
        provider = _provider(recorder, use_cdn=True, api_version="v2023-05-03")

        await provider.fetch("*[0]")

        assert str(recorder.requests[0].url).startswith("https://proj123.apicdn.sanity.io/v2023-05-03/")

    @pytest.mark.asyncio()
    async def test_get_document(self, sample_post: dict[str, Any]) -> None:
        recorder = _Recorder(body={"documents": [sample_post]})
        provider = _provider(recorder)

        doc = await provider.get_document("post-1")

        assert doc == sample_post
        assert recorder.requests[0].method == "GET"
        assert recorder.requests[0].url.path == "/v2024-01-01/data/doc/production/post-1"

    @pytest.mark.asyncio()
    async def test_get_document_empty_list(self) -> None:
        provider = _provider(_Recorder(body={"documents": []}))
        assert await provider.get_document("nope") is None

    @pytest.mark.asyncio()
    async def test_get_document_404(self) -> None:
        provider = _provider(_Recorder(status=404, body={"error": "not found"}))
        assert await provider.get_document("nope") is None

    @pytest.mark.asyncio()
    async def test_count(self) -> None:
        recorder = _Recorder(body={"result": 12})
        provider = _provider(recorder)

        assert await provider.count("_type == $kind", {"kind": "post"}) == 12
        assert recorder.last_json["query"] == "count(*[_type == $kind])"


# ======================================================================
# Mutations
# ======================================================================


class TestMutations:
    @pytest.mark.asyncio()
    async def test_create_returns_document(self) -> None:
        created = {"_id": "drafts.abc", "_type": "post", "_rev": "r1"}
        recorder = _Recorder(body={"transactionId": "t", "results": [{"id": "drafts.abc", "document": created}]})
        provider = _provider(recorder)

        result = await provider.create({"_id": "drafts.abc", "_type": "post"})

        assert result == created
        request = recorder.requests[0]
        assert request.url.path == "/v2024-01-01/data/mutate/production"
        assert request.url.params["returnDocuments"] == "true"
        assert recorder.last_json == {"mutations": [{"create": {"_id": "drafts.abc", "_type": "post"}}]}

    @pytest.mark.asyncio()
    async def test_patch_sets_fields(self) -> None:
        recorder = _Recorder(body={"results": [{"id": "a", "document": {"_id": "a", "title": "New"}}]})
        provider = _provider(recorder)

        result = await provider.patch("a", {"title": "New"})

        assert result["title"] == "New"
        assert recorder.last_json == {"mutations": [{"patch": {"id": "a", "set": {"title": "New"}}}]}

    @pytest.mark.asyncio()
    async def test_delete(self) -> None:
        recorder = _Recorder(body={"results": [{"id": "drafts.a", "operation": "delete"}]})
        provider = _provider(recorder)

        await provider.delete("drafts.a")

        assert recorder.last_json == {"mutations": [{"delete": {"id": "drafts.a"}}]}

    @pytest.mark.asyncio()
    async def test_replace_and_delete_is_one_transaction(self) -> None:
        published = {"_id": "a", "_type": "post", "_rev": "r2"}
        recorder = _Recorder(
            body={
                "results": [
                    {"id": "a", "operation": "create", "document": published},
                    {"id": "drafts.a", "operation": "delete"},
                ]
            }
        )
        provider = _provider(recorder)

        result = await provider.replace_and_delete({"_id": "a", "_type": "post"}, "drafts.a")

        assert result == published
        assert len(recorder.requests) == 1
        assert recorder.last_json == {
            "mutations": [
                {"createOrReplace": {"_id": "a", "_type": "post"}},
                {"delete": {"id": "drafts.a"}},
            ]
        }

    @pytest.mark.asyncio()
    async def test_rejected_transaction_raises(self) -> None:
        recorder = _Recorder(status=409, body={"error": {"description": "Document has been modified"}})
        provider = _provider(recorder)

        with pytest.raises(QueryError, match="HTTP 409: Document has been modified"):
            await provider.replace_and_delete({"_id": "a", "_type": "post"}, "drafts.a")
        assert len(recorder.requests) == 1


# ======================================================================
# Failures
# ======================================================================


class TestFailures:
    @pytest.mark.asyncio()
    async def test_http_error_status(self) -> None:
        body = {"error": {"description": "Expected ']' following expression", "type": "queryParseError"}}
        provider = _provider(_Recorder(status=400, body=body))

        with pytest.raises(QueryError) as exc_info:
            await provider.fetch("*[")

        assert "HTTP 400" in str(exc_info.value)
        assert "Expected ']'" in str(exc_info.value)
        assert exc_info.value.provider_name == "sanity"

    @pytest.mark.asyncio()
    async def test_unauthorized(self) -> None:
        provider = _provider(_Recorder(status=401, body={"message": "Unauthorized - invalid token"}))
        with pytest.raises(QueryError, match="invalid token"):
            await provider.get_document("a")

    @pytest.mark.asyncio()
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler)
        with pytest.raises(QueryError, match="Request to Sanity failed"):
            await provider.fetch("*")

    @pytest.mark.asyncio()
    async def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        provider = _provider(handler)
        with pytest.raises(QueryError, match="non-JSON"):
            await provider.fetch("*")
