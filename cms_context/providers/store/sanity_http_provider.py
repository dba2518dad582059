"""Sanity content-lake provider over the public HTTP API.

Talks to three endpoints of ``https://<project>.api.sanity.io/v<version>``:

* ``POST /data/query/<dataset>``   -- GROQ with a JSON ``params`` body
* ``GET  /data/doc/<dataset>/<id>`` -- fetch by id
* ``POST /data/mutate/<dataset>``  -- create, patch, delete, and draft/published moves

Reads may be routed through the API CDN (``apicdn.sanity.io``) when
``use_cdn`` is set; mutations always hit the live API.

Follows the adapter pattern used for every external service: an injected
``httpx.AsyncClient`` for testability and connection pooling, and every
failure translated into :class:`~cms_context.utils.errors.QueryError`.
"""

from __future__ import annotations

from typing import Any

import httpx

from cms_context.config.settings import Settings
from cms_context.interfaces.document_store import IDocumentStore
from cms_context.utils.errors import ConfigurationError, QueryError
from cms_context.utils.logging import get_logger

_PROVIDER_NAME = "sanity"


class SanityHTTPProvider(IDocumentStore):
    """Document store backed by the Sanity HTTP API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    project_id, dataset, api_token:
        Connection credentials.  All three are required.
    api_version:
        Dated API version, with or without the leading ``v``.
    use_cdn:
        Route reads through the API CDN.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        project_id: str,
        dataset: str,
        api_token: str,
        api_version: str = "2024-01-01",
        use_cdn: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self._http = http_client
        self._dataset = dataset
        self._token = api_token
        self._timeout = timeout
        version = api_version if api_version.startswith("v") else f"v{api_version}"
        self._api_base = f"https://{project_id}.api.sanity.io/{version}"
        self._read_base = (
            f"https://{project_id}.apicdn.sanity.io/{version}" if use_cdn else self._api_base
        )
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> SanityHTTPProvider:
        """Build a provider from :class:`Settings`, validating the connection fields.

        Raises
        ------
        ConfigurationError
            If any of project id, dataset or API token is empty.
        """
        missing = settings.connection_missing()
        if len(missing) == 3:
            raise ConfigurationError(
                "Sanity connection not configured. Set SANITY_PROJECT_ID, "
                "SANITY_DATASET and SANITY_API_TOKEN."
            )
        if missing:
            raise ConfigurationError(
                "Sanity connection incomplete. Please provide project ID, dataset, and API token "
                f"(missing: {', '.join(missing)})."
            )
        return cls(
            http_client=http_client,
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            api_token=settings.sanity_api_token,
            api_version=settings.sanity_api_version,
            use_cdn=settings.sanity_use_cdn,
            timeout=settings.http_timeout,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        allow_not_found: bool = False,
    ) -> dict[str, Any] | None:
        """Send one request and return the decoded JSON body.

        Returns ``None`` for a 404 when *allow_not_found* is set; every other
        non-2xx status and every transport error raises :class:`QueryError`.
        """
        try:
            response = await self._http.request(
                method,
                url,
                json=json_body,
                params=params,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            self._logger.warning("sanity_request_failed", url=url, error=str(exc))
            raise QueryError(f"Request to Sanity failed: {exc}", provider_name=_PROVIDER_NAME) from exc

        if response.status_code == 404 and allow_not_found:
            return None

        if response.status_code >= 400:
            detail = self._error_detail(response)
            self._logger.warning("sanity_http_error", url=url, status=response.status_code, detail=detail)
            raise QueryError(f"HTTP {response.status_code}: {detail}", provider_name=_PROVIDER_NAME)

        try:
            return response.json()
        except ValueError as exc:
            raise QueryError("Sanity returned a non-JSON response", provider_name=_PROVIDER_NAME) from exc

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Pull the most specific error message out of a Sanity error body."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("description") or error.get("message") or error)
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return str(error or body)

    async def _mutate(self, *mutations: dict[str, Any]) -> dict[str, Any]:
        """Send *mutations* as one transaction; return the first result document.

        The mutate endpoint applies the whole array atomically, so either
        every mutation lands or none does.
        """
        url = f"{self._api_base}/data/mutate/{self._dataset}"
        body = await self._request(
            "POST",
            url,
            json_body={"mutations": list(mutations)},
            params={"returnDocuments": "true", "visibility": "sync"},
        )
        results = (body or {}).get("results") or []
        if not results:
            return {}
        return results[0].get("document") or {"_id": results[0].get("id")}

    # ------------------------------------------------------------------
    # IDocumentStore implementation
    # ------------------------------------------------------------------

    async def get_document(self, document_id: str) -> dict[str, Any] | None:
        url = f"{self._read_base}/data/doc/{self._dataset}/{document_id}"
        body = await self._request("GET", url, allow_not_found=True)
        if body is None:
            return None
        documents = body.get("documents") or []
        return documents[0] if documents else None

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._read_base}/data/query/{self._dataset}"
        body = await self._request("POST", url, json_body={"query": query, "params": params or {}})
        self._logger.debug("sanity_query", ms=(body or {}).get("ms"), params=list((params or {}).keys()))
        return (body or {}).get("result")

    async def count(self, query_filter: str, params: dict[str, Any] | None = None) -> int:
        result = await self.fetch(f"count(*[{query_filter}])", params)
        return int(result or 0)

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate({"create": document})

    async def patch(self, document_id: str, set_fields: dict[str, Any]) -> dict[str, Any]:
        return await self._mutate({"patch": {"id": document_id, "set": set_fields}})

    async def delete(self, document_id: str) -> None:
        await self._mutate({"delete": {"id": document_id}})

    async def replace_and_delete(self, document: dict[str, Any], delete_id: str) -> dict[str, Any]:
        return await self._mutate({"createOrReplace": document}, {"delete": {"id": delete_id}})

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
