"""Async client for the hosted search service (Algolia REST API).

Requests go to the primary `{app_id}.algolia.net` host first and fail over to
the `{app_id}-N.algolianet.com` hosts on network errors, timeouts and 5xx
responses. 4xx responses are final.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..observability.logging_utils import log_error, log_event, summarize_text
from .errors import SearchServiceError


FALLBACK_HOST_COUNT = 3


def build_search_headers(app_id: str, api_key: str) -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "X-Algolia-Application-Id": app_id,
        "X-Algolia-API-Key": api_key,
    }


def build_search_hosts(app_id: str) -> List[str]:
    hosts = [f"https://{app_id}.algolia.net"]
    hosts.extend(
        f"https://{app_id}-{n}.algolianet.com"
        for n in range(1, FALLBACK_HOST_COUNT + 1)
    )
    return hosts


class AlgoliaSearchClient:
    def __init__(
        self,
        app_id: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        hosts: Optional[List[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if base_url:
            hosts = [base_url]
        self.hosts = [h.rstrip("/") for h in (hosts or build_search_hosts(app_id))]
        self._client = httpx.AsyncClient(
            headers=build_search_headers(app_id, api_key),
            timeout=timeout,
            transport=transport,
            trust_env=False,
        )

    async def _send(
        self, method: str, path: str, *, index: str, json: Optional[dict]
    ) -> httpx.Response:
        """Try each host in turn; return the first non-5xx response or the last 5xx."""
        response: Optional[httpx.Response] = None
        error: Optional[httpx.HTTPError] = None
        for host in self.hosts:
            try:
                response = await self._client.request(method, host + path, json=json)
            except httpx.HTTPError as exc:
                log_error("search_host_failed", exc=exc, host=host, index=index)
                response, error = None, exc
                continue
            if response.status_code < 500:
                return response
            log_error(
                "search_host_failed", host=host, index=index, status=response.status_code
            )
        if response is None:
            raise SearchServiceError(
                f"search service request failed: {error}", index=index
            ) from error
        return response

    async def _request(
        self, method: str, path: str, *, index: str, json: Optional[dict] = None
    ) -> Dict[str, Any]:
        response = await self._send(method, path, index=index, json=json)
        if response.status_code >= 400:
            raise SearchServiceError(
                f"search service returned {response.status_code}: "
                f"{summarize_text(response.text, 200)}",
                index=index,
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchServiceError(
                "search service returned invalid JSON", index=index
            ) from exc
        if not isinstance(payload, dict):
            raise SearchServiceError(
                "search service returned an unexpected payload", index=index
            )
        return payload

    async def search(
        self,
        index: str,
        query: str,
        *,
        filters: Optional[str] = None,
        hits_per_page: int = 10,
    ) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {"query": query, "hitsPerPage": hits_per_page}
        if filters:
            body["filters"] = filters
        payload = await self._request(
            "POST", f"/1/indexes/{quote(index)}/query", index=index, json=body
        )
        hits = payload.get("hits")
        if not isinstance(hits, list):
            raise SearchServiceError("search response has no hits list", index=index)
        return hits

    async def save_objects(
        self, index: str, objects: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        requests = [{"action": "updateObject", "body": obj} for obj in objects]
        payload = await self._request(
            "POST",
            f"/1/indexes/{quote(index)}/batch",
            index=index,
            json={"requests": requests},
        )
        log_event("search_objects_saved", index=index, count=len(objects))
        return payload

    async def set_settings(
        self, index: str, settings: Dict[str, Any]
    ) -> Dict[str, Any]:
        payload = await self._request(
            "PUT", f"/1/indexes/{quote(index)}/settings", index=index, json=settings
        )
        log_event("search_settings_updated", index=index)
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
