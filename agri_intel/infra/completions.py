"""Client for the hosted agent completions endpoint (Algolia Agent Studio)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..observability.logging_utils import log_error, log_event, summarize_text
from ..schemas import CompletionsResponse
from .config import AppConfig
from .errors import CompletionsError


def build_completions_headers(app_id: str, api_key: str) -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "x-algolia-application-id": app_id,
        "x-algolia-api-key": api_key,
    }


class AgentStudioClient:
    def __init__(
        self,
        app_id: str,
        api_key: str,
        agent_id: str,
        *,
        timeout: float = 10.0,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.agent_id = agent_id
        self._path = f"/agent-studio/1/agents/{quote(agent_id)}/completions"
        self._client = httpx.AsyncClient(
            base_url=base_url or f"https://{app_id}.algolia.net",
            headers=build_completions_headers(app_id, api_key),
            timeout=timeout,
            transport=transport,
            trust_env=False,
        )

    async def complete(
        self, message: str, tools: List[Dict[str, Any]]
    ) -> CompletionsResponse:
        body = {"message": message, "tools": tools, "stream": False}
        try:
            response = await self._client.post(self._path, json=body)
        except httpx.HTTPError as exc:
            raise CompletionsError(f"completions request failed: {exc}") from exc
        if response.status_code >= 400:
            log_error(
                "completions_http_error",
                status=response.status_code,
                body=summarize_text(response.text, 200),
            )
            raise CompletionsError(
                f"completions endpoint returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise CompletionsError("completions endpoint returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise CompletionsError("completions payload is not an object")
        try:
            result = CompletionsResponse.model_validate(payload)
        except ValidationError as exc:
            raise CompletionsError(
                f"malformed completions payload: {exc.error_count()} errors"
            ) from exc
        log_event(
            "completions_response",
            agent_id=self.agent_id,
            tool_calls=len(result.tool_calls or []),
        )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()


def build_completions_client(
    config: AppConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Optional[AgentStudioClient]:
    if not config.agent_studio_configured:
        return None
    return AgentStudioClient(
        config.algolia_app_id,
        config.algolia_write_key,
        config.algolia_agent_id,
        timeout=config.algolia_timeout_seconds,
        transport=transport,
    )
