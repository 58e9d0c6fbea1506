"""HTTP completion provider.

``HttpCompletionProvider`` is a ready-made completion function for any
OpenAI-compatible ``/chat/completions`` endpoint. Hosts with their own
model access pass their own coroutine to the pipeline instead.
"""

import logging

import httpx

from ..config import Settings, settings as default_settings
from ..models.semantic import CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)


class HttpCompletionProvider:
    """Completion function backed by an OpenAI-compatible HTTP API.

    Failures are returned as ``CompletionResponse(error=...)``, never raised.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.settings = settings or default_settings
        self.base_url = self.settings.llm_base_url.rstrip("/")
        self.model = self.settings.llm_model
        self.timeout = timeout if timeout is not None else self.settings.semantic_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.llm_api_key is not None:
            headers["Authorization"] = f"Bearer {self.settings.llm_api_key.get_secret_value()}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __call__(self, request: CompletionRequest) -> CompletionResponse:
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": 0,
        }

        try:
            response = await self._get_client().post(
                f"{self.base_url}/chat/completions",
                json=body,
                headers=self._headers(),
            )
        except httpx.TimeoutException:
            logger.warning("Completion request timed out")
            return CompletionResponse(error="Request timeout")
        except httpx.RequestError as e:
            logger.warning(f"Completion request failed: {e}")
            return CompletionResponse(error=f"Request error: {e}")

        if not 200 <= response.status_code < 300:
            error_msg = f"HTTP {response.status_code}: {response.text[:200]}"
            logger.warning(f"Completion request rejected: {error_msg}")
            return CompletionResponse(error=error_msg)

        try:
            payload = response.json()
            text = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected completion payload: {e}")
            return CompletionResponse(error=f"Unexpected response payload: {e}")

        if not isinstance(text, str):
            return CompletionResponse(error="Unexpected response payload: content is not text")
        return CompletionResponse(text=text)
