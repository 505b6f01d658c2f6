"""
HTTP transport to a local Ollama server.

Only the envelope is handled here: the prompt goes out, the model's raw
`response` text comes back. Failures are mapped onto the LLMError taxonomy.
"""

import asyncio
import logging

import httpx

from ..pipeline.errors import LLMProtocolError, LLMTimeoutError, LLMTransportError
from ..settings import OllamaSettings

logger = logging.getLogger(__name__)


class OllamaClient:
    """
    Thin async client for POST {base_url}/api/generate.

    An httpx.AsyncClient can be injected (tests pass one built on
    httpx.MockTransport); otherwise a short-lived client is opened per call.
    """

    def __init__(self, settings: OllamaSettings, http_client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.endpoint = f"{settings.base_url.rstrip('/')}/api/generate"
        self._http_client = http_client

    async def _post(self, payload: dict, timeout: float) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(self.endpoint, json=payload, timeout=timeout)

        async with httpx.AsyncClient() as client:
            return await client.post(self.endpoint, json=payload, timeout=timeout)

    async def generate(self, prompt: str, timeout_seconds: float | None = None) -> str:
        """
        Send one prompt and return the model's raw text.

        Raises:
            LLMTimeoutError: the call exceeded `timeout_seconds`
            LLMTransportError: connection failure or non-2xx status
            LLMProtocolError: body is not JSON or `response` is missing / empty
        """
        timeout = timeout_seconds or self.settings.analysis_timeout_seconds
        payload = {
            "model": self.settings.model,
            "prompt": prompt,
            "format": "json",
            "stream": False,
            "options": {"temperature": self.settings.temperature},
        }

        try:
            response = await asyncio.wait_for(self._post(payload, timeout), timeout=timeout)
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(f"LLM request timed out after {timeout} seconds")
            raise LLMTimeoutError(timeout)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"LLM endpoint returned HTTP {status}")
            raise LLMTransportError(f"LLM endpoint returned HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.warning(f"LLM transport error: {e}")
            raise LLMTransportError(f"LLM transport error: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise LLMProtocolError("LLM response body is not valid JSON") from e

        text = body.get("response") if isinstance(body, dict) else None
        if text is None:
            logger.warning("No 'response' property found in LLM response")
            raise LLMProtocolError("No 'response' property found in LLM response")
        if not isinstance(text, str) or not text:
            logger.warning("Empty LLM response")
            raise LLMProtocolError("Empty LLM response")

        logger.debug(f"LLM raw response: {text}")
        return text

    async def ping(self) -> bool:
        """Health probe: True if the server answers GET /api/tags with 2xx."""
        url = f"{self.settings.base_url.rstrip('/')}/api/tags"
        timeout = self.settings.health_timeout_seconds
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, timeout=timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, timeout=timeout)
        except httpx.HTTPError as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

        if response.is_success:
            return True
        logger.warning(f"Ollama health check returned HTTP {response.status_code}")
        return False
