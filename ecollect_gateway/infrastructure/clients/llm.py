"""Assistant HTTP client for OpenAI-compatible chat completions (Groq by default)"""

import httpx
from typing import Dict, List
from ecollect_gateway.config import settings
from ecollect_gateway.domain.exceptions import LLMServiceError
from ecollect_gateway.infrastructure.observability.metrics import llm_latency_histogram, llm_failure_counter

FALLBACK_REPLY = "I apologize, but I was unable to generate a response. Please try again."


class LLMClient:
    """Client for the assistant completion API"""

    def __init__(
        self,
        api_base: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = (api_base or settings.llm_api_base).rstrip("/")
        self.api_key = api_key or settings.llm_api_key
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Send a chat transcript and return the assistant reply text.

        Raises:
            LLMServiceError: On timeout, HTTP errors, or malformed response
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": settings.llm_temperature,
            "max_tokens": settings.llm_max_tokens,
            "top_p": 1,
            "stream": False,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with llm_latency_histogram.time():
                    response = await client.post(
                        f"{self.api_base}/chat/completions",
                        json=payload,
                        headers={"Authorization": f"Bearer {self.api_key}"},
                    )
                response.raise_for_status()
                choices = response.json().get("choices") or []

            except httpx.TimeoutException as e:
                llm_failure_counter.inc()
                raise LLMServiceError(f"Assistant API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                llm_failure_counter.inc()
                raise LLMServiceError(f"Assistant API error: {e.response.status_code}") from e
            except (httpx.RequestError, ValueError, AttributeError) as e:
                llm_failure_counter.inc()
                raise LLMServiceError(f"Invalid response from assistant API: {e}") from e

        if not choices:
            return FALLBACK_REPLY
        content = (choices[0].get("message") or {}).get("content")
        return content or FALLBACK_REPLY
