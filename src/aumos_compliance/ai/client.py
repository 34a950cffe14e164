"""Chat backend protocol and an OpenAI-compatible httpx client.

Example
-------
>>> client = ChatClient(api_key="sk-...", model="gpt-4o")
>>> text = await client.complete("You are a legal expert.", "Summarise: ...")
"""
from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

import httpx

from aumos_compliance.errors import AnalysisError, AnalysisFailure

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"
_OPERATION = "chat_completion"


@runtime_checkable
class ChatBackend(Protocol):
    """Anything that turns a system and user prompt into response text."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class ChatClient:
    """Posts chat-completion requests to an OpenAI-compatible endpoint.

    Parameters
    ----------
    endpoint:
        Full URL of the chat-completions endpoint.  Falls back to
        ``OPENAI_ENDPOINT`` and then the public OpenAI URL.
    api_key:
        Bearer token.  Falls back to ``OPENAI_API_KEY``; requests are sent
        without ``Authorization`` when neither is set.
    model:
        Model name sent with each request.
    temperature:
        Sampling temperature.  ``0.0`` keeps answers reproducible.
    timeout_seconds:
        httpx request timeout.
    transport:
        Optional httpx transport, used by tests to stub the endpoint.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint or os.getenv("OPENAI_ENDPOINT", DEFAULT_ENDPOINT)
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._model = model
        self._temperature = temperature
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat-completion request and return the message content.

        Raises
        ------
        AnalysisError
            ``TIMEOUT`` when the request timed out, ``UPSTREAM`` on an
            HTTP error status, ``TRANSPORT`` on connection failures, and
            ``MALFORMED`` when the response has no message content.
        """
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise AnalysisError(_OPERATION, f"request timed out: {exc}", AnalysisFailure.TIMEOUT) from exc
        except httpx.HTTPStatusError as exc:
            raise AnalysisError(
                _OPERATION,
                f"endpoint returned HTTP {exc.response.status_code}",
                AnalysisFailure.UPSTREAM,
            ) from exc
        except httpx.HTTPError as exc:
            raise AnalysisError(_OPERATION, f"transport error: {exc}", AnalysisFailure.TRANSPORT) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise AnalysisError(_OPERATION, "response body is not JSON", AnalysisFailure.MALFORMED) from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices[0], dict):
            raise AnalysisError(_OPERATION, "response has no choices", AnalysisFailure.MALFORMED)
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise AnalysisError(_OPERATION, "response has no message content", AnalysisFailure.MALFORMED)

        logger.debug("Chat completion from %s returned %d characters", self._model, len(content))
        return content
