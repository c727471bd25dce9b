"""Thin async wrapper around the Anthropic Messages API."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx
from pydantic import ValidationError

from cardnews.config import EnvironmentProfile, settings
from cardnews.errors import APIError, APIErrorKind, is_api_retryable
from cardnews.models.messages import (
    Completion,
    ErrorEnvelope,
    Message,
    MessageRequest,
    MessageResponse,
    SummaryPrompt,
)
from cardnews.utils.retry import RetryExecutor

logger = logging.getLogger(__name__)


class AnthropicMessagesClient:
    """Sends summary prompts to the Messages endpoint with classified, retried failures."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        version: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        profile: Optional[EnvironmentProfile] = None,
        retry: Optional[RetryExecutor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self.base_url = (base_url or settings.anthropic_base_url).rstrip("/")
        self.model = model or settings.anthropic_model
        self.version = version or settings.anthropic_version
        self.max_output_tokens = max_output_tokens or settings.max_output_tokens
        self.timeout = timeout or settings.request_timeout
        self.profile = profile or settings.profile
        self.retry = retry or RetryExecutor()
        self._transport = transport

    async def summarize(self, prompt: SummaryPrompt) -> Completion:
        """Return the model's raw text and token usage for a prompt.

        Raises:
            APIError: classified failure, after retries for transient kinds
        """
        if not self.api_key:
            raise APIError(APIErrorKind.INVALID_KEY, "API key is not configured")

        request = MessageRequest(
            model=self.model,
            max_tokens=self.max_output_tokens,
            messages=[Message(role="user", content=prompt.user)],
            system=prompt.system,
        )
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            return await self.retry.run(
                lambda: self._send(client, request),
                is_api_retryable,
                self.profile.api_attempts,
                self.profile.api_base_delay,
            )

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "anthropic-version": self.version,
            "content-type": "application/json",
        }

    async def _send(self, client: httpx.AsyncClient, request: MessageRequest) -> Completion:
        try:
            response = await client.post(
                "/messages",
                headers=self._headers(),
                json=request.model_dump(exclude_none=True),
            )
        except httpx.TransportError as exc:
            raise APIError(APIErrorKind.NETWORK, f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            error = APIError.from_status(response.status_code, self._error_message(response))
            logger.warning("Messages API returned %s (%s)", response.status_code, error.kind.value)
            raise error

        try:
            payload = MessageResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise APIError(
                APIErrorKind.DECODING, str(exc), status_code=response.status_code
            ) from exc

        text = payload.text()
        if not text.strip():
            raise APIError(
                APIErrorKind.DECODING, "response has no text content", status_code=response.status_code
            )
        logger.info(
            "Received %s characters (%s input + %s output tokens)",
            len(text),
            payload.usage.input_tokens,
            payload.usage.output_tokens,
        )
        return Completion(text=text, tokens_used=payload.usage.total)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return ErrorEnvelope.model_validate_json(response.content).error.message
        except ValidationError:
            return response.text[:200]
