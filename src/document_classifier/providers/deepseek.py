"""
DeepSeek Provider
=================

Text-only chat completions client. Preferred analyzer once the document
is available as text (direct upload or OCR transcript).
"""

import os
from typing import Any

from ..config import env_float, env_int
from ..models import ProviderRequest
from .base import BaseProviderClient


class DeepSeekClient(BaseProviderClient):
    """
    Chat completions client for DeepSeek text models.

    Environment variables:
        DEEPSEEK_API_KEY: API key (required)
        DEEPSEEK_API_URL: Chat completions endpoint
        DEEPSEEK_MODEL: Model to use (default: deepseek-chat)
        DEEPSEEK_MAX_TOKENS: Max output tokens (default: 1000)
        DEEPSEEK_TEMPERATURE: Sampling temperature (default: 0.0)
        DEEPSEEK_TIMEOUT: Request timeout in seconds (default: 120)
    """

    DEFAULT_URL = "https://api.deepseek.com/chat/completions"
    DEFAULT_MODEL = "deepseek-chat"
    DEFAULT_MAX_TOKENS = 1000
    DEFAULT_TEMPERATURE = 0.0
    DEFAULT_TIMEOUT = 120

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        endpoint_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        super().__init__(
            name="DeepSeek",
            api_key=api_key or os.getenv("DEEPSEEK_API_KEY"),
            endpoint_url=endpoint_url or os.getenv("DEEPSEEK_API_URL", self.DEFAULT_URL),
            model=model or os.getenv("DEEPSEEK_MODEL", self.DEFAULT_MODEL),
            max_tokens=(
                max_tokens
                if max_tokens is not None
                else env_int("DEEPSEEK_MAX_TOKENS", self.DEFAULT_MAX_TOKENS)
            ),
            temperature=(
                temperature
                if temperature is not None
                else env_float("DEEPSEEK_TEMPERATURE", self.DEFAULT_TEMPERATURE)
            ),
            timeout=(
                timeout
                if timeout is not None
                else env_float("DEEPSEEK_TIMEOUT", self.DEFAULT_TIMEOUT)
            ),
        )

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        """Build a body with plain string content; image parts are rejected."""
        messages = []
        for turn in request.messages:
            if turn.has_image:
                raise ValueError(f"{self.name} is text-only and cannot accept image parts")
            messages.append({"role": turn.role, "content": turn.text})

        return {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "stream": False,
        }
