"""
OpenAI Provider
===============

Vision-capable chat completions client. Used for the initial image
classification, for OCR transcription and as the second-chance text
analyzer.
"""

import os
from typing import Any

from ..config import env_float, env_int
from ..models import ImagePart, ProviderRequest, TextPart
from .base import BaseProviderClient


class OpenAIClient(BaseProviderClient):
    """
    Chat completions client for OpenAI vision models.

    Environment variables:
        OPENAI_API_KEY: API key (required)
        OPENAI_API_URL: Chat completions endpoint
        OPENAI_MODEL: Model to use (default: gpt-4o)
        OPENAI_MAX_TOKENS: Max output tokens (default: 1000)
        OPENAI_TEMPERATURE: Sampling temperature (default: 0.0)
        OPENAI_TIMEOUT: Request timeout in seconds (default: 120)
        OPENAI_IMAGE_DETAIL: Image detail level, low/high/auto (default: auto)
    """

    DEFAULT_URL = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o"
    DEFAULT_MAX_TOKENS = 1000
    DEFAULT_TEMPERATURE = 0.0
    DEFAULT_TIMEOUT = 120
    DEFAULT_IMAGE_DETAIL = "auto"

    supports_images = True

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        endpoint_url: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
        image_detail: str | None = None,
    ):
        super().__init__(
            name="OpenAI",
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            endpoint_url=endpoint_url or os.getenv("OPENAI_API_URL", self.DEFAULT_URL),
            model=model or os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL),
            max_tokens=(
                max_tokens
                if max_tokens is not None
                else env_int("OPENAI_MAX_TOKENS", self.DEFAULT_MAX_TOKENS)
            ),
            temperature=(
                temperature
                if temperature is not None
                else env_float("OPENAI_TEMPERATURE", self.DEFAULT_TEMPERATURE)
            ),
            timeout=(
                timeout
                if timeout is not None
                else env_float("OPENAI_TIMEOUT", self.DEFAULT_TIMEOUT)
            ),
        )
        self.image_detail = image_detail or os.getenv(
            "OPENAI_IMAGE_DETAIL", self.DEFAULT_IMAGE_DETAIL
        )

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        """Build a body with typed content parts (text and image_url)."""
        messages = []
        for turn in request.messages:
            content: list[dict[str, Any]] = []
            for part in turn.parts:
                if isinstance(part, TextPart):
                    content.append({"type": "text", "text": part.text})
                elif isinstance(part, ImagePart):
                    content.append(
                        {
                            "type": "image_url",
                            "image_url": {"url": part.url, "detail": part.detail},
                        }
                    )
            messages.append({"role": turn.role, "content": content})

        return {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
