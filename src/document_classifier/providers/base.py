"""
Base Provider Client
====================

Abstract base class for chat completions providers.

A client sends exactly one HTTP POST per call() and never raises for
provider-side problems: transport errors, non-2xx responses and malformed
envelopes all come back as a failed ProviderResult.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import requests

from ..errors import (
    ConfigurationError,
    MalformedProviderPayload,
    ProviderError,
    ProviderHttpError,
    ProviderTransportError,
)
from ..models import ImagePart, MessageTurn, ProviderRequest, ProviderResult, TextPart

logger = logging.getLogger(__name__)


class BaseProviderClient(ABC):
    """
    Abstract base class for LLM providers speaking the chat completions shape.

    Subclasses implement:
    - build_payload(): Map a ProviderRequest to the provider's JSON body

    Optional overrides:
    - supports_images: Whether image parts may be sent
    """

    supports_images = False
    image_detail = "auto"

    def __init__(
        self,
        name: str,
        api_key: str | None,
        endpoint_url: str,
        model: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ):
        """
        Initialize provider client.

        Args:
            name: Human-readable provider name used in logs and traces
            api_key: Bearer token for the provider
            endpoint_url: Chat completions endpoint
            model: Model identifier
            max_tokens: Max output tokens per request
            temperature: Sampling temperature in [0, 1]
            timeout: Total time budget per call in seconds

        Raises:
            ConfigurationError: max_tokens, temperature or timeout out of range
        """
        if max_tokens <= 0:
            raise ConfigurationError(f"{name} max_tokens must be positive, got {max_tokens}")
        if not 0.0 <= temperature <= 1.0:
            raise ConfigurationError(
                f"{name} temperature must be in [0, 1], got {temperature}"
            )
        if timeout <= 0:
            raise ConfigurationError(f"{name} timeout must be positive, got {timeout}")

        self.name = name
        self.api_key = api_key
        self.endpoint_url = endpoint_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if the provider has credentials configured."""
        return bool(self.api_key)

    def build_request(self, prompt: str, image_url: str | None = None) -> ProviderRequest:
        """Build a single-turn user request with this client's sampling settings."""
        parts: list[Any] = [TextPart(prompt)]
        if image_url is not None:
            parts.append(ImagePart(url=image_url, detail=self.image_detail))
        return ProviderRequest(
            model=self.model,
            messages=(MessageTurn(role="user", parts=tuple(parts)),),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

    @abstractmethod
    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        """
        Build the JSON body for a request.

        Args:
            request: Provider-agnostic request

        Returns:
            JSON-serializable payload
        """
        pass

    def call(self, request: ProviderRequest, timeout: float | None = None) -> ProviderResult:
        """
        Send one request and return the raw model text or a failure.

        Args:
            request: Request to send
            timeout: Per-call time budget override in seconds

        Returns:
            ProviderResult (never raises for provider or transport errors)
        """
        payload = self.build_payload(request)
        start_time = time.time()

        try:
            text = self._post(payload, timeout if timeout is not None else self.timeout)
        except ProviderError as e:
            elapsed = (time.time() - start_time) * 1000
            logger.warning(
                "%s call failed: model=%s, status=%s, error=%s",
                self.name,
                request.model,
                e.status_code,
                e.message[:200],
            )
            return ProviderResult.failure(self.name, e.status_code, e.message, elapsed)

        elapsed = (time.time() - start_time) * 1000
        logger.info(
            "%s call completed: model=%s, chars=%d, time=%.0fms",
            self.name,
            request.model,
            len(text),
            elapsed,
        )
        return ProviderResult.success(self.name, text, elapsed)

    def _post(self, payload: dict[str, Any], timeout: float) -> str:
        """
        POST the payload and return choices[0].message.content.

        requests applies `timeout` to the connect and to each socket read,
        not to the whole exchange, so the body is streamed and the total
        time is checked against the same budget between chunks.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        deadline = time.monotonic() + timeout

        try:
            response = requests.post(
                self.endpoint_url,
                headers=headers,
                json=payload,
                timeout=timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise ProviderTransportError(str(e) or type(e).__name__) from e

        try:
            raw = self._read_body(response, deadline, timeout)
        finally:
            response.close()

        if not 200 <= response.status_code < 300:
            raise ProviderHttpError(response.status_code, raw.decode("utf-8", errors="replace"))

        try:
            body = json.loads(raw)
        except ValueError as e:
            raise MalformedProviderPayload() from e

        return self._extract_content(body)

    @staticmethod
    def _read_body(response: requests.Response, deadline: float, timeout: float) -> bytes:
        """Read the streamed body, failing once the call deadline has passed."""
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=8192):
                if time.monotonic() > deadline:
                    raise ProviderTransportError(
                        f"response not complete within {timeout:g}s"
                    )
                chunks.append(chunk)
        except requests.RequestException as e:
            raise ProviderTransportError(str(e) or type(e).__name__) from e
        return b"".join(chunks)

    @staticmethod
    def _extract_content(body: Any) -> str:
        """Extract message content from a chat completions envelope."""
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedProviderPayload() from e

        if not isinstance(content, str):
            raise MalformedProviderPayload()
        return content

    def __repr__(self) -> str:
        available = "available" if self.is_available() else "unavailable"
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.model}', {available})"
