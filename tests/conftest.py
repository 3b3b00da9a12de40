"""
Test Configuration and Fixtures for document-classification-service

This module provides shared fixtures, markers, and configuration for all tests.
"""

import io
from typing import Any, Dict

import pytest

from document_classifier.models import ProviderRequest, ProviderResult
from document_classifier.providers.base import BaseProviderClient


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: Integration tests (full pipeline, mocked HTTP)")
    config.addinivalue_line("markers", "api: API/service tests")


# =============================================================================
# Sample File Fixtures
# =============================================================================

@pytest.fixture
def create_pdf_bytes():
    """Factory fixture to create PDF bytes with one text line per page."""
    def _create(pages: int = 1, text: str = "CARTEIRA NACIONAL DE HABILITACAO") -> bytes:
        import fitz
        doc = fitz.open()
        for i in range(pages):
            page = doc.new_page(width=595, height=842)
            page.insert_text((72, 72), f"{text} - page {i + 1}", fontsize=12)
        data = doc.tobytes()
        doc.close()
        return data
    return _create


@pytest.fixture
def create_png_bytes():
    """Factory fixture to create a small PNG image."""
    def _create(size=(60, 40), color="white") -> bytes:
        from PIL import Image
        buffer = io.BytesIO()
        Image.new("RGB", size, color=color).save(buffer, format="PNG")
        return buffer.getvalue()
    return _create


# =============================================================================
# Sample Response Fixtures
# =============================================================================

@pytest.fixture
def chat_completion():
    """Factory for chat completions response bodies."""
    def _create(content: Any) -> Dict[str, Any]:
        return {
            "id": "chatcmpl-123",
            "object": "chat.completion",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
        }
    return _create


@pytest.fixture
def sample_model_answer() -> str:
    """Typical fenced model answer."""
    return '```json\n{"tipo": "CNH", "nome": "Ana"}\n```'


# =============================================================================
# Scripted Provider
# =============================================================================

class ScriptedProviderClient(BaseProviderClient):
    """
    Provider that replays scripted outcomes instead of calling HTTP.

    Each script entry is either a string (success with that text) or a
    (status_code, message) tuple (failure).
    """

    def __init__(self, name: str, script: list, supports_images: bool = False):
        super().__init__(
            name=name,
            api_key="test-key",
            endpoint_url=f"https://{name.lower()}.test/chat/completions",
            model=f"{name.lower()}-model",
            max_tokens=500,
            temperature=0.0,
            timeout=5,
        )
        self.supports_images = supports_images
        self.script = list(script)
        self.requests: list[ProviderRequest] = []

    def build_payload(self, request: ProviderRequest) -> Dict[str, Any]:
        return {}

    def call(self, request: ProviderRequest, timeout: float | None = None) -> ProviderResult:
        self.requests.append(request)
        if not self.script:
            raise AssertionError(f"{self.name} called more often than scripted")
        outcome = self.script.pop(0)
        if isinstance(outcome, str):
            return ProviderResult.success(self.name, outcome)
        status_code, message = outcome
        return ProviderResult.failure(self.name, status_code, message)


@pytest.fixture
def scripted_vision():
    """Factory for a scripted vision-capable provider."""
    def _create(*script) -> ScriptedProviderClient:
        return ScriptedProviderClient("Vision", list(script), supports_images=True)
    return _create


@pytest.fixture
def scripted_text():
    """Factory for a scripted text-only provider."""
    def _create(*script) -> ScriptedProviderClient:
        return ScriptedProviderClient("Text", list(script))
    return _create

