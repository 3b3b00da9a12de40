"""
Data Models for Document Classification
=======================================

Shared data models for the document classifier: the canonical document
input, provider request/response shapes and the extracted document.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

IMAGE_TYPES = ("png", "jpg", "jpeg")


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload as received at the boundary."""

    name: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot, empty if there is none."""
        _, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot else ""

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class TextInput:
    """Plain text document."""

    content: str


@dataclass(frozen=True)
class ImageInput:
    """Base64-encoded raster image of the document."""

    mime_type: str  # png, jpg or jpeg
    base64: str

    def __post_init__(self) -> None:
        if self.mime_type not in IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {self.mime_type}")

    @property
    def data_uri(self) -> str:
        return f"data:image/{self.mime_type};base64,{self.base64}"


DocumentInput = Union[TextInput, ImageInput]


# =============================================================================
# Provider request / result
# =============================================================================


@dataclass(frozen=True)
class TextPart:
    """Text content part of a message turn."""

    text: str


@dataclass(frozen=True)
class ImagePart:
    """Image reference content part (data URI or URL)."""

    url: str
    detail: str = "auto"


ContentPart = Union[TextPart, ImagePart]


@dataclass(frozen=True)
class MessageTurn:
    """One chat turn: a role and its ordered content parts."""

    role: str
    parts: tuple[ContentPart, ...]

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def has_image(self) -> bool:
        return any(isinstance(p, ImagePart) for p in self.parts)


@dataclass(frozen=True)
class ProviderRequest:
    """A single chat completions request, built fresh per call."""

    model: str
    messages: tuple[MessageTurn, ...]
    max_tokens: int
    temperature: float

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError("ProviderRequest needs at least one message turn")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be in [0, 1], got {self.temperature}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider call: success with text, or failure."""

    ok: bool
    provider: str
    text: str = ""
    status_code: int | None = None
    message: str = ""
    elapsed_ms: float = 0.0

    @classmethod
    def success(cls, provider: str, text: str, elapsed_ms: float = 0.0) -> "ProviderResult":
        return cls(ok=True, provider=provider, text=text, status_code=200, elapsed_ms=elapsed_ms)

    @classmethod
    def failure(
        cls,
        provider: str,
        status_code: int,
        message: str,
        elapsed_ms: float = 0.0,
    ) -> "ProviderResult":
        return cls(
            ok=False,
            provider=provider,
            status_code=status_code,
            message=message,
            elapsed_ms=elapsed_ms,
        )

    @property
    def usable(self) -> bool:
        """Successful and non-blank."""
        return self.ok and bool(self.text.strip())


# =============================================================================
# Orchestration
# =============================================================================


@dataclass
class OrchestratorConfig:
    """Configuration for ExtractionOrchestrator."""

    local_fallback_note: str = "remote analysis unavailable: all providers failed"


@dataclass
class ProviderAttempt:
    """One step of the fallback chain."""

    step: str
    provider: str
    ok: bool
    status_code: int | None = None
    message: str = ""
    elapsed_ms: float = 0.0

    def summary(self) -> str:
        if self.ok:
            return f"{self.step} ({self.provider}): ok"
        return f"{self.step} ({self.provider}): {self.status_code} {self.message[:200]}"


@dataclass
class ClassificationResult:
    """Result from ExtractionOrchestrator.classify()."""

    raw_text: str
    provider: str
    attempts: list[ProviderAttempt] = field(default_factory=list)
    used_local_fallback: bool = False
    elapsed_ms: float = 0.0


# =============================================================================
# Extracted document
# =============================================================================


class SanitizeStatus(Enum):
    """How the sanitizer arrived at an ExtractedDocument."""

    PARSED = "parsed"  # Parsed after fence stripping
    UNESCAPED = "unescaped"  # Parsed after removing stray backslashes
    REPAIRED = "repaired"  # Parsed after comma repair
    EMPTY = "empty"  # Model returned nothing
    UNIDENTIFIED = "unidentified"  # Fallback shape


class ExtractedDocument(dict):
    """
    Structured result returned to the caller.

    A plain mapping of field name to value, tagged with the SanitizeStatus
    that produced it. Equality is plain dict equality.
    """

    def __init__(self, fields: Any = (), status: SanitizeStatus = SanitizeStatus.PARSED):
        super().__init__(fields)
        self.status = status

    @classmethod
    def empty(cls) -> "ExtractedDocument":
        return cls({"error": "empty response"}, status=SanitizeStatus.EMPTY)

    @classmethod
    def unidentified(cls, raw_text: str, now: datetime | None = None) -> "ExtractedDocument":
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        return cls(
            {
                "document_type": "unidentified",
                "raw_text": raw_text.strip(),
                "note": "model output was not valid JSON",
                "timestamp": timestamp,
            },
            status=SanitizeStatus.UNIDENTIFIED,
        )

    @property
    def recovered(self) -> bool:
        """True when the model output was parsed into fields."""
        return self.status in (
            SanitizeStatus.PARSED,
            SanitizeStatus.UNESCAPED,
            SanitizeStatus.REPAIRED,
        )

    def __repr__(self) -> str:
        return f"ExtractedDocument({dict.__repr__(self)}, status={self.status.value})"
