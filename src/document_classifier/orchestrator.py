"""
Extraction Orchestrator
=======================

Runs the provider fallback chain for one document.

    Image input:
        1. vision_classify       vision provider, instruction + image
        2. vision_ocr            vision provider, transcription only
        3. text_classify         text provider, transcript
        4. vision_text_classify  vision provider, transcript as text
    Text input:
        3. text_classify         text provider
        4. vision_text_classify  vision provider

The first usable answer wins. If OCR fails, or both text analyzers fail,
a local descriptive payload is returned instead. Each provider is tried at
most once per step; there are no retries. An optional cancel event stops
the chain between steps.

Usage:
    orchestrator = ExtractionOrchestrator(
        vision_client=OpenAIClient(),
        text_client=DeepSeekClient(),
    )
    result = orchestrator.classify(document, source=upload)
    print(result.provider, result.raw_text)
"""

import json
import logging
import threading
import time
from datetime import datetime, timezone

from . import prompts
from .errors import AnalysisCancelled
from .models import (
    ClassificationResult,
    DocumentInput,
    ImageInput,
    OrchestratorConfig,
    ProviderAttempt,
    ProviderRequest,
    ProviderResult,
    TextInput,
    UploadedFile,
)
from .providers.base import BaseProviderClient

logger = logging.getLogger(__name__)

LOCAL_PROVIDER = "local"


class ExtractionOrchestrator:
    """Classifies a DocumentInput through the vision/text provider chain."""

    def __init__(
        self,
        vision_client: BaseProviderClient,
        text_client: BaseProviderClient,
        config: OrchestratorConfig | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            vision_client: Vision-capable provider (classification, OCR, second-chance text)
            text_client: Text-only provider (preferred text analyzer)
            config: Orchestrator configuration
        """
        if not vision_client.supports_images:
            raise ValueError(f"{vision_client.name} cannot be used as vision provider")
        self.vision_client = vision_client
        self.text_client = text_client
        self.config = config or OrchestratorConfig()

    def classify(
        self,
        document: DocumentInput,
        source: UploadedFile,
        cancel_event: threading.Event | None = None,
    ) -> ClassificationResult:
        """
        Classify a document and return the raw model answer.

        Args:
            document: Normalized document input
            source: Original upload, used for the local fallback payload
            cancel_event: Checked before each provider call; once set the
                remaining steps are skipped

        Returns:
            ClassificationResult; never raises for provider failures

        Raises:
            AnalysisCancelled: cancel_event was set before the chain finished
        """
        start_time = time.time()
        attempts: list[ProviderAttempt] = []

        if isinstance(document, ImageInput):
            answer = self._classify_image(document, attempts, cancel_event)
        elif isinstance(document, TextInput):
            answer = self._classify_text(document.content, attempts, cancel_event)
        else:
            raise TypeError(f"Unsupported document input: {type(document).__name__}")

        elapsed = (time.time() - start_time) * 1000

        if answer is None:
            logger.warning(
                "All providers failed for %s, returning local fallback (%s)",
                source.name,
                "; ".join(a.summary() for a in attempts),
            )
            return ClassificationResult(
                raw_text=self._local_fallback(source, attempts),
                provider=LOCAL_PROVIDER,
                attempts=attempts,
                used_local_fallback=True,
                elapsed_ms=elapsed,
            )

        return ClassificationResult(
            raw_text=answer.text,
            provider=answer.provider,
            attempts=attempts,
            elapsed_ms=elapsed,
        )

    def _classify_image(
        self,
        document: ImageInput,
        attempts: list[ProviderAttempt],
        cancel_event: threading.Event | None = None,
    ) -> ProviderResult | None:
        """Vision classification, then OCR + text analysis on failure."""
        result = self._attempt(
            "vision_classify",
            self.vision_client,
            self.vision_client.build_request(
                prompts.CLASSIFY_IMAGE_PROMPT, image_url=document.data_uri
            ),
            attempts,
            cancel_event,
        )
        if result.usable:
            return result

        logger.warning(
            "Vision classification failed, falling back to OCR + text analysis"
        )
        transcript = self._attempt(
            "vision_ocr",
            self.vision_client,
            self.vision_client.build_request(prompts.OCR_PROMPT, image_url=document.data_uri),
            attempts,
            cancel_event,
        )
        if not transcript.usable:
            return None

        return self._classify_text(transcript.text, attempts, cancel_event)

    def _classify_text(
        self,
        text: str,
        attempts: list[ProviderAttempt],
        cancel_event: threading.Event | None = None,
    ) -> ProviderResult | None:
        """Text provider first, vision provider as second-chance text analyzer."""
        prompt = prompts.classify_text_prompt(text)

        result = self._attempt(
            "text_classify",
            self.text_client,
            self.text_client.build_request(prompt),
            attempts,
            cancel_event,
        )
        if result.usable:
            return result

        logger.warning(
            "%s text analysis failed, retrying with %s",
            self.text_client.name,
            self.vision_client.name,
        )
        result = self._attempt(
            "vision_text_classify",
            self.vision_client,
            self.vision_client.build_request(prompt),
            attempts,
            cancel_event,
        )
        if result.usable:
            return result

        return None

    def _attempt(
        self,
        step: str,
        client: BaseProviderClient,
        request: ProviderRequest,
        attempts: list[ProviderAttempt],
        cancel_event: threading.Event | None = None,
    ) -> ProviderResult:
        """Run one call and record it in the trace."""
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Analysis cancelled before %s (%d steps done)", step, len(attempts))
            raise AnalysisCancelled(f"cancelled before {step}")

        result = client.call(request)
        message = result.message
        if result.ok and not result.usable:
            message = "empty response"

        attempts.append(
            ProviderAttempt(
                step=step,
                provider=client.name,
                ok=result.usable,
                status_code=result.status_code,
                message=message,
                elapsed_ms=result.elapsed_ms,
            )
        )
        return result

    def _local_fallback(self, source: UploadedFile, attempts: list[ProviderAttempt]) -> str:
        """Describe the upload without any remote analysis."""
        payload = {
            "document_type": "unidentified",
            "file_name": source.name,
            "content_type": source.content_type,
            "size_bytes": source.size_bytes,
            "note": self.config.local_fallback_note,
            "errors": [a.summary() for a in attempts],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return json.dumps(payload, ensure_ascii=False)
