"""
Document Pipeline
=================

Upload -> InputNormalizer -> ExtractionOrchestrator -> sanitize().

Usage:
    pipeline = build_pipeline()  # reads OPENAI_API_KEY / DEEPSEEK_API_KEY
    document = pipeline.analyze(UploadedFile("cnh.jpg", data, "image/jpeg"))
    print(document["tipo"])
"""

import logging
import threading
import time

from .errors import ConfigurationError
from .models import ExtractedDocument, OrchestratorConfig, UploadedFile
from .normalizer import InputNormalizer
from .orchestrator import ExtractionOrchestrator
from .providers import DeepSeekClient, OpenAIClient
from .providers.base import BaseProviderClient
from .sanitizer import sanitize

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Classifies one uploaded document per call; holds no per-request state."""

    def __init__(
        self,
        orchestrator: ExtractionOrchestrator,
        normalizer: InputNormalizer | None = None,
    ):
        self.orchestrator = orchestrator
        self.normalizer = normalizer or InputNormalizer()

    @property
    def providers(self) -> list[BaseProviderClient]:
        return [self.orchestrator.vision_client, self.orchestrator.text_client]

    def analyze(
        self,
        upload: UploadedFile,
        cancel_event: threading.Event | None = None,
    ) -> ExtractedDocument:
        """
        Classify an upload and return the structured document.

        Raises:
            UnsupportedFormat, EmptyDocument, DocumentTooLarge: Bad input,
                raised before any provider call
            AnalysisCancelled: cancel_event was set while providers were being called
        """
        start_time = time.time()

        document = self.normalizer.normalize(upload)
        result = self.orchestrator.classify(document, source=upload, cancel_event=cancel_event)
        extracted = sanitize(result.raw_text)

        logger.info(
            "Analyzed %s: provider=%s, status=%s, attempts=%d, time=%.0fms",
            upload.name,
            result.provider,
            extracted.status.value,
            len(result.attempts),
            (time.time() - start_time) * 1000,
        )
        return extracted


def build_pipeline(
    vision_client: BaseProviderClient | None = None,
    text_client: BaseProviderClient | None = None,
    normalizer: InputNormalizer | None = None,
    config: OrchestratorConfig | None = None,
) -> DocumentPipeline:
    """
    Build a pipeline, constructing provider clients from the environment.

    Raises:
        ConfigurationError: A provider has no API key, or a numeric setting is invalid
    """
    vision_client = vision_client or OpenAIClient()
    text_client = text_client or DeepSeekClient()

    missing = [c.name for c in (vision_client, text_client) if not c.is_available()]
    if missing:
        raise ConfigurationError(f"API key not configured for: {', '.join(missing)}")

    return DocumentPipeline(
        orchestrator=ExtractionOrchestrator(vision_client, text_client, config),
        normalizer=normalizer,
    )
