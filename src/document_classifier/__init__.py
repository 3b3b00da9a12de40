"""
Document Classifier
===================

Classifies uploaded documents (text, PDF or image) and extracts their
fields as JSON using remote LLM providers.

Features:
- Input normalization (txt -> text, pdf -> first page PNG, images passed through)
- Vision provider first, OCR + text provider fallback chain
- Local descriptive fallback when every provider is down
- Recovery of JSON from fenced, escaped or slightly malformed model output

Basic Usage:
    from document_classifier import UploadedFile, build_pipeline

    pipeline = build_pipeline()
    document = pipeline.analyze(UploadedFile("rg.png", data, "image/png"))
    print(document)

Advanced Usage:
    from document_classifier import ExtractionOrchestrator, InputNormalizer, sanitize
    from document_classifier.providers import DeepSeekClient, OpenAIClient

    orchestrator = ExtractionOrchestrator(
        vision_client=OpenAIClient(model="gpt-4o", timeout=60),
        text_client=DeepSeekClient(temperature=0.2),
    )
    document = InputNormalizer().normalize(upload)
    result = orchestrator.classify(document, source=upload)
    fields = sanitize(result.raw_text)
"""

__version__ = "0.1.0"

from .errors import (
    AnalysisCancelled,
    ConfigurationError,
    DocumentClassifierError,
    DocumentTooLarge,
    EmptyDocument,
    MalformedProviderPayload,
    ProviderError,
    ProviderHttpError,
    ProviderTransportError,
    UnsupportedFormat,
)
from .models import (
    ClassificationResult,
    DocumentInput,
    ExtractedDocument,
    ImageInput,
    OrchestratorConfig,
    ProviderAttempt,
    ProviderRequest,
    ProviderResult,
    SanitizeStatus,
    TextInput,
    UploadedFile,
)
from .normalizer import InputNormalizer
from .orchestrator import ExtractionOrchestrator
from .pipeline import DocumentPipeline, build_pipeline
from .sanitizer import sanitize

__all__ = [
    # Version
    "__version__",
    # Input
    "UploadedFile",
    "DocumentInput",
    "TextInput",
    "ImageInput",
    "InputNormalizer",
    # Providers
    "ProviderRequest",
    "ProviderResult",
    # Orchestration
    "ExtractionOrchestrator",
    "OrchestratorConfig",
    "ClassificationResult",
    "ProviderAttempt",
    # Sanitizing
    "sanitize",
    "ExtractedDocument",
    "SanitizeStatus",
    # Pipeline
    "DocumentPipeline",
    "build_pipeline",
    # Errors
    "DocumentClassifierError",
    "AnalysisCancelled",
    "ConfigurationError",
    "UnsupportedFormat",
    "EmptyDocument",
    "DocumentTooLarge",
    "ProviderError",
    "ProviderTransportError",
    "ProviderHttpError",
    "MalformedProviderPayload",
]
