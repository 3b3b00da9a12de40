"""
Error Taxonomy
==============

Exceptions raised by the document classifier.

Only the input errors (UnsupportedFormat, EmptyDocument, DocumentTooLarge)
reach the HTTP boundary. ProviderError subclasses are raised inside a
provider client and converted to a failed ProviderResult before returning.
"""


class DocumentClassifierError(Exception):
    """Base class for all document classifier errors."""


class ConfigurationError(DocumentClassifierError):
    """Required configuration (API keys, numeric settings) is missing or invalid."""


class UnsupportedFormat(DocumentClassifierError):
    """Uploaded file type is not one of txt, pdf, png, jpg, jpeg."""


class EmptyDocument(DocumentClassifierError):
    """Uploaded file has no content."""


class DocumentTooLarge(DocumentClassifierError):
    """Text upload exceeds the configured size cap."""


class AnalysisCancelled(DocumentClassifierError):
    """The caller went away; remaining provider calls were skipped."""


class ProviderError(DocumentClassifierError):
    """A single provider call failed."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ProviderTransportError(ProviderError):
    """Connection failure or timeout talking to a provider."""

    def __init__(self, message: str):
        super().__init__(0, message)


class ProviderHttpError(ProviderError):
    """Provider answered with a non-2xx status."""


class MalformedProviderPayload(ProviderError):
    """2xx response whose body does not match the chat completions envelope."""

    def __init__(self, message: str = "malformed provider response"):
        super().__init__(-1, message)
