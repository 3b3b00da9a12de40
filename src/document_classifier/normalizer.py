"""
Input Normalizer
================

Converts an uploaded file into the canonical DocumentInput:

    .txt               -> TextInput (decoded content, size capped)
    .pdf               -> ImageInput("png", ...) of the FIRST page only
    .png/.jpg/.jpeg    -> ImageInput(<ext>, ...) with the bytes unchanged

Only the first page of a PDF is rendered. Multi-page documents are
classified from their cover page.
"""

import base64
import logging
from io import BytesIO

import fitz  # PyMuPDF
from PIL import Image

from .config import env_int
from .errors import DocumentTooLarge, EmptyDocument, UnsupportedFormat
from .models import IMAGE_TYPES, DocumentInput, ImageInput, TextInput, UploadedFile

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("txt", "pdf") + IMAGE_TYPES


class InputNormalizer:
    """
    Normalizes uploads into TextInput or ImageInput.

    Environment variables:
        MAX_UPLOAD_BYTES: Size cap for any upload (default: 20 MiB)
        MAX_TEXT_BYTES: Size cap for .txt uploads (default: 1 MiB)
    """

    DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
    DEFAULT_MAX_TEXT_BYTES = 1024 * 1024
    PDF_RENDER_SIZE = (800, 1000)  # width, height in pixels

    def __init__(
        self,
        max_text_bytes: int | None = None,
        render_size: tuple[int, int] | None = None,
        max_upload_bytes: int | None = None,
    ):
        """
        Initialize the normalizer.

        Args:
            max_text_bytes: Maximum accepted size of a text upload
            max_upload_bytes: Maximum accepted size of any upload
            render_size: Target (width, height) for the rendered PDF page
        """
        self.max_text_bytes = (
            max_text_bytes
            if max_text_bytes is not None
            else env_int("MAX_TEXT_BYTES", self.DEFAULT_MAX_TEXT_BYTES)
        )
        self.max_upload_bytes = (
            max_upload_bytes
            if max_upload_bytes is not None
            else env_int("MAX_UPLOAD_BYTES", self.DEFAULT_MAX_UPLOAD_BYTES)
        )
        self.render_size = render_size or self.PDF_RENDER_SIZE

    def normalize(self, upload: UploadedFile) -> DocumentInput:
        """
        Convert an upload into a DocumentInput.

        Raises:
            UnsupportedFormat: Extension not supported, or a PDF that cannot be read
            EmptyDocument: Upload has no bytes
            DocumentTooLarge: Upload above max_upload_bytes, or text upload
                above max_text_bytes
        """
        extension = upload.extension
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormat(
                f"Unsupported file format: '{upload.name}'. "
                f"Accepted: {', '.join(SUPPORTED_EXTENSIONS)}"
            )

        if not upload.content:
            raise EmptyDocument(f"File is empty: '{upload.name}'")

        if upload.size_bytes > self.max_upload_bytes:
            raise DocumentTooLarge(
                f"File '{upload.name}' exceeds the upload limit of "
                f"{self.max_upload_bytes} bytes"
            )

        if extension == "txt":
            return self._normalize_text(upload)

        if extension == "pdf":
            png_bytes = self._render_first_page(upload)
            return ImageInput("png", self._encode(png_bytes))

        return ImageInput(extension, self._encode(upload.content))

    def _normalize_text(self, upload: UploadedFile) -> TextInput:
        if upload.size_bytes > self.max_text_bytes:
            raise DocumentTooLarge(
                f"Text file '{upload.name}' is {upload.size_bytes} bytes, "
                f"limit is {self.max_text_bytes}"
            )
        return TextInput(upload.content.decode("utf-8-sig", errors="replace"))

    def _render_first_page(self, upload: UploadedFile) -> bytes:
        """Render page 1 of a PDF to PNG bytes at render_size."""
        width, height = self.render_size

        try:
            doc = fitz.open(stream=upload.content, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise UnsupportedFormat(f"Could not read PDF '{upload.name}': {e}") from e

        try:
            if len(doc) == 0:
                raise UnsupportedFormat(f"PDF has no pages: '{upload.name}'")
            if len(doc) > 1:
                logger.info(
                    "PDF %s has %d pages, only page 1 is analyzed", upload.name, len(doc)
                )

            page = doc[0]
            matrix = fitz.Matrix(width / page.rect.width, height / page.rect.height)
            pix = page.get_pixmap(matrix=matrix, alpha=False)
        finally:
            doc.close()

        image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    @staticmethod
    def _encode(data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")
