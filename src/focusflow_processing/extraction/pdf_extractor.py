"""PDF text extraction using PyMuPDF."""

import asyncio

import fitz  # PyMuPDF

from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.content import InputType

from .base import BaseExtractor
from .exceptions import EmptyContentError, ExtractionError
from .utils import clean_text

logger = get_logger(__name__)


class PDFExtractor(BaseExtractor):
    """Extract text from a PDF page by page.

    Pages are read in order and joined with a newline per page break.
    Image-only (scanned) documents have no text layer and are rejected;
    OCR is not attempted.
    """

    input_type = InputType.PDF

    def __init__(self, min_size_bytes: int = 100) -> None:
        self.min_size_bytes = min_size_bytes

    async def extract(self, content: bytes) -> str:
        if not content or len(content) < self.min_size_bytes:
            raise ExtractionError("Invalid or empty PDF buffer")

        # PyMuPDF is synchronous and CPU-bound; keep the event loop free
        return await asyncio.to_thread(self._extract_pages, content)

    def _extract_pages(self, content: bytes) -> str:
        try:
            doc = fitz.open(stream=content, filetype="pdf")
        except Exception as e:
            raise ExtractionError(f"PDF could not be opened: {e}") from e

        try:
            if doc.needs_pass:
                raise ExtractionError("PDF is password protected")

            page_texts: list[str] = []
            for page in doc:
                page_texts.append(clean_text(page.get_text()))
            page_count = doc.page_count
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"PDF extraction failed: {e}") from e
        finally:
            doc.close()

        if not any(page_texts):
            raise EmptyContentError("PDF contains no extractable text")

        text = "\n".join(page_texts)
        logger.debug("pdf_extracted", page_count=page_count, chars=len(text))
        return text
