"""Text extraction per input kind.

Usage:
    from focusflow_processing.extraction import PDFExtractor

    text = await PDFExtractor().extract(pdf_bytes)
"""

from .base import BaseExtractor
from .exceptions import EmptyContentError, ExtractionError, NetworkError
from .link_extractor import LinkExtractor, extract_html_text
from .pdf_extractor import PDFExtractor
from .text_extractor import TextExtractor
from .utils import clean_text, collapse_whitespace
from .video_extractor import VideoExtractor

__all__ = [
    # Base classes
    "BaseExtractor",
    # Extractors
    "PDFExtractor",
    "TextExtractor",
    "LinkExtractor",
    "VideoExtractor",
    # Exceptions
    "ExtractionError",
    "NetworkError",
    "EmptyContentError",
    # Utilities
    "extract_html_text",
    "clean_text",
    "collapse_whitespace",
]
