"""Plain text pass-through extractor."""

from focusflow_processing.schemas.content import InputType

from .base import BaseExtractor
from .exceptions import ExtractionError


class TextExtractor(BaseExtractor):
    """Decode raw bytes as UTF-8 text (a leading BOM is dropped)."""

    input_type = InputType.TEXT

    async def extract(self, content: bytes) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"Text is not valid UTF-8: {e}") from e
