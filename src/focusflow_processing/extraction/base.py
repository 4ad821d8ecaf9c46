"""Abstract base class for content extractors."""

from abc import ABC, abstractmethod

from focusflow_processing.schemas.content import InputType


class BaseExtractor(ABC):
    """Abstract base class for content extractors.

    Every input kind (PDF, text, link, video) has one extractor turning the
    resolved raw payload into plain text.
    """

    input_type: InputType

    @abstractmethod
    async def extract(self, content: bytes) -> str:
        """Extract plain text from a raw payload.

        Args:
            content: Resolved raw payload

        Returns:
            Extracted plain text

        Raises:
            ExtractionError: If extraction fails
            EmptyContentError: If no meaningful content could be extracted
        """
        pass
