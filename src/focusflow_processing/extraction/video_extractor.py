"""Video transcript extraction using the OpenAI transcription API.

Video support is partial: the audio track is transcribed as-is, with no
frame analysis. Payloads are processed from a local file the resolver
streamed to disk, so large videos are never held in memory.
"""

import tempfile
from pathlib import Path

import openai
from openai import AsyncOpenAI

from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.content import InputType

from .base import BaseExtractor
from .exceptions import EmptyContentError, ExtractionError

logger = get_logger(__name__)


class VideoExtractor(BaseExtractor):
    """Transcribe a video's speech to plain text."""

    input_type = InputType.VIDEO

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = "whisper-1",
        temp_dir: str | Path | None = None,
    ) -> None:
        self._client = client
        self.model = model
        self.temp_dir = temp_dir

    async def extract(self, content: bytes) -> str:
        with tempfile.TemporaryDirectory(prefix="video-", dir=self.temp_dir) as workdir:
            path = Path(workdir) / "payload.mp4"
            try:
                path.write_bytes(content)
            except OSError as e:
                raise ExtractionError(f"Video file could not be written: {e}") from e
            return await self.extract_file(path)

    async def extract_file(self, path: Path) -> str:
        """Transcribe a video file already on local disk."""
        if self._client is None:
            raise ExtractionError("Video transcription is not configured (OPENAI_API_KEY missing)")

        try:
            with path.open("rb") as fh:
                transcript = await self._client.audio.transcriptions.create(
                    model=self.model,
                    file=fh,
                    response_format="text",
                )
        except openai.APIError as e:
            raise ExtractionError(f"Video transcription failed: {e.message}") from e
        except OSError as e:
            raise ExtractionError(f"Video file could not be read: {e}") from e

        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        text = (text or "").strip()
        if not text:
            raise EmptyContentError("Video contains no transcribable speech")

        logger.debug("video_transcribed", path=str(path), chars=len(text))
        return text
