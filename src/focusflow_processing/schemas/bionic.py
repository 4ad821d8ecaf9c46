"""Bionic Reading document schema.

Wire/storage format of the processed artifact:

    {
      "paragraphs": [
        {"sentences": [{"text": "<b>Thi</b>s is an <b>exa</b>mple."}]}
      ]
    }

Each sentence text carries inline ``<b>...</b>`` markers over the leading
portion of each word. Serialization is canonical (sorted keys, compact
separators, UTF-8) so the same document always yields the same bytes.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Sentence(BaseModel):
    """One sentence with inline bold markers."""

    model_config = ConfigDict(extra="ignore")

    text: str = Field(description="Sentence text with <b></b> emphasis")


class Paragraph(BaseModel):
    """Ordered sequence of sentences."""

    model_config = ConfigDict(extra="ignore")

    sentences: list[Sentence] = Field(min_length=1)


class BionicDocument(BaseModel):
    """Ordered sequence of paragraphs."""

    model_config = ConfigDict(extra="ignore")

    paragraphs: list[Paragraph] = Field(min_length=1)

    @property
    def sentence_count(self) -> int:
        return sum(len(paragraph.sentences) for paragraph in self.paragraphs)


def serialize_bionic_document(document: BionicDocument) -> bytes:
    """Serialize a document to canonical JSON bytes."""
    payload: dict[str, Any] = document.model_dump(mode="json")
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def parse_bionic_document(raw: str | bytes) -> BionicDocument:
    """Parse JSON text into a document.

    Raises:
        ValueError: If the text is not JSON (json.JSONDecodeError) or does not
            match the schema (pydantic.ValidationError).
    """
    data = json.loads(raw)
    return BionicDocument.model_validate(data)
