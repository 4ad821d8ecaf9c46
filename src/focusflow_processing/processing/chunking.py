"""Fixed-size character chunking for piecewise summarization."""

DEFAULT_CHUNK_SIZE = 3000


def chunk_text(text: str, size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split text into consecutive, non-overlapping chunks of ``size`` characters.

    Concatenating the chunks in order reproduces ``text`` exactly; only the
    last chunk may be shorter. An empty string yields no chunks.

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [text[start : start + size] for start in range(0, len(text), size)]
