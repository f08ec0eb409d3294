import re
from dataclasses import dataclass
from typing import Iterator

_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_BLANK_RUNS = re.compile(r"\n{3,}")

@dataclass(frozen=True)
class Segment:
    page: int
    order: int
    text: str

def normalize_text(text: str) -> str:
    text = text.replace("\r", "")
    text = _TRAILING_SPACE.sub("\n", text)
    return _BLANK_RUNS.sub("\n\n", text)

class DocumentChunker:
    """
    Character-window chunker with overlap.

    ``chunk()`` returns a fresh generator on every call, so the same chunker
    can be iterated any number of times without materializing the segments.
    Plain text has no pages; ``page`` is always 0.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap must not be negative")
        if chunk_overlap >= chunk_size:
            raise ValueError(f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk(self, text: str) -> Iterator[Segment]:
        clean = normalize_text(text)
        cursor, order = 0, 0
        while cursor < len(clean):
            end = min(len(clean), cursor + self.chunk_size)
            yield Segment(page=0, order=order, text=clean[cursor:end])
            order += 1
            if end >= len(clean):
                break
            cursor = max(0, end - self.chunk_overlap)
