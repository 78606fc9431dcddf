"""Default chunker — packs paragraphs into roughly equal word-count chunks."""

import re

from objproof.config import get_config
from objproof.models import Chunk, count_words

_PARAGRAPH_RE = re.compile(r"\n\s*\n")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


def _split_long_paragraph(paragraph: str, target: int) -> list[str]:
    """Break a paragraph longer than ``target`` words on sentence boundaries."""
    pieces = []
    current: list[str] = []
    current_words = 0
    for sentence in _SENTENCE_RE.split(paragraph):
        words = count_words(sentence)
        if current and current_words + words > target:
            pieces.append(" ".join(current))
            current, current_words = [], 0
        current.append(sentence)
        current_words += words
    if current:
        pieces.append(" ".join(current))
    return pieces


def smart_chunk(text: str, target_words: int | None = None) -> list[Chunk]:
    """Split text into ordered chunks of about ``target_words`` words.

    Paragraph boundaries are preserved; only paragraphs that alone exceed the
    target are split further, on sentence boundaries. A paragraph is never
    split mid-sentence, so a single run-on sentence can exceed the target.
    """
    target = target_words or get_config().get("target_chunk_words", 800)

    units = []
    for paragraph in _PARAGRAPH_RE.split(text):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if count_words(paragraph) > target:
            units.extend(_split_long_paragraph(paragraph, target))
        else:
            units.append(paragraph)

    chunks: list[Chunk] = []
    current: list[str] = []
    current_words = 0
    for unit in units:
        words = count_words(unit)
        if current and current_words + words > target:
            chunks.append(Chunk(index=len(chunks), text="\n\n".join(current), word_count=current_words))
            current, current_words = [], 0
        current.append(unit)
        current_words += words
    if current:
        chunks.append(Chunk(index=len(chunks), text="\n\n".join(current), word_count=current_words))

    return chunks
