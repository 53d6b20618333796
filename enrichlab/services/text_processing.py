"""
Text processing for the retrieval corpus: cleaning and chunking.

Chunks are what ITER-RETGEN pastes into the generation prompt, so they should
stay readable: sentence boundaries are kept and words are never cut.
"""

import re
import unicodedata


def clean_text(text: str) -> str:
    """
    Normalize raw document text: NFKC, trimmed lines, no consecutive duplicate
    lines, at most one blank line between paragraphs.
    """
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    result: list[str] = []
    previous: str | None = None
    for line in (raw.strip() for raw in text.splitlines()):
        if line == previous:
            continue
        previous = line
        if line == "" and (not result or result[-1] == ""):
            continue
        result.append(line)
    return "\n".join(result).strip()


def _tail(parts: list[str], overlap: int) -> list[str]:
    """Trailing parts whose joined length fits in overlap."""
    kept: list[str] = []
    size = 0
    for part in reversed(parts):
        if size + len(part) + 1 > overlap:
            break
        kept.append(part)
        size += len(part) + 1
    kept.reverse()
    return kept


def _joined_len(parts: list[str]) -> int:
    return sum(len(p) for p in parts) + max(0, len(parts) - 1)


def chunk_text(text: str, chunk_size: int = 500, overlap: int = 50) -> list[str]:
    """
    Split text into sentence-aware chunks of at most chunk_size characters.

    When a chunk is flushed, its trailing sentences (up to overlap characters)
    start the next one. Sentences longer than chunk_size are split on words.
    """
    if not text or not text.strip():
        return []
    text = text.strip()
    if len(text) <= chunk_size:
        return [text]

    sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+", text) if s.strip()]
    units: list[str] = []
    for sent in sentences:
        if len(sent) > chunk_size:
            units.extend(sent.split())
        else:
            units.append(sent)

    chunks: list[str] = []
    current: list[str] = []
    for unit in units:
        if current and _joined_len(current + [unit]) > chunk_size:
            chunks.append(" ".join(current))
            current = _tail(current, overlap)
            # overlap must not push the next unit past the limit
            while current and _joined_len(current + [unit]) > chunk_size:
                current.pop(0)
        current.append(unit)
    if current:
        chunks.append(" ".join(current))
    return chunks
