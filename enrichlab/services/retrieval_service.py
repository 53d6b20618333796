"""
Retrieval: keyword search over a local document corpus.

Responsibility: Load the corpus once, keep cleaned chunks in memory, and return
the top chunks for a query. There is no embedding model here; chunks are
ranked by how many query terms they contain.
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from enrichlab.core.config import CHUNK_OVERLAP, CHUNK_SIZE, CORPUS_DIR, RETRIEVE_TOP_K
from enrichlab.ingest.loader import bytes_to_text, iter_corpus_files
from enrichlab.services.text_processing import chunk_text, clean_text

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[a-z0-9]+")
STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does", "for",
    "from", "how", "i", "in", "is", "it", "of", "on", "or", "that", "the", "this",
    "to", "was", "we", "what", "when", "where", "which", "who", "why", "with", "you",
})


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens of length >= 2, stopwords removed."""
    return [t for t in _TOKEN.findall((text or "").lower()) if len(t) >= 2 and t not in STOPWORDS]


@dataclass
class DocumentIndex:
    """In-memory chunk store. Chunk ids are assigned in load order."""

    chunks: list[dict[str, Any]] = field(default_factory=list)

    def add_document(self, source: str, text: str,
                     chunk_size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> int:
        """Clean and chunk text, append chunks. Returns number of chunks added."""
        pieces = chunk_text(clean_text(text), chunk_size=chunk_size, overlap=overlap)
        for i, piece in enumerate(pieces):
            self.chunks.append({
                "id": len(self.chunks),
                "text": piece,
                "metadata": {"source": source, "chunk_id": i},
                "_terms": tokenize(piece),
            })
        return len(pieces)

    def sources(self) -> list[str]:
        seen: dict[str, None] = {}
        for c in self.chunks:
            seen.setdefault(c["metadata"]["source"], None)
        return list(seen)

    def search(self, query: str, top_k: int = RETRIEVE_TOP_K) -> list[dict[str, Any]]:
        """
        Rank chunks by (distinct query terms present, total term hits), ties by
        load order. Chunks with no matching term are dropped.
        """
        words = set(tokenize(query))
        if not words or top_k <= 0:
            return []
        scored = []
        for c in self.chunks:
            terms = c["_terms"]
            distinct = len(words.intersection(terms))
            if not distinct:
                continue
            hits = sum(1 for t in terms if t in words)
            scored.append((distinct, hits, c))
        scored.sort(key=lambda x: (-x[0], -x[1], x[2]["id"]))
        return [
            {
                "id": c["id"],
                "text": c["text"],
                "score": float(distinct) + hits / (hits + 1.0),
                "metadata": dict(c["metadata"]),
            }
            for distinct, hits, c in scored[:top_k]
        ]


def load_corpus(directory: str | Path = CORPUS_DIR) -> DocumentIndex:
    """Read every supported file under directory into a new index."""
    index = DocumentIndex()
    root = Path(directory)
    for path in iter_corpus_files(root):
        try:
            text = bytes_to_text(path.read_bytes(), path.name)
        except Exception as e:
            logger.warning("[retrieval:load_corpus] skip %s: %s", path, e)
            continue
        added = index.add_document(path.relative_to(root).as_posix(), text)
        logger.info("[retrieval:load_corpus] source=%s chunks=%d", path.name, added)
    logger.info("[retrieval:load_corpus] OUT dir=%s sources=%d chunks=%d",
                root, len(index.sources()), len(index.chunks))
    return index


_index: DocumentIndex | None = None
_lock = threading.Lock()


def get_index() -> DocumentIndex:
    """Process-wide index, loaded from CORPUS_DIR on first use."""
    global _index
    with _lock:
        if _index is None:
            _index = load_corpus(CORPUS_DIR)
        return _index


def reload_index(directory: str | Path | None = None) -> DocumentIndex:
    """Replace the process-wide index (e.g. after editing the corpus)."""
    global _index
    index = load_corpus(directory if directory is not None else CORPUS_DIR)
    with _lock:
        _index = index
    return index


def list_sources() -> list[str]:
    return get_index().sources()


def retrieve_context(query: str, top_k: int = RETRIEVE_TOP_K) -> list[dict[str, Any]]:
    """Top chunks for query from the process-wide index."""
    logger.info("[retrieval:retrieve_context] IN  query=%r top_k=%d", (query or "")[:200], top_k)
    if not query or not query.strip():
        return []
    results = get_index().search(query, top_k=top_k)
    logger.info("[retrieval:retrieve_context] OUT results=%d sources=%s",
                len(results), [r["metadata"]["source"] for r in results])
    return results
