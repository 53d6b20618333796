# Minimal corpus loader. No embeddings, no vector DB, no chunking.
# Supports .txt, .md, .pdf. Single place for "file/bytes → text".

import io
from collections.abc import Iterator
from pathlib import Path

from pypdf import PdfReader

from enrichlab.core.config import ALLOWED_EXTENSIONS


def bytes_to_text(raw: bytes, filename: str) -> str:
    """
    Convert raw file bytes to text by extension. Markdown and plain text are
    decoded as UTF-8; PDFs go through pypdf.
    """
    ext = Path(filename).suffix.lower() if filename else ""
    if ext == ".pdf":
        return _read_pdf(raw)
    return raw.decode("utf-8", errors="replace")


def _read_pdf(raw: bytes) -> str:
    reader = PdfReader(io.BytesIO(raw))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def iter_corpus_files(directory: str | Path) -> Iterator[Path]:
    """Yield supported files under directory (recursive), sorted by path."""
    root = Path(directory)
    if not root.is_dir():
        return
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in ALLOWED_EXTENSIONS:
            yield path
