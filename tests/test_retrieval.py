"""
Unit tests for the keyword retrieval index and corpus loading.
"""

from pathlib import Path

import pytest

from enrichlab.services import retrieval_service
from enrichlab.services.retrieval_service import DocumentIndex, load_corpus, tokenize


@pytest.fixture
def index() -> DocumentIndex:
    idx = DocumentIndex()
    idx.add_document("a.md", "Prompt enrichment adds context to a query.")
    idx.add_document("b.md", "ITER-RETGEN alternates retrieval and generation. Retrieval uses the draft.")
    idx.add_document("c.md", "Unrelated text about cooking pasta.")
    return idx


def test_tokenize_drops_stopwords_and_short_tokens() -> None:
    assert tokenize("What is the ITER-RETGEN loop, a b?") == ["iter", "retgen", "loop"]


def test_search_returns_only_matching_chunks(index: DocumentIndex) -> None:
    results = index.search("retrieval generation")
    assert [r["metadata"]["source"] for r in results] == ["b.md"]
    assert results[0]["metadata"]["chunk_id"] == 0
    assert set(results[0]) == {"id", "text", "score", "metadata"}


def test_search_ties_broken_by_term_hits(index: DocumentIndex) -> None:
    # both chunks match one distinct term; b.md mentions "retrieval" twice
    results = index.search("enrichment retrieval")
    assert [r["metadata"]["source"] for r in results] == ["b.md", "a.md"]
    assert results[0]["score"] > results[1]["score"]


def test_search_respects_top_k(index: DocumentIndex) -> None:
    assert len(index.search("enrichment retrieval", top_k=1)) == 1
    assert index.search("enrichment", top_k=0) == []


def test_search_stopword_only_query_returns_empty(index: DocumentIndex) -> None:
    assert index.search("what is the") == []
    assert index.search("") == []


def test_sources_in_load_order(index: DocumentIndex) -> None:
    assert index.sources() == ["a.md", "b.md", "c.md"]


def test_load_corpus_reads_supported_files(tmp_path: Path) -> None:
    (tmp_path / "notes.md").write_text("# Notes\n\nRetrieval notes.", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "plain.txt").write_text("Plain text about generation.", encoding="utf-8")
    (tmp_path / "data.json").write_text('{"ignored": true}', encoding="utf-8")

    idx = load_corpus(tmp_path)

    assert idx.sources() == ["notes.md", "sub/plain.txt"]
    assert idx.search("generation")[0]["metadata"]["source"] == "sub/plain.txt"


def test_load_corpus_missing_dir_is_empty(tmp_path: Path) -> None:
    assert load_corpus(tmp_path / "nope").chunks == []


def test_retrieve_context_uses_reloaded_index(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(retrieval_service, "_index", None)
    (tmp_path / "doc.md").write_text("Synonyms make enrichment useful.", encoding="utf-8")

    retrieval_service.reload_index(tmp_path)

    assert retrieval_service.list_sources() == ["doc.md"]
    assert retrieval_service.retrieve_context("synonyms")[0]["text"] == "Synonyms make enrichment useful."
    assert retrieval_service.retrieve_context("   ") == []
