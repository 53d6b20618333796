"""
Integration tests for MCP tool endpoints.

Uses mocks for retrieval and enrichment so tests do not require an LLM credential.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from enrichlab.main import app
from enrichlab.schemas.enrich import EnrichResponse


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_mcp_tool_discovery(client: TestClient) -> None:
    response = client.get("/mcp/tools")
    assert response.status_code == 200
    names = [t["name"] for t in response.json()["tools"]]
    assert names == ["enrich_query", "search_documents", "list_reports", "check_coverage"]


def test_mcp_search_documents_returns_results(client: TestClient) -> None:
    """POST /mcp/tools/search_documents returns 200 and { results: [{ id, text, source }] }."""
    fake_chunks = [
        {"id": 0, "text": "Fake chunk one.", "score": 1.5, "metadata": {"source": "doc1.md", "chunk_id": 0}},
        {"id": 1, "text": "Fake chunk two.", "score": 1.2, "metadata": {"source": "doc2.md", "chunk_id": 1}},
    ]
    with patch("enrichlab.mcp.server.retrieve_context", return_value=fake_chunks):
        response = client.post("/mcp/tools/search_documents", json={"query": "test question"})
    assert response.status_code == 200
    assert response.json() == {
        "results": [
            {"id": 0, "text": "Fake chunk one.", "source": "doc1.md"},
            {"id": 1, "text": "Fake chunk two.", "source": "doc2.md"},
        ]
    }


def test_mcp_search_documents_empty_query_returns_empty_results(client: TestClient) -> None:
    """POST with empty query returns 200 and empty results (retrieve_context not called)."""
    with patch("enrichlab.mcp.server.retrieve_context") as mock_retrieve:
        response = client.post("/mcp/tools/search_documents", json={"query": ""})
    assert response.status_code == 200
    assert response.json() == {"results": []}
    mock_retrieve.assert_not_called()


def test_mcp_search_documents_missing_body_returns_422(client: TestClient) -> None:
    response = client.post("/mcp/tools/search_documents")
    assert response.status_code == 422


def test_mcp_enrich_query(client: TestClient) -> None:
    fake = EnrichResponse(strategy="query_enrichment", query="q", answer="A.", enriched_query="q+")
    with patch("enrichlab.mcp.server.handle_enrich", return_value=fake) as mock_enrich:
        response = client.post("/mcp/tools/enrich_query", json={"query": "q", "strategy": "query_enrichment"})
    assert response.status_code == 200
    assert response.json() == {"answer": "A.", "strategy": "query_enrichment", "enriched_query": "q+"}
    assert mock_enrich.call_args.args[0].strategy == "query_enrichment"


def test_mcp_enrich_query_empty_skips_model(client: TestClient) -> None:
    with patch("enrichlab.mcp.server.handle_enrich") as mock_enrich:
        response = client.post("/mcp/tools/enrich_query", json={"query": "  "})
    assert response.json() == {"answer": "", "strategy": "baseline"}
    mock_enrich.assert_not_called()


def test_mcp_list_reports_and_coverage(client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("enrichlab.api.handlers.REPORTS_DIR", str(tmp_path))
    monkeypatch.setattr("enrichlab.api.handlers.AGENTS_DIR", str(tmp_path / "no-agents"))

    reports = client.post("/mcp/tools/list_reports", json={})
    coverage = client.post("/mcp/tools/check_coverage", json={})

    assert reports.status_code == 200
    assert reports.json()["reports"] == []
    assert coverage.json()["complete"] is True
