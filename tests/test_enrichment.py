"""
Tests for the enrichment strategies. The hosted model is mocked at
enrichlab.agent.chains.complete, so each test checks the exact prompt sent.
"""

from unittest.mock import patch

import pytest

from enrichlab.agent.chains import render
from enrichlab.agent.prompts import BASELINE_TEMPLATE, ENRICHED_ANSWER_TEMPLATE, ENRICH_QUERY_TEMPLATE
from enrichlab.services.enrichment_service import (
    clean_enriched_query,
    run_baseline,
    run_query_enrichment,
    run_strategy,
)


def test_baseline_sends_unexpanded_query() -> None:
    with patch("enrichlab.agent.chains.complete", return_value="  Paris.  ") as mock_complete:
        result = run_baseline("  What is the capital of France?  ")

    mock_complete.assert_called_once()
    assert mock_complete.call_args.args[0] == render(BASELINE_TEMPLATE, query="What is the capital of France?")
    assert result.strategy == "baseline"
    assert result.answer == "Paris."
    assert result.enriched_query is None


def test_query_enrichment_rewrites_then_answers() -> None:
    outputs = ['"Capital city of France (seat of government), one word"\n\nNote: kept short.', "Paris."]
    with patch("enrichlab.agent.chains.complete", side_effect=outputs) as mock_complete:
        result = run_query_enrichment("capital of france?")

    assert mock_complete.call_count == 2
    first, second = (c.args[0] for c in mock_complete.call_args_list)
    assert first == render(ENRICH_QUERY_TEMPLATE, query="capital of france?")
    enriched = "Capital city of France (seat of government), one word"
    assert second == render(ENRICHED_ANSWER_TEMPLATE, query="capital of france?", enriched_query=enriched)
    assert result.enriched_query == enriched
    assert result.answer == "Paris."
    assert [s["step"] for s in result.steps] == ["enrich", "answer"]


def test_query_enrichment_falls_back_to_original_query() -> None:
    with patch("enrichlab.agent.chains.complete", side_effect=["   ", "answer"]) as mock_complete:
        result = run_query_enrichment("why is the sky blue")

    assert result.enriched_query == "why is the sky blue"
    assert "Expanded question: why is the sky blue" in mock_complete.call_args_list[1].args[0]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("plain rewrite", "plain rewrite"),
        ("'quoted rewrite'", "quoted rewrite"),
        ("first block\n\nsecond block", "first block"),
        ("", "fallback"),
        ('""', "fallback"),
    ],
)
def test_clean_enriched_query(raw: str, expected: str) -> None:
    assert clean_enriched_query(raw, "fallback") == expected


def test_temperature_is_passed_to_model() -> None:
    with patch("enrichlab.agent.chains.complete", return_value="ok") as mock_complete:
        run_strategy("baseline", "hello", temperature=0.7)
    assert mock_complete.call_args.kwargs["temperature"] == 0.7


def test_run_strategy_dispatches_iter_retgen() -> None:
    fake = {"answer": "done", "iterations": 3, "sources": ["a.md"], "steps": [{"iteration": 1}]}
    with patch("enrichlab.services.enrichment_service._run_iter_retgen_graph", return_value=fake) as mock_graph:
        result = run_strategy("iter_retgen", "q", iterations=3)

    assert mock_graph.call_args.kwargs["iterations"] == 3
    assert result.strategy == "iter_retgen"
    assert result.iterations == 3
    assert result.sources == ["a.md"]


def test_run_strategy_rejects_unknown_name() -> None:
    with pytest.raises(ValueError, match="Unknown strategy"):
        run_strategy("hyde", "q")


def test_empty_query_rejected_before_model_call() -> None:
    with patch("enrichlab.agent.chains.complete") as mock_complete:
        with pytest.raises(ValueError):
            run_strategy("baseline", "   ")
    mock_complete.assert_not_called()
