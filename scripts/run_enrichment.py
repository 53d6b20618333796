#!/usr/bin/env python3
"""
Answer a question with one (or every) prompt-enrichment strategy.

Run from project root:

    python scripts/run_enrichment.py "What is prompt enrichment?"
    python scripts/run_enrichment.py --strategy query_enrichment "How do I size a thread pool?"
    python scripts/run_enrichment.py --strategy iter_retgen --iterations 3 "Who maintains the billing API?"
    python scripts/run_enrichment.py --compare "What does ITER-RETGEN do?"

Needs OPENAI_API_KEY (or HF_API_KEY) in the environment or .env.
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "enrichlab" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from enrichlab.core.config import ITER_RETGEN_ITERATIONS, STRATEGIES
from enrichlab.services.enrichment_service import EnrichmentResult, run_strategy


def print_result(result: EnrichmentResult) -> None:
    print(f"=== {result.strategy} ===")
    if result.enriched_query:
        print(f"Enriched query: {result.enriched_query}\n")
    if result.steps and result.strategy == "iter_retgen":
        for step in result.steps:
            sources = ", ".join(step.get("sources") or []) or "nothing"
            print(f"[iteration {step['iteration']}] retrieved: {sources}")
        print()
    print(result.answer)
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run prompt-enrichment strategies against the hosted LLM.")
    parser.add_argument("query", help="Question to answer.")
    parser.add_argument("--strategy", choices=STRATEGIES, default="baseline")
    parser.add_argument("--iterations", type=int, default=ITER_RETGEN_ITERATIONS,
                        help="Retrieve/generate rounds for iter_retgen.")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--compare", action="store_true", help="Run every strategy on the same query.")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    strategies = STRATEGIES if args.compare else (args.strategy,)
    for name in strategies:
        result = run_strategy(name, args.query, iterations=args.iterations, temperature=args.temperature)
        print_result(result)


if __name__ == "__main__":
    main()
