"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. The API credential is read once here, at process start; everything
else imports the constants instead of reading the environment itself.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# OpenAI (primary LLM). When set, chains use OpenAI instead of Hugging Face.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# Hugging Face router chat (fallback when OPENAI_API_KEY is not set)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"

# Sampling
LLM_TEMPERATURE: float = _env_float("LLM_TEMPERATURE", 0.0)
LLM_MAX_TOKENS: int = _env_int("LLM_MAX_TOKENS", 512)

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0

# Local corpus for ITER-RETGEN retrieval
CORPUS_DIR: str = os.getenv("CORPUS_DIR", "data/corpus").strip() or "data/corpus"
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md", ".pdf"})

# Chunking defaults (tuning these affects retrieval quality)
CHUNK_SIZE: int = 500
CHUNK_OVERLAP: int = 50
RETRIEVE_TOP_K: int = 4

# ITER-RETGEN: number of retrieve/generate rounds
ITER_RETGEN_ITERATIONS: int = _env_int("ITER_RETGEN_ITERATIONS", 2)
MAX_ITER_RETGEN_ITERATIONS: int = 5

# Documentation workflow
AGENTS_DIR: str = os.getenv("AGENTS_DIR", "agents").strip() or "agents"
REPORTS_DIR: str = os.getenv("REPORTS_DIR", "docs/reports").strip() or "docs/reports"
MANIFEST_NAME: str = "MANIFEST.md"
MAX_PARALLEL_TASKS: int = _env_int("MAX_PARALLEL_TASKS", 4)

# Enrichment strategies, by name
STRATEGIES: tuple[str, ...] = ("baseline", "iter_retgen", "query_enrichment")
