"""
Hosted LLM: OpenAI (primary) or Hugging Face router (fallback).

When OPENAI_API_KEY is set, uses OpenAI chat completions; otherwise uses the HF
router. Client errors are not caught here: callers see the OpenAI/httpx exception.
"""

import logging

import httpx
from openai import OpenAI

from enrichlab.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from enrichlab.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def active_backend() -> str:
    """Which backend complete() will use: 'openai', 'huggingface' or 'none'."""
    if OPENAI_API_KEY:
        return "openai"
    if HF_API_KEY:
        return "huggingface"
    return "none"


def active_model() -> str:
    """Model identifier sent to the active backend."""
    return HF_LLM_MODEL if active_backend() == "huggingface" else OPENAI_LLM_MODEL


def _call_openai(prompt: str, temperature: float, max_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    client = OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)
    response = client.chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    out = (getattr(msg, "content", None) or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


def _call_hf(prompt: str, temperature: float, max_tokens: int) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
        response = client.post(HF_CHAT_URL, json=payload, headers=headers)
    response.raise_for_status()
    data = response.json()
    choices = data.get("choices") or []
    out = ""
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
    logger.info("[llm:hf] OUT response_len=%d", len(out))
    return out


def complete(
    prompt: str,
    temperature: float | None = None,
    max_tokens: int = LLM_MAX_TOKENS,
) -> str:
    """
    Send one prompt to the hosted model and return the completion text.

    temperature defaults to LLM_TEMPERATURE. Raises ServiceUnavailableError when
    neither OPENAI_API_KEY nor HF_API_KEY is configured.
    """
    temp = LLM_TEMPERATURE if temperature is None else float(temperature)
    backend = active_backend()
    logger.info(
        "[llm] IN  backend=%s model=%s prompt_len=%d temperature=%.2f max_tokens=%d",
        backend, active_model(), len(prompt), temp, max_tokens,
    )
    logger.debug("[llm] prompt_sample=%r", prompt[:500])
    if backend == "openai":
        return _call_openai(prompt, temp, max_tokens)
    if backend == "huggingface":
        return _call_hf(prompt, temp, max_tokens)
    raise ServiceUnavailableError(
        "No LLM credential configured. Set OPENAI_API_KEY or HF_API_KEY."
    )
