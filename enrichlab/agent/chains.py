"""
Prompt chains: PromptTemplate | hosted LLM | StrOutputParser.

The model call is wrapped in a RunnableLambda so every pipeline is the same
three-step runnable regardless of which backend agent.llm picks.
"""

import logging

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
from langchain_core.runnables import Runnable, RunnableLambda

from enrichlab.agent.llm import complete
from enrichlab.core.config import LLM_MAX_TOKENS

logger = logging.getLogger(__name__)


def llm_runnable(temperature: float | None = None, max_tokens: int = LLM_MAX_TOKENS) -> Runnable:
    """Runnable that sends a rendered prompt (PromptValue or str) to the hosted model."""

    def _invoke(prompt_value) -> str:
        text = prompt_value.to_string() if hasattr(prompt_value, "to_string") else str(prompt_value)
        return complete(text, temperature=temperature, max_tokens=max_tokens)

    return RunnableLambda(_invoke, name="hosted_llm")


def build_chain(
    template: str,
    temperature: float | None = None,
    max_tokens: int = LLM_MAX_TOKENS,
) -> Runnable:
    """Compose template -> LLM -> string parser. Invoke with a dict of template variables."""
    prompt = PromptTemplate.from_template(template)
    return prompt | llm_runnable(temperature, max_tokens) | StrOutputParser()


def render(template: str, **values: str) -> str:
    """Format a template without calling the model."""
    return PromptTemplate.from_template(template).format(**values)


def run_chain(template: str, values: dict, temperature: float | None = None) -> str:
    """Build and invoke a chain once; returns stripped text."""
    logger.info("[chains:run_chain] IN  variables=%s", sorted(values))
    out = build_chain(template, temperature=temperature).invoke(values)
    out = (out or "").strip()
    logger.info("[chains:run_chain] OUT len=%d", len(out))
    return out
