"""Prompt templates (langchain PromptTemplate syntax: {variable})."""

BASELINE_TEMPLATE = """You are a helpful assistant. Answer the question below clearly and accurately.
If you are not sure, say so instead of guessing.

Question: {query}

Answer:"""

ENRICH_QUERY_TEMPLATE = """Rewrite the user query so a language model can answer it better.

Rules:
- Keep the original intent; do not answer the query
- Add the missing context a domain expert would assume
- Add key synonyms or alternative terms in parentheses
- State constraints explicitly (scope, audience, format, level of detail)
- Output the rewritten query only, as one paragraph, with no preamble

User query: {query}

Rewritten query:"""

ENRICHED_ANSWER_TEMPLATE = """You are a helpful assistant. A user asked a question, and it was expanded
with context, synonyms and constraints to make the intent explicit.
Answer the original question, following the expanded version's constraints.

Original question: {query}

Expanded question: {enriched_query}

Answer:"""

ITER_RETGEN_TEMPLATE = """You are a helpful assistant. Answer the question using the documents below.
Prefer facts from the documents; if they do not cover the question, say what is missing.

Documents:
{documents}

Question: {query}

Answer:"""

ROLE_TASK_TEMPLATE = """{instructions}

Topic: {topic}

Reports already written for this topic:
{earlier_reports}

Write the "{title}" report for this topic as markdown. Start directly with the content;
do not repeat the title."""

NO_DOCUMENTS = "No documents retrieved."
