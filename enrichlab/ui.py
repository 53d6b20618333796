# Run from project root: streamlit run enrichlab/ui.py
# UI talks to backend API (POST /enrich, GET /reports, GET /reports/coverage, POST /workflow/run).

import os

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")

st.title("Prompt Enrichment Lab")

try:
    r = requests.get(f"{API_BASE}/health", timeout=10)
    if r.ok:
        health = r.json()
        st.caption(f"LLM backend: {health.get('llm_backend')} · model: {health.get('model')}")
    else:
        st.caption("Could not read backend status.")
except requests.RequestException:
    st.caption("Backend not reachable. Start the API first.")

st.subheader("Ask")

strategy = st.radio(
    "Strategy",
    ["baseline", "query_enrichment", "iter_retgen"],
    horizontal=True,
    key="strategy",
)
iterations = None
if strategy == "iter_retgen":
    iterations = st.slider("Retrieve/generate rounds", min_value=1, max_value=5, value=2, key="iterations")
temperature = st.slider("Temperature", min_value=0.0, max_value=1.5, value=0.0, step=0.1, key="temperature")
query = st.text_area("Question", key="query")

if st.button("Run", key="run_btn", disabled=not query.strip()):
    payload = {"query": query, "strategy": strategy, "temperature": temperature}
    if iterations:
        payload["iterations"] = iterations
    with st.spinner("Thinking..."):
        try:
            r = requests.post(f"{API_BASE}/enrich", json=payload, timeout=180)
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")
            r = None
    if r is not None and r.ok:
        data = r.json()
        if data.get("enriched_query"):
            with st.expander("Enriched query", expanded=True):
                st.markdown(data["enriched_query"])
        st.markdown(data.get("answer") or "_No answer._")
        if data.get("sources"):
            st.caption("Sources: " + ", ".join(data["sources"]))
        if strategy == "iter_retgen":
            for step in data.get("steps", []):
                with st.expander(f"Iteration {step.get('iteration')}"):
                    st.caption("Retrieved: " + (", ".join(step.get("sources") or []) or "nothing"))
                    st.markdown(step.get("generation", ""))
    elif r is not None:
        st.error(f"Error: {r.status_code}: {r.text[:200]}")

st.divider()
st.subheader("Reports")

with st.expander("Run documentation workflow"):
    topic = st.text_input("Topic", key="topic")
    if st.button("Generate reports", key="workflow_btn", disabled=not topic.strip()):
        with st.spinner("Running roles..."):
            try:
                r = requests.post(f"{API_BASE}/workflow/run", json={"topic": topic}, timeout=600)
                if r.ok:
                    data = r.json()
                    st.success(f"Completed: {', '.join(data.get('completed') or []) or 'none'}")
                    for name, err in (data.get("failed") or {}).items():
                        st.error(f"{name}: {err}")
                else:
                    st.error(f"Workflow failed: {r.status_code}: {r.text[:200]}")
            except requests.RequestException as e:
                st.error(f"Request failed: {e}")

try:
    r = requests.get(f"{API_BASE}/reports", timeout=10)
    manifest = r.json() if r.ok else {}
except requests.RequestException:
    manifest = {}
reports = manifest.get("reports") or []
if reports:
    st.table([{"Path": e["path"], "Title": e["title"], "Generated": e["generated_at"]} for e in reports])
else:
    st.caption("No reports tracked yet.")
for s in manifest.get("statuses") or []:
    detail = f": {s['detail']}" if s.get("detail") else ""
    st.caption(f"{s['task']}: {s['state']}{detail}")

try:
    r = requests.get(f"{API_BASE}/reports/coverage", timeout=10)
    if r.ok:
        cov = r.json()
        if cov.get("complete"):
            st.success("All expected reports are present.")
        else:
            missing = (cov.get("missing") or []) + (cov.get("expected_missing") or [])
            st.warning("Missing: " + ", ".join(sorted(set(missing))))
        if cov.get("untracked"):
            st.caption("Untracked: " + ", ".join(cov["untracked"]))
except requests.RequestException:
    pass
