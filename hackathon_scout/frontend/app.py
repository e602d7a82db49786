"""
Streamlit user interface for the Hackathon Scout application.

Users enter a research topic (or pick one of the example topics) and
the UI streams the scout's progress from the backend: an activity log
of tool calls and model activity, the model's answer as it is written,
and a table of the ArXiv papers that were found.  The answer can be
downloaded as Markdown once the search completes.

The backend URL is taken from ``SCOUT_API_URL``.  If the backend cannot
be reached the example topics fall back to a built‑in list and the
search reports a connection error.
"""

from __future__ import annotations

from typing import Any, List

import httpx
import pandas as pd  # type: ignore
import streamlit as st  # type: ignore

from hackathon_scout.backend import config, parsers
from hackathon_scout.backend.scout import EXAMPLE_PROMPTS
from hackathon_scout.frontend.client import ScoutClient
from hackathon_scout.frontend.reducer import COMPLETE, ERROR, IDLE, LOADING, ScoutReducer

ACTIVITY_ICONS = {
    "tool_call": "🔍",
    "tool_result": "📄",
    "llm_start": "🤖",
    "complete": "✅",
    "error": "❌",
}


def _reset_session() -> None:
    """Initialise default values in the Streamlit session state.

    This helper ensures that expected keys exist in ``st.session_state``.
    """
    state_defaults = {
        "reducer": ScoutReducer(),  # folded stream state of the last search
        "query": "",  # last submitted topic
        "max_results": config.DEFAULT_MAX_RESULTS,
        "prompts": None,  # example topics fetched from the backend
    }
    for key, default in state_defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _load_prompts(client: ScoutClient) -> List[str]:
    if st.session_state.prompts is None:
        try:
            st.session_state.prompts = client.get_prompts().get("prompts") or list(EXAMPLE_PROMPTS)
        except httpx.HTTPError as e:
            st.warning(f"Could not load example topics from the backend ({e}). Using defaults.")
            st.session_state.prompts = list(EXAMPLE_PROMPTS)
    return st.session_state.prompts


def papers_frame(reducer: ScoutReducer) -> pd.DataFrame:
    """Collect the papers from every ArXiv tool result into one table."""
    frames = [
        parsers.parse_arxiv_feed(result.output)
        for result in reducer.tool_results
        if result.tool == "arxiv_search" and isinstance(result.output, str)
    ]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return pd.DataFrame(columns=parsers.CITATION_COLUMNS)
    return pd.concat(frames, ignore_index=True).drop_duplicates(subset="id")


def render_activities(container: Any, reducer: ScoutReducer) -> None:
    with container.container():
        if not reducer.activities:
            return
        st.subheader("Agent activity")
        for activity in reducer.activities:
            icon = ACTIVITY_ICONS.get(activity.type, "•")
            st.text(f"{icon} {activity.message}")


def render_response(container: Any, reducer: ScoutReducer) -> None:
    with container.container():
        if not reducer.response_text:
            return
        st.subheader("💡 Results")
        cursor = " ▌" if reducer.status == LOADING else ""
        st.markdown(reducer.response_text + cursor)


def render_papers(reducer: ScoutReducer) -> None:
    df = papers_frame(reducer)
    if df.empty:
        return
    st.subheader("Papers found")
    display: pd.DataFrame = df[["title", "authors", "year", "keywords", "pdf_url"]].copy()
    display["authors"] = display["authors"].apply(lambda a: ", ".join(a[:3]))
    display["keywords"] = display["keywords"].apply(lambda k: ", ".join(k))
    st.dataframe(display, use_container_width=True)


def run_search(client: ScoutClient, query: str, max_results: int) -> None:
    """Stream one search, re‑rendering the activity log and answer per chunk."""
    reducer: ScoutReducer = st.session_state.reducer
    activity_box = st.empty()
    response_box = st.empty()
    with st.spinner("Working…"):
        for state in client.stream_search(query, max_results, reducer):
            render_activities(activity_box, state)
            render_response(response_box, state)


def main() -> None:
    """Entry point for the Streamlit application."""
    st.set_page_config(
        page_title="Hackathon Scout",
        page_icon="🔬",
        layout="wide",
    )
    _reset_session()
    client = ScoutClient()
    st.title("🔬 Hackathon Scout")
    st.write("Find research papers and get hackathon project ideas")

    with st.sidebar:
        st.title("Settings")
        st.session_state.max_results = st.slider(
            "Papers to fetch", min_value=1, max_value=20, value=st.session_state.max_results
        )
        st.caption(f"Backend: {client.base_url}")
        st.caption(f"Model: {config.MODEL_NAME}")

    reducer: ScoutReducer = st.session_state.reducer
    submitted_query = None
    with st.form("search"):
        query = st.text_input("Research topic", value=st.session_state.query,
                              placeholder="Search for research topics...")
        if st.form_submit_button("Search", type="primary") and query.strip():
            submitted_query = query.strip()

    if reducer.status == IDLE and submitted_query is None:
        st.write("Try these topics:")
        prompts = _load_prompts(client)
        columns = st.columns(len(prompts))
        for column, prompt in zip(columns, prompts):
            if column.button(prompt, key=f"prompt-{prompt}"):
                submitted_query = prompt

    if submitted_query:
        st.session_state.query = submitted_query
        run_search(client, submitted_query, st.session_state.max_results)
    else:
        render_activities(st.empty(), reducer)
        render_response(st.empty(), reducer)

    if reducer.status == ERROR:
        st.error("Something went wrong. Please try again.")
    render_papers(reducer)
    if reducer.status == COMPLETE and reducer.response_text:
        st.download_button(
            label="Download results as Markdown",
            data=reducer.response_text.encode("utf-8"),
            file_name="hackathon_scout.md",
            mime="text/markdown",
        )
    client.close()


if __name__ == "__main__":
    main()
