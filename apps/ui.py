"""Streamlit-based UI for the test paper generator (`streamlit run apps/ui.py`)."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

# Add project root to Python path for absolute imports
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import streamlit as st

from apps.file_utils import describe_size, to_uploaded_pdf
from paper_gen.catalog import MAX_TOTAL_MARKS, MIN_TOTAL_MARKS
from paper_gen.data_models import MIN_TIMEOUT_MS
from paper_gen.errors import PaperGenError
from paper_gen.rendering import format_result_html
from paper_gen.services import GenerationService
from paper_gen.system import PaperSystem


@st.cache_resource(show_spinner=False)
def load_system() -> PaperSystem:
    """Load PaperSystem once per server process."""
    return PaperSystem.from_config()


def get_service() -> GenerationService:
    """One service per browser session, so submissions never leak between users."""
    if "service" not in st.session_state:
        st.session_state.service = GenerationService(load_system())
    return st.session_state.service


def _notify(exc: PaperGenError) -> None:
    st.toast(f"{exc.title}: {exc}")


def render_settings(service: GenerationService) -> None:
    """Sidebar form for timeouts, auto retry and the default query."""
    current = service.settings
    with st.sidebar:
        st.header("Settings")
        with st.form("settings_form"):
            initial = st.number_input(
                "Initial request timeout (ms)", min_value=MIN_TIMEOUT_MS, step=1000, value=current.initial_timeout_ms
            )
            retry = st.number_input(
                "Retry request timeout (ms)", min_value=MIN_TIMEOUT_MS, step=1000, value=current.retry_timeout_ms
            )
            auto_retry = st.toggle(
                "Auto retry on timeout",
                value=current.auto_retry,
                help="When enabled, the app retries once if the first request times out.",
            )
            default_query = st.text_area(
                "Default query",
                value=current.default_query,
                placeholder="e.g. Generate 10 multiple-choice questions covering key concepts",
            )
            save_col, reset_col = st.columns(2)
            saved = save_col.form_submit_button("Save")
            reset = reset_col.form_submit_button("Reset")
        if saved:
            try:
                service.save_settings(
                    {
                        "initial_timeout_ms": int(initial),
                        "retry_timeout_ms": int(retry),
                        "auto_retry": auto_retry,
                        "default_query": default_query,
                    }
                )
                st.toast("Saved: settings updated.")
            except ValueError as exc:
                st.toast(f"Invalid timeout: {exc}")
        if reset:
            service.reset_settings()
            st.toast("Reset: settings reset to defaults.")


def render_paper_builder(service: GenerationService) -> None:
    """Class -> subject -> marks selector that builds a full exam paper prompt."""
    catalog = service.system.catalog
    classes = catalog.classes()
    if not classes:
        return
    st.subheader("Build a paper from the syllabus library")
    class_col, subject_col, marks_col = st.columns(3)
    class_name = class_col.selectbox("Class", classes, index=None, placeholder="Select class")
    subjects = catalog.subjects(class_name) if class_name else []
    subject = subject_col.selectbox(
        "Subject",
        [source.subject for source in subjects],
        index=None,
        placeholder="Select subject (PDF)" if class_name else "Select class first",
        disabled=not class_name,
    )
    marks = marks_col.number_input(
        "Total Marks",
        min_value=MIN_TOTAL_MARKS,
        max_value=MAX_TOTAL_MARKS,
        value=None,
        step=1,
        placeholder="Enter",
        disabled=not class_name,
        help=f"Enter marks between {MIN_TOTAL_MARKS} and {MAX_TOTAL_MARKS}",
    )
    if st.button("Generate paper", disabled=service.submission.loading):
        if not subject:
            st.toast("Select PDF: please choose a PDF to use.")
        elif marks is None:
            st.toast(f"Enter total marks: please enter a value between {MIN_TOTAL_MARKS} and {MAX_TOTAL_MARKS}.")
        else:
            try:
                with st.spinner("Generating..."):
                    service.generate_paper(class_name, subject, marks)
            except PaperGenError as exc:
                _notify(exc)


def render_form(service: GenerationService) -> None:
    state = service.submission
    form_id = st.session_state.get("form_id", 0)
    uploaded = st.file_uploader("PDF", type=["pdf"], help="PDF up to 15MB", key=f"pdf_{form_id}")
    if uploaded is not None and (state.file is None or state.file.filename != uploaded.name):
        try:
            service.attach_file(to_uploaded_pdf(uploaded))
        except PaperGenError as exc:
            _notify(exc)
    if state.file is not None:
        st.caption(f"{state.file.filename} · {describe_size(state.file.size)}")

    query = st.text_area("Query", value=state.query, placeholder="Write what to generate")
    generate_col, reset_col = st.columns([1, 1])
    if generate_col.button("Generate", type="primary", disabled=state.loading):
        try:
            with st.spinner("Generating..."):
                service.submit(query=query)
        except PaperGenError as exc:
            _notify(exc)
    if reset_col.button("Reset", disabled=state.loading):
        service.reset()
        st.session_state.form_id = form_id + 1
        st.rerun()


def render_result(service: GenerationService) -> None:
    state = service.submission
    if state.error:
        st.error(state.error)
    text = state.result_text
    if not text:
        return
    st.subheader("Result")
    pdf_col, txt_col = st.columns(2)
    for column, fmt, label in ((pdf_col, "pdf", "Download PDF"), (txt_col, "txt", "Download TXT")):
        try:
            artifact = service.build_download(fmt)
        except PaperGenError as exc:
            logger.exception("Could not build %s download", fmt)
            column.caption(f"Download failed: {exc}")
            continue
        column.download_button(label, data=artifact.data, file_name=artifact.filename, mime=artifact.media_type)
    st.markdown(format_result_html(text), unsafe_allow_html=True)
    if service.last_delivery is not None:
        st.caption(f"Served by {service.last_delivery.endpoint}")


def render() -> None:
    st.set_page_config(page_title="Test Paper Generator", page_icon="📝", layout="wide")
    st.title("📝 Test Paper Generator")
    st.caption("Fast, accurate question generation tailored to your query.")

    service = get_service()
    render_settings(service)
    render_paper_builder(service)
    render_form(service)
    render_result(service)


if __name__ == "__main__":  # pragma: no cover - streamlit entry
    render()
