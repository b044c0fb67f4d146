"""
Streamlit Web Interface for the Case Interview Simulator.

Run with: streamlit run ui/streamlit_app.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st

from agents.case_author import CaseAuthor
from analytics import score_band
from app_controller import AppController, DashboardView, FeedbackView, InterviewView, SetupView
from case_loader import load_catalog, select_case, select_case_for_resume
from config import configure_logging
from errors import CaseAcquisitionError, GradingError, MissingCredentialError
from state import CASE_TYPES, DIFFICULTIES, INDUSTRIES, CaseStyle, MathStatus, Role

configure_logging()

st.set_page_config(
    page_title="Case Interview Simulator",
    page_icon="💼",
    layout="wide",
)

ANY = "Any"

# Initialize session state
if "controller" not in st.session_state:
    st.session_state.controller = AppController()
if "api_key" not in st.session_state:
    st.session_state.api_key = ""

controller: AppController = st.session_state.controller


def api_key():
    return st.session_state.api_key or None


def facet(value: str):
    return None if value == ANY else value


def start_case(case, background_summary=None):
    try:
        with st.spinner("The interviewer is getting ready..."):
            controller.start_case(case, background_summary, api_key=api_key())
    except MissingCredentialError:
        st.warning("Please provide an Anthropic API key in the sidebar to start.")
        return
    st.rerun()


MATH_BADGES = {
    MathStatus.CORRECT: "✅ Correct",
    MathStatus.INCORRECT: "❌ Check your math",
    MathStatus.PENDING: "⏳ Pending",
}

BAND_ICONS = {"strong": "🟢", "developing": "🟡", "weak": "🔴"}


# Sidebar
with st.sidebar:
    st.title("Interview Controls")

    with st.expander("API Key", expanded=not st.session_state.api_key):
        st.session_state.api_key = st.text_input(
            "Anthropic API key",
            value=st.session_state.api_key,
            type="password",
            help="Kept only for this browser session. Leave empty to use the server's key.",
        )

    st.divider()

    if isinstance(controller.view, InterviewView):
        runner = controller.view.app_session.runner
        state = runner.get_state()
        phase, completion = runner.get_progress()

        st.subheader("Progress")
        st.metric("Phase", phase.value.replace("_", " ").title())
        st.progress(completion / 100)

        col1, col2 = st.columns(2)
        with col1:
            st.metric("Exchanges", runner.session.candidate_turn_count)
        with col2:
            if state is not None:
                st.write(MATH_BADGES[state.math_status])

        facts = runner.get_revealed_facts()
        if facts:
            with st.expander("Data revealed", expanded=True):
                for fact in facts:
                    st.write(f"• {fact}")

        st.divider()
        if st.button("End Case & Get Feedback", type="primary", use_container_width=True):
            try:
                with st.spinner("Grading your interview..."):
                    controller.complete()
            except GradingError as e:
                st.error(f"Failed to generate feedback: {e}")
            else:
                st.rerun()

        if st.button("Exit", type="secondary", use_container_width=True):
            controller.exit_case()
            st.rerun()


# =============================================================================
# SETUP
# =============================================================================

if isinstance(controller.view, SetupView):
    st.title("Case Interview Simulator")
    st.markdown("Practice consulting case interviews with an AI Partner, then get a scored report.")

    quick_tab, resume_tab, paste_tab = st.tabs(["Quick Start", "From Resume", "Paste a Case"])

    with quick_tab:
        col1, col2 = st.columns(2)
        with col1:
            industry = st.selectbox("Industry", [ANY] + INDUSTRIES)
            case_type = st.selectbox("Case type", [ANY] + CASE_TYPES)
        with col2:
            style = st.selectbox("Style", [ANY] + [s.value for s in CaseStyle])
            difficulty = st.selectbox("Difficulty", [ANY] + DIFFICULTIES)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Start Simulation", type="primary", use_container_width=True):
                case = select_case(
                    load_catalog(), facet(industry), facet(case_type), facet(style), facet(difficulty)
                )
                start_case(case)
        with col2:
            if st.button("Generate New Case", use_container_width=True):
                try:
                    with st.spinner("Writing a new case..."):
                        case = CaseAuthor(api_key=api_key()).generate_case(
                            facet(industry), facet(case_type), facet(style), facet(difficulty)
                        )
                except MissingCredentialError:
                    st.warning("Please provide an Anthropic API key in the sidebar.")
                except CaseAcquisitionError as e:
                    st.error(str(e))
                else:
                    start_case(case)

    with resume_tab:
        resume_text = st.text_area("Paste your resume text", height=220)
        if st.button("Analyze & Start", type="primary", disabled=not resume_text.strip()):
            try:
                with st.spinner("Reading your resume..."):
                    analysis = CaseAuthor(api_key=api_key()).analyze_resume(resume_text)
            except MissingCredentialError:
                st.warning("Please provide an Anthropic API key in the sidebar.")
            except CaseAcquisitionError as e:
                st.error(str(e))
            else:
                case = select_case_for_resume(load_catalog(), analysis)
                start_case(case, analysis.summary)

    with paste_tab:
        pasted = st.text_area("Paste a case transcript or write-up", height=220)
        if st.button("Build Case & Start", type="primary", disabled=not pasted.strip()):
            try:
                with st.spinner("Building the case..."):
                    case = CaseAuthor(api_key=api_key()).extract_case(pasted)
            except MissingCredentialError:
                st.warning("Please provide an Anthropic API key in the sidebar.")
            except CaseAcquisitionError as e:
                st.error(str(e))
            else:
                start_case(case)

    st.divider()
    if st.button("Performance Dashboard"):
        controller.open_dashboard()
        st.rerun()


# =============================================================================
# INTERVIEW
# =============================================================================

elif isinstance(controller.view, InterviewView):
    app_session = controller.view.app_session
    case = app_session.case

    st.title(case.title)
    st.caption(f"{case.industry} • {case.case_type} • {case.case_style.value} • {case.difficulty}")

    for turn in app_session.runner.get_messages():
        if turn.role == Role.INTERVIEWER:
            with st.chat_message("assistant", avatar="👔"):
                st.write(turn.content)
                if turn.degraded:
                    st.caption("The interviewer had trouble responding. Please try again.")
        else:
            with st.chat_message("user", avatar="👤"):
                st.write(turn.content)

    if prompt := st.chat_input("Your response..."):
        with st.spinner("..."):
            controller.submit(prompt)
        st.rerun()


# =============================================================================
# FEEDBACK
# =============================================================================

elif isinstance(controller.view, FeedbackView):
    report = controller.view.report
    case = controller.view.app_session.case

    st.title("Performance Report")
    st.caption(f"{case.title} • {case.case_type}")

    cols = st.columns(4)
    for col, (name, score) in zip(cols, report.scores.model_dump().items()):
        with col:
            st.metric(f"{BAND_ICONS[score_band(score)]} {name.capitalize()}", f"{score}/10")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("✅ Strengths")
        for item in report.qualitative_feedback.strengths:
            st.write(f"• {item}")
    with col2:
        st.subheader("⚠️ Areas for Improvement")
        for item in report.qualitative_feedback.areas_for_improvement:
            st.write(f"• {item}")

    st.subheader("Your Recommendation")
    st.write(report.solution_comparison.user_recommendation_summary)
    with st.expander("Reveal the expected answer"):
        st.write(report.solution_comparison.actual_ground_truth_summary)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("New Case", type="primary", use_container_width=True):
            controller.go_home()
            st.rerun()
    with col2:
        if st.button("Dashboard", use_container_width=True):
            controller.open_dashboard()
            st.rerun()


# =============================================================================
# DASHBOARD
# =============================================================================

elif isinstance(controller.view, DashboardView):
    metrics = controller.view.metrics

    st.title("Performance Analytics")

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Cases Completed", metrics.cases_completed)
    with col2:
        st.metric("Average Score", f"{metrics.overall_avg}/10")

    if metrics.cases_completed:
        st.bar_chart({
            "Structuring": [metrics.structuring_avg],
            "Numeracy": [metrics.numeracy_avg],
            "Judgment": [metrics.judgment_avg],
            "Communication": [metrics.communication_avg],
        })
    else:
        st.info("Complete a case to see your analytics.")

    if st.button("Back to Menu"):
        controller.go_home()
        st.rerun()

st.divider()
st.caption("Case Interview Simulator | Powered by Claude")
