"""
Evaluator Agent - the grading oracle.
Called once, when a session ends, to score the whole transcript.
"""
import logging
from typing import Optional, Sequence

from langchain_core.messages import HumanMessage, SystemMessage

from agents.llm import build_chat_model, invoke_structured
from config import Settings, get_settings
from errors import GradingError
from prompts.evaluator_prompt import format_transcript, get_grading_system_prompt
from state import CaseDefinition, DialogueTurn, FeedbackReport

logger = logging.getLogger(__name__)


def ground_truth_summary(case: CaseDefinition) -> str:
    """Plain-text statement of the expected answer."""
    points = "; ".join(case.ground_truth.conclusion_key_points)
    if points:
        return f"{case.ground_truth.overview} Key points: {points}."
    return case.ground_truth.overview


class GradingOracle:
    """Scores a finished transcript. There is no fallback model for grading."""

    def __init__(
        self,
        llm=None,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self._api_key = api_key
        self._llm = llm
        self.total_tokens = 0

    def _model(self):
        if self._llm is None:
            self._llm = build_chat_model(
                self.settings.primary_model,
                self.settings.grader_temperature,
                api_key=self._api_key,
                settings=self.settings,
                max_tokens=2048,
            )
        return self._llm

    def grade(self, transcript: Sequence[DialogueTurn], case: CaseDefinition) -> FeedbackReport:
        llm = self._model()

        messages = [
            SystemMessage(content=get_grading_system_prompt(case)),
            HumanMessage(content=f"TRANSCRIPT TO GRADE:\n{format_transcript(transcript)}"),
        ]

        try:
            report, tokens = invoke_structured(llm, messages, FeedbackReport)
        except Exception as e:
            logger.error("Grading failed for case %s", case.id, exc_info=True)
            raise GradingError(f"Failed to generate feedback: {e}") from e

        self.total_tokens += tokens

        comparison = report.solution_comparison
        if not comparison.actual_ground_truth_summary.strip():
            comparison = comparison.model_copy(
                update={"actual_ground_truth_summary": ground_truth_summary(case)}
            )
            report = report.model_copy(update={"solution_comparison": comparison})

        logger.info("Graded case %s: average %.1f", case.id, report.average_score)
        return report
