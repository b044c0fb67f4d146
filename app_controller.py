"""
Application controller: which screen is showing and the session behind it.

Views form a closed set, each carrying exactly the data it needs:

    SetupView -> InterviewView -> FeedbackView -> DashboardView
        ^            |                 |              |
        +------------+-----------------+--------------+
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from analytics import UserMetrics, compute_user_metrics
from errors import GradingError, ViewTransitionError
from graph import InterviewRunner
from interview_factory import create_case_interview
from state import CaseDefinition, FeedbackReport, Session, SessionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppSession:
    """The case being practised and the runner driving it."""
    case: CaseDefinition
    background_summary: Optional[str]
    runner: InterviewRunner

    @property
    def session(self) -> Session:
        return self.runner.session


@dataclass(frozen=True)
class SetupView:
    name: str = "setup"


@dataclass(frozen=True)
class InterviewView:
    app_session: AppSession
    name: str = "interview"


@dataclass(frozen=True)
class FeedbackView:
    app_session: AppSession
    report: FeedbackReport
    name: str = "feedback"


@dataclass(frozen=True)
class DashboardView:
    metrics: UserMetrics
    name: str = "dashboard"


AppView = Union[SetupView, InterviewView, FeedbackView, DashboardView]


class AppController:
    """Drives view transitions from session lifecycle events."""

    def __init__(self, runner_factory: Optional[Callable[..., InterviewRunner]] = None):
        self._runner_factory = runner_factory or create_case_interview
        self.view: AppView = SetupView()
        self.history: List[Session] = []

    def _require(self, *allowed, action: str):
        if not isinstance(self.view, allowed):
            raise ViewTransitionError(f"Cannot {action} from the {self.view.name} view")
        return self.view

    def start_case(
        self,
        case: CaseDefinition,
        background_summary: Optional[str] = None,
        **runner_kwargs,
    ) -> str:
        """Setup -> Interview. Returns the interviewer's opening message."""
        self._require(SetupView, action="start a case")
        runner = self._runner_factory(case, background_summary=background_summary, **runner_kwargs)
        opening = runner.start()
        self.view = InterviewView(AppSession(case, background_summary, runner))
        return opening

    def submit(self, text: str) -> str:
        view = self._require(InterviewView, action="submit a response")
        return view.app_session.runner.respond(text)

    def complete(self) -> FeedbackReport:
        """Interview -> Feedback. On a grading failure the interview view stays put."""
        view = self._require(InterviewView, action="finish the case")
        try:
            report = view.app_session.runner.finish()
        except GradingError:
            logger.error("Could not grade session %s", view.app_session.session.session_id)
            raise
        self.history.append(view.app_session.session)
        self.view = FeedbackView(view.app_session, report)
        return report

    def exit_case(self) -> None:
        """Interview -> Setup, abandoning the session."""
        view = self._require(InterviewView, action="exit the case")
        session = view.app_session.session
        if session.status != SessionStatus.COMPLETED:
            view.app_session.runner.abandon()
        self.view = SetupView()

    def open_dashboard(self) -> UserMetrics:
        self._require(SetupView, FeedbackView, action="open the dashboard")
        metrics = compute_user_metrics(self.history)
        self.view = DashboardView(metrics)
        return metrics

    def go_home(self) -> None:
        self._require(FeedbackView, DashboardView, action="go home")
        self.view = SetupView()
