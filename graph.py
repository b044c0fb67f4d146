"""
Dialogue turn protocol for the Case Interview Simulator.

Flow per turn:
1. Candidate utterance is appended to the transcript (except on bootstrap)
2. Reasoning oracle produces the next InterviewerState
3. The state is appended as an interviewer turn

An oracle failure never strands the candidate: a fixed degraded state is
appended instead and the session stays usable.
"""
import logging
import threading
from contextlib import contextmanager
from typing import List, Optional, Tuple

from agents.evaluator import GradingOracle
from agents.interviewer import ReasoningOracle
from errors import EmptyUtteranceError, SessionStateError, TurnInProgressError
from prompts.interviewer_prompt import get_style_directive
from state import (
    CaseDefinition,
    DialogueTurn,
    FeedbackReport,
    InterviewerState,
    MathStatus,
    Phase,
    Session,
    SessionStatus,
    is_backward_transition,
)

logger = logging.getLogger(__name__)

DEGRADED_STATE = InterviewerState(
    current_phase=Phase.FIT,
    completion_percentage=0,
    data_revealed=[],
    math_status=MathStatus.PENDING,
    interviewer_thought="System error encountered.",
    message_content="I apologize, but I seem to be having trouble processing that. Could you repeat?",
)


def advance_turn(session: Session, oracle, utterance: Optional[str] = None) -> InterviewerState:
    """
    Advance the session by one exchange and return the interviewer's new state.

    `utterance` may only be omitted on the very first call (empty transcript),
    which produces the interviewer's opening.
    """
    if not session.is_active:
        raise SessionStateError(f"Session {session.session_id} is {session.status.value}, not active")

    text = None
    if utterance is not None:
        text = utterance.strip()
        if not text:
            raise EmptyUtteranceError("Candidate utterance must not be empty")
    elif session.transcript:
        raise EmptyUtteranceError("A candidate utterance is required after the opening turn")

    # Credential problems surface before anything is written.
    ensure_credentials = getattr(oracle, "ensure_credentials", None)
    if ensure_credentials is not None:
        ensure_credentials()

    if text:
        session.append_turn(DialogueTurn.from_candidate(text))

    try:
        state = oracle.advance(
            session.transcript,
            session.case,
            get_style_directive(session.case.case_style),
            session.background_summary,
        )
        if not isinstance(state, InterviewerState):
            state = InterviewerState.model_validate(state)
    except Exception:
        logger.warning(
            "Interviewer oracle failed for session %s; appending degraded turn",
            session.session_id, exc_info=True,
        )
        session.append_turn(DialogueTurn.from_state(DEGRADED_STATE, degraded=True))
        return DEGRADED_STATE

    previous = session.last_good_state
    if previous is not None and is_backward_transition(previous.current_phase, state.current_phase):
        logger.warning(
            "Session %s moved back from %s to %s",
            session.session_id, previous.current_phase.value, state.current_phase.value,
        )

    # Disclosed facts never shrink, whatever the model reports.
    revealed = session.revealed_with(state.data_revealed)
    if revealed != state.data_revealed:
        state = state.model_copy(update={"data_revealed": revealed})

    session.append_turn(DialogueTurn.from_state(state))
    return state


class InterviewRunner:
    """
    High-level interface for running interviews.

    Flow:
    1. start() bootstraps the session and returns the opening message
    2. respond() runs one exchange per candidate utterance
    3. finish() grades the transcript once; abandon() walks away instead
    """

    def __init__(
        self,
        session: Session,
        oracle: Optional[ReasoningOracle] = None,
        grader: Optional[GradingOracle] = None,
    ):
        self.session = session
        self.oracle = oracle or ReasoningOracle()
        self.grader = grader or GradingOracle()
        self._turn_lock = threading.Lock()

    @classmethod
    def for_case(
        cls,
        case: CaseDefinition,
        background_summary: Optional[str] = None,
        candidate_id: Optional[str] = None,
        api_key: Optional[str] = None,
        oracle: Optional[ReasoningOracle] = None,
        grader: Optional[GradingOracle] = None,
    ) -> "InterviewRunner":
        session = Session(case, background_summary=background_summary, candidate_id=candidate_id)
        return cls(
            session,
            oracle=oracle or ReasoningOracle(api_key=api_key),
            grader=grader or GradingOracle(api_key=api_key),
        )

    @contextmanager
    def _exclusive_turn(self):
        if not self._turn_lock.acquire(blocking=False):
            raise TurnInProgressError("Still waiting for the interviewer's response")
        try:
            yield
        finally:
            self._turn_lock.release()

    def start(self) -> str:
        """Start the interview and return the opening message."""
        with self._exclusive_turn():
            ensure_credentials = getattr(self.oracle, "ensure_credentials", None)
            if ensure_credentials is not None:
                ensure_credentials()
            self.session.activate()
            logger.info("Session %s started on case %s", self.session.session_id, self.session.case.id)
            state = advance_turn(self.session, self.oracle)
        return state.message_content

    def respond(self, candidate_response: str) -> str:
        """Process the candidate's response and return the interviewer's next message."""
        with self._exclusive_turn():
            state = advance_turn(self.session, self.oracle, candidate_response)
        return state.message_content

    def finish(self) -> FeedbackReport:
        """Grade the session. Grading errors propagate and leave the session active."""
        with self._exclusive_turn():
            if not self.session.is_active:
                raise SessionStateError(
                    f"Cannot grade a session that is {self.session.status.value}"
                )
            report = self.grader.grade(self.session.transcript, self.session.case)
            self.session.attach_feedback(report)
        logger.info("Session %s completed", self.session.session_id)
        return report

    def abandon(self) -> None:
        self.session.abandon()
        logger.info("Session %s abandoned", self.session.session_id)

    def is_complete(self) -> bool:
        return self.session.status == SessionStatus.COMPLETED

    def is_active(self) -> bool:
        return self.session.is_active

    def get_state(self) -> Optional[InterviewerState]:
        return self.session.latest_state

    def get_phase(self) -> Phase:
        return self.session.current_phase

    def get_progress(self) -> Tuple[Phase, int]:
        """Current phase and advisory completion estimate."""
        state = self.session.last_good_state
        completion = state.completion_percentage if state and state.completion_percentage else 0
        return self.session.current_phase, completion

    def get_revealed_facts(self) -> List[str]:
        return self.session.revealed_facts

    def get_messages(self) -> Tuple[DialogueTurn, ...]:
        return self.session.transcript

    def get_feedback(self) -> Optional[FeedbackReport]:
        return self.session.feedback

    def get_last_interviewer_message(self) -> str:
        state = self.session.latest_state
        return state.message_content if state else ""
