"""
State definitions for the Case Interview Simulator.

Everything the LLM returns is validated against these models before it is
allowed anywhere near a session transcript.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import SessionStateError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class Phase(str, Enum):
    FIT = "FIT"
    CASE_OPENING = "CASE_OPENING"
    CLARIFYING = "CLARIFYING"
    FRAMEWORK = "FRAMEWORK"
    MATH = "MATH"
    SYNTHESIS = "SYNTHESIS"

    @property
    def order(self) -> int:
        return PHASE_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is Phase.SYNTHESIS


PHASE_ORDER: List[Phase] = list(Phase)


def is_backward_transition(previous: Phase, new: Phase) -> bool:
    """Phases are expected to move forward; going back is allowed but anomalous."""
    return new.order < previous.order


class MathStatus(str, Enum):
    CORRECT = "CORRECT"
    INCORRECT = "INCORRECT"
    PENDING = "PENDING"


class Role(str, Enum):
    CANDIDATE = "candidate"
    INTERVIEWER = "interviewer"


class CaseStyle(str, Enum):
    INTERVIEWER_LED = "Interviewer-Led (McKinsey Style)"
    CANDIDATE_LED = "Candidate-Led (BCG/Bain Style)"


class SessionStatus(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# Facet vocabularies offered by the setup screens. Catalog entries are not
# restricted to these lists.
INDUSTRIES: List[str] = [
    "Technology, Media & Telecom (TMT)",
    "Financial Services",
    "Consumer & Retail (CPG)",
    "Healthcare & Life Sciences",
    "Energy & Environment",
    "Industrials & Manufacturing",
    "Public Sector & Social Impact",
    "Private Equity (PE)",
]

CASE_TYPES: List[str] = [
    "Profitability",
    "Market Entry",
    "Market Sizing (Guesstimate)",
    "Mergers & Acquisitions (M&A)",
    "Pricing Strategy",
    "Growth Strategy",
    "Operations & Supply Chain",
    "Unconventional / Brainteasers",
]

DIFFICULTIES: List[str] = [
    "Beginner",
    "Intermediate",
    "Advanced (Partner Level)",
]


# =============================================================================
# CASES
# =============================================================================

class GroundTruth(BaseModel):
    """Hidden answer key. Shown to the oracles, never to the candidate."""
    model_config = ConfigDict(frozen=True)

    overview: str
    framework_buckets: List[str] = Field(default_factory=list)
    math_data: Dict[str, str] = Field(default_factory=dict)
    conclusion_key_points: List[str] = Field(default_factory=list)

    @field_validator("math_data", mode="before")
    @classmethod
    def _stringify_values(cls, value):
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value


class CaseDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    industry: str
    case_type: str
    case_style: CaseStyle
    difficulty: str
    ground_truth: GroundTruth

    def with_style(self, style: CaseStyle) -> "CaseDefinition":
        """Return a copy of this case run in a different style."""
        if style == self.case_style:
            return self
        return self.model_copy(update={"case_style": CaseStyle(style)})


# =============================================================================
# DIALOGUE
# =============================================================================

class InterviewerState(BaseModel):
    """The oracle's structured judgement after each turn."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    current_phase: Phase
    # Advisory only; not every response carries it.
    completion_percentage: Optional[int] = None
    data_revealed: List[str]
    math_status: MathStatus
    interviewer_thought: str
    message_content: str

    @field_validator("completion_percentage", mode="before")
    @classmethod
    def _clamp_completion(cls, value) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            percent = int(round(float(str(value).strip().rstrip("%"))))
        except (TypeError, ValueError, OverflowError):
            return None
        return max(0, min(100, percent))

    @field_validator("message_content")
    @classmethod
    def _message_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message_content must not be empty")
        return value


class DialogueTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=_utcnow)
    state: Optional[InterviewerState] = None
    degraded: bool = False

    @model_validator(mode="after")
    def _state_matches_role(self) -> "DialogueTurn":
        if self.role == Role.INTERVIEWER and self.state is None:
            raise ValueError("interviewer turns must carry an InterviewerState")
        if self.role == Role.CANDIDATE and (self.state is not None or self.degraded):
            raise ValueError("candidate turns carry no InterviewerState")
        return self

    @classmethod
    def from_candidate(cls, text: str) -> "DialogueTurn":
        return cls(role=Role.CANDIDATE, content=text)

    @classmethod
    def from_state(cls, state: InterviewerState, degraded: bool = False) -> "DialogueTurn":
        return cls(
            role=Role.INTERVIEWER,
            content=state.message_content,
            state=state,
            degraded=degraded,
        )


# =============================================================================
# FEEDBACK
# =============================================================================

class Scores(BaseModel):
    model_config = ConfigDict(frozen=True)

    structuring: int
    numeracy: int
    judgment: int
    communication: int

    @field_validator("structuring", "numeracy", "judgment", "communication", mode="before")
    @classmethod
    def _clamp_score(cls, value) -> int:
        score = int(round(float(value)))
        return max(1, min(10, score))


class QualitativeFeedback(BaseModel):
    model_config = ConfigDict(frozen=True)

    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)


class SolutionComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_recommendation_summary: str
    actual_ground_truth_summary: str


class FeedbackReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    scores: Scores
    qualitative_feedback: QualitativeFeedback
    solution_comparison: SolutionComparison

    @property
    def average_score(self) -> float:
        s = self.scores
        return (s.structuring + s.numeracy + s.judgment + s.communication) / 4


class ResumeAnalysis(BaseModel):
    summary: str
    suggested_industry: str = ""
    suggested_difficulty: str = ""


# =============================================================================
# SESSION
# =============================================================================

class Session:
    """
    One practice interview: a case, its transcript and at most one report.

    The transcript only grows through append_turn(); callers get a tuple view.
    Lifecycle: created -> active -> completed | abandoned.
    """

    def __init__(
        self,
        case: CaseDefinition,
        background_summary: Optional[str] = None,
        candidate_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.case = case
        self.background_summary = background_summary
        self.candidate_id = candidate_id
        self.created_at = _utcnow()
        self.status = SessionStatus.CREATED

        self._transcript: List[DialogueTurn] = []
        self._revealed: List[str] = []
        self._last_good_state: Optional[InterviewerState] = None
        self._feedback: Optional[FeedbackReport] = None

    # -- lifecycle ----------------------------------------------------------

    def activate(self) -> None:
        if self.status != SessionStatus.CREATED:
            raise SessionStateError(f"Cannot activate a session that is {self.status.value}")
        self.status = SessionStatus.ACTIVE

    def attach_feedback(self, report: FeedbackReport) -> None:
        if self._feedback is not None:
            raise SessionStateError("Session already has a feedback report")
        if self.status != SessionStatus.ACTIVE:
            raise SessionStateError(f"Cannot complete a session that is {self.status.value}")
        self._feedback = report
        self.status = SessionStatus.COMPLETED

    def abandon(self) -> None:
        if self.status == SessionStatus.ABANDONED:
            return
        if self.status == SessionStatus.COMPLETED:
            raise SessionStateError("Cannot abandon a completed session")
        self.status = SessionStatus.ABANDONED

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    # -- transcript ---------------------------------------------------------

    @property
    def transcript(self) -> Tuple[DialogueTurn, ...]:
        return tuple(self._transcript)

    def append_turn(self, turn: DialogueTurn) -> None:
        if not self.is_active:
            raise SessionStateError(f"Cannot add turns to a session that is {self.status.value}")
        self._transcript.append(turn)

        if turn.role == Role.INTERVIEWER and not turn.degraded:
            self._revealed = self.revealed_with(turn.state.data_revealed)
            self._last_good_state = turn.state

    def revealed_with(self, facts: List[str]) -> List[str]:
        """Union of the facts disclosed so far and `facts`, in disclosure order."""
        merged = list(self._revealed)
        for fact in facts:
            if fact and fact not in merged:
                merged.append(fact)
        return merged

    @property
    def revealed_facts(self) -> List[str]:
        return list(self._revealed)

    @property
    def latest_state(self) -> Optional[InterviewerState]:
        for turn in reversed(self._transcript):
            if turn.role == Role.INTERVIEWER:
                return turn.state
        return None

    @property
    def last_good_state(self) -> Optional[InterviewerState]:
        """Latest state that came from the oracle rather than the degraded fallback."""
        return self._last_good_state

    @property
    def current_phase(self) -> Phase:
        if self._last_good_state is None:
            return Phase.FIT
        return self._last_good_state.current_phase

    @property
    def candidate_turn_count(self) -> int:
        return sum(1 for t in self._transcript if t.role == Role.CANDIDATE)

    # -- feedback -----------------------------------------------------------

    @property
    def feedback(self) -> Optional[FeedbackReport]:
        return self._feedback
