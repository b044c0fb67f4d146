"""
Interview API routes.
Wraps the case catalog, case authoring and InterviewRunner for a web front-end.
"""
import random
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel

from agents.case_author import CaseAuthor
from agents.evaluator import GradingOracle
from agents.interviewer import ReasoningOracle
from case_loader import facet_values, filter_cases, load_catalog, select_case, select_case_for_resume
from graph import InterviewRunner
from state import (
    CaseDefinition,
    CaseStyle,
    FeedbackReport,
    MathStatus,
    Phase,
    ResumeAnalysis,
    Session,
)

router = APIRouter(prefix="/api", tags=["interview"])

# In-memory storage (use Redis/DB in production)
sessions: Dict[str, InterviewRunner] = {}
authored_cases: Dict[str, CaseDefinition] = {}


# =============================================================================
# DEPENDENCIES
# =============================================================================

class Agents:
    """The LLM-backed collaborators for one request, bound to its credential."""

    def __init__(self, oracle, grader, author):
        self.oracle = oracle
        self.grader = grader
        self.author = author


def get_agents(x_api_key: Optional[str] = Header(default=None)) -> Agents:
    return Agents(
        ReasoningOracle(api_key=x_api_key),
        GradingOracle(api_key=x_api_key),
        CaseAuthor(api_key=x_api_key),
    )


def get_catalog() -> List[CaseDefinition]:
    return load_catalog()


def get_rng() -> random.Random:
    return random.Random()


# =============================================================================
# SCHEMAS
# =============================================================================

class CaseSummary(BaseModel):
    """Public view of a case; the ground truth never leaves the server."""
    id: str
    title: str
    industry: str
    case_type: str
    case_style: CaseStyle
    difficulty: str

    @classmethod
    def from_case(cls, case: CaseDefinition) -> "CaseSummary":
        return cls(
            id=case.id,
            title=case.title,
            industry=case.industry,
            case_type=case.case_type,
            case_style=case.case_style,
            difficulty=case.difficulty,
        )


class CaseFacets(BaseModel):
    industry: Optional[str] = None
    case_type: Optional[str] = None
    case_style: Optional[CaseStyle] = None
    difficulty: Optional[str] = None


class ExtractCaseRequest(BaseModel):
    transcript: str


class ResumeRequest(BaseModel):
    resume_text: str


class ResumeMatchResponse(BaseModel):
    analysis: ResumeAnalysis
    case: CaseSummary


class StartInterviewRequest(BaseModel):
    """Start from a known case id, or send a full case inline."""
    case_id: Optional[str] = None
    case: Optional[CaseDefinition] = None
    case_style: Optional[CaseStyle] = None
    background_summary: Optional[str] = None
    candidate_id: Optional[str] = None


class StartInterviewResponse(BaseModel):
    session_id: str
    opening_message: str
    case: CaseSummary


class RespondRequest(BaseModel):
    message: str


class RespondResponse(BaseModel):
    interviewer_message: str
    current_phase: Phase
    completion_percentage: Optional[int]
    math_status: MathStatus
    degraded: bool


class InterviewStatus(BaseModel):
    status: str
    current_phase: Phase
    message_count: int
    revealed_facts: List[str]


class TurnOut(BaseModel):
    role: str
    content: str
    timestamp: str
    degraded: bool


# =============================================================================
# HELPERS
# =============================================================================

def _find_case(case_id: str, catalog: List[CaseDefinition]) -> CaseDefinition:
    if case_id in authored_cases:
        return authored_cases[case_id]
    for case in catalog:
        if case.id == case_id:
            return case
    raise HTTPException(status_code=404, detail=f"Case '{case_id}' not found")


def _get_runner(session_id: str) -> InterviewRunner:
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return sessions[session_id]


# =============================================================================
# CASES
# =============================================================================

@router.get("/cases", response_model=List[CaseSummary])
async def list_cases(
    industry: Optional[str] = Query(default=None),
    case_type: Optional[str] = Query(default=None),
    case_style: Optional[CaseStyle] = Query(default=None),
    difficulty: Optional[str] = Query(default=None),
    catalog: List[CaseDefinition] = Depends(get_catalog),
):
    """List catalog cases, optionally filtered by exact facet values."""
    cases = filter_cases(catalog, industry, case_type, case_style, difficulty)
    return [CaseSummary.from_case(c) for c in cases]


@router.get("/cases/facets")
async def list_facets(catalog: List[CaseDefinition] = Depends(get_catalog)):
    return facet_values(catalog)


@router.post("/cases/select", response_model=CaseSummary)
async def select_catalog_case(
    facets: CaseFacets,
    catalog: List[CaseDefinition] = Depends(get_catalog),
    rng: random.Random = Depends(get_rng),
):
    """Pick a catalog case for the facets, relaxing the filter if nothing matches."""
    case = select_case(
        catalog,
        facets.industry,
        facets.case_type,
        facets.case_style,
        facets.difficulty,
        rng=rng,
    )
    return CaseSummary.from_case(case)


@router.post("/cases/generate", response_model=CaseSummary)
def generate_case(facets: CaseFacets, agents: Agents = Depends(get_agents)):
    case = agents.author.generate_case(
        facets.industry,
        facets.case_type,
        facets.case_style.value if facets.case_style else None,
        facets.difficulty,
    )
    authored_cases[case.id] = case
    return CaseSummary.from_case(case)


@router.post("/cases/extract", response_model=CaseSummary)
def extract_case(request: ExtractCaseRequest, agents: Agents = Depends(get_agents)):
    case = agents.author.extract_case(request.transcript)
    authored_cases[case.id] = case
    return CaseSummary.from_case(case)


@router.post("/resume/analyze", response_model=ResumeMatchResponse)
def analyze_resume(
    request: ResumeRequest,
    agents: Agents = Depends(get_agents),
    catalog: List[CaseDefinition] = Depends(get_catalog),
    rng: random.Random = Depends(get_rng),
):
    """Summarise a resume and suggest a matching catalog case."""
    analysis = agents.author.analyze_resume(request.resume_text)
    case = select_case_for_resume(catalog, analysis, rng=rng)
    return ResumeMatchResponse(analysis=analysis, case=CaseSummary.from_case(case))


# =============================================================================
# INTERVIEWS
# =============================================================================

@router.post("/interviews", response_model=StartInterviewResponse)
def start_interview(
    request: StartInterviewRequest,
    agents: Agents = Depends(get_agents),
    catalog: List[CaseDefinition] = Depends(get_catalog),
):
    """Start a new interview session and return the opening message."""
    if request.case is not None:
        case = request.case
    elif request.case_id:
        case = _find_case(request.case_id, catalog)
    else:
        raise HTTPException(status_code=422, detail="Provide either case_id or case")
    if request.case_style:
        case = case.with_style(request.case_style)

    session = Session(
        case,
        background_summary=request.background_summary,
        candidate_id=request.candidate_id,
    )
    runner = InterviewRunner(session, oracle=agents.oracle, grader=agents.grader)
    opening = runner.start()

    sessions[session.session_id] = runner

    return StartInterviewResponse(
        session_id=session.session_id,
        opening_message=opening,
        case=CaseSummary.from_case(case),
    )


@router.post("/interviews/{session_id}/respond", response_model=RespondResponse)
def respond_to_interview(session_id: str, request: RespondRequest):
    """Send a candidate message and get the interviewer's response."""
    runner = _get_runner(session_id)
    runner.respond(request.message)

    last_turn = runner.get_messages()[-1]
    state = last_turn.state
    return RespondResponse(
        interviewer_message=state.message_content,
        current_phase=state.current_phase,
        completion_percentage=state.completion_percentage,
        math_status=state.math_status,
        degraded=last_turn.degraded,
    )


@router.post("/interviews/{session_id}/finish", response_model=FeedbackReport)
def finish_interview(session_id: str):
    """Grade the interview. Can only succeed once per session."""
    runner = _get_runner(session_id)
    return runner.finish()


@router.post("/interviews/{session_id}/abandon", response_model=InterviewStatus)
def abandon_interview(session_id: str):
    runner = _get_runner(session_id)
    runner.abandon()
    return _status(runner)


@router.get("/interviews/{session_id}/status", response_model=InterviewStatus)
async def get_interview_status(session_id: str):
    """Check the status of an interview session."""
    return _status(_get_runner(session_id))


@router.get("/interviews/{session_id}/transcript", response_model=List[TurnOut])
async def get_transcript(session_id: str):
    runner = _get_runner(session_id)
    return [
        TurnOut(
            role=turn.role.value,
            content=turn.content,
            timestamp=turn.timestamp.isoformat(),
            degraded=turn.degraded,
        )
        for turn in runner.get_messages()
    ]


def _status(runner: InterviewRunner) -> InterviewStatus:
    session = runner.session
    return InterviewStatus(
        status=session.status.value,
        current_phase=session.current_phase,
        message_count=session.candidate_turn_count,
        revealed_facts=session.revealed_facts,
    )
