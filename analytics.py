"""
Performance analytics across completed sessions, for the dashboard view.
"""
from statistics import mean
from typing import Iterable

from pydantic import BaseModel

from state import Session, SessionStatus


class UserMetrics(BaseModel):
    cases_completed: int = 0
    structuring_avg: float = 0.0
    numeracy_avg: float = 0.0
    judgment_avg: float = 0.0
    communication_avg: float = 0.0
    overall_avg: float = 0.0


def compute_user_metrics(sessions: Iterable[Session]) -> UserMetrics:
    """Average the four sub-scores over sessions that have a feedback report."""
    reports = [
        s.feedback for s in sessions
        if s.status == SessionStatus.COMPLETED and s.feedback is not None
    ]
    if not reports:
        return UserMetrics()

    def avg(field: str) -> float:
        return round(mean(getattr(r.scores, field) for r in reports), 1)

    return UserMetrics(
        cases_completed=len(reports),
        structuring_avg=avg("structuring"),
        numeracy_avg=avg("numeracy"),
        judgment_avg=avg("judgment"),
        communication_avg=avg("communication"),
        overall_avg=round(mean(r.average_score for r in reports), 1),
    )


def score_band(score: float) -> str:
    if score >= 8:
        return "strong"
    if score >= 5:
        return "developing"
    return "weak"
