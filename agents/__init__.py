"""
Agent modules for the Case Interview Simulator.
"""
from .interviewer import ReasoningOracle, build_conversation
from .evaluator import GradingOracle
from .case_author import CaseAuthor

__all__ = ["ReasoningOracle", "GradingOracle", "CaseAuthor", "build_conversation"]
