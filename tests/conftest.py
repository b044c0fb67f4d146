import json
from typing import Any, Dict, List, Union

import pytest
from langchain_core.messages import AIMessage

from case_loader import load_case, load_catalog


class FakeChatModel:
    """
    Stand-in for ChatAnthropic.

    Each invoke() pops the next scripted reply: a dict is sent back as JSON
    text, a string as-is, and an exception instance is raised. The last reply
    repeats once the script runs out.
    """

    def __init__(self, *replies: Union[Dict[str, Any], str, Exception], tokens: int = 10):
        self.replies: List[Any] = list(replies)
        self.tokens = tokens
        self.calls: List[list] = []

    def invoke(self, messages):
        self.calls.append(list(messages))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        content = json.dumps(reply) if isinstance(reply, dict) else reply
        return AIMessage(
            content=content,
            response_metadata={"usage": {"input_tokens": self.tokens, "output_tokens": self.tokens}},
        )


def interviewer_reply(**overrides) -> Dict[str, Any]:
    reply = {
        "current_phase": "FIT",
        "completion_percentage": 5,
        "data_revealed": [],
        "math_status": "PENDING",
        "interviewer_thought": "Open with a fit question.",
        "message_content": "Welcome. Tell me about yourself.",
    }
    reply.update(overrides)
    return reply


def grading_reply(**overrides) -> Dict[str, Any]:
    reply = {
        "scores": {"structuring": 7, "numeracy": 6, "judgment": 8, "communication": 7},
        "qualitative_feedback": {
            "strengths": ["Clear issue tree"],
            "areas_for_improvement": ["Check arithmetic before presenting"],
        },
        "solution_comparison": {
            "user_recommendation_summary": "Cut packaging costs.",
            "actual_ground_truth_summary": "Costs rose from aluminum; renegotiate suppliers.",
        },
    }
    reply.update(overrides)
    return reply


class ScriptedOracle:
    """Reasoning oracle double that returns InterviewerState-shaped dicts or raises."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def advance(self, transcript, case, style_directive, background_summary=None):
        self.calls.append(
            {
                "transcript": tuple(transcript),
                "case": case,
                "style_directive": style_directive,
                "background_summary": background_summary,
            }
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class ScriptedGrader:
    def __init__(self, report=None, error=None):
        self.report = report
        self.error = error
        self.calls = 0

    def grade(self, transcript, case):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.report


@pytest.fixture
def case():
    return load_case("ecodrink_profitability")


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.fixture
def with_api_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test-env")


def case_draft(**overrides) -> Dict[str, Any]:
    draft = {
        "title": "SolarCo Market Entry",
        "industry": "Energy & Environment",
        "case_type": "Market Entry",
        "case_style": "Candidate-Led (BCG/Bain Style)",
        "difficulty": "Beginner",
        "ground_truth": {
            "overview": "SolarCo wants to sell rooftop panels in Spain.",
            "framework_buckets": ["Market", "Competition", "Economics"],
            "math_data": [
                {"key": "households", "value": 18000000},
                {"key": "adoption_rate", "value": "4%"},
            ],
            "conclusion_key_points": ["Enter via installer partnerships"],
        },
    }
    draft.update(overrides)
    return draft
