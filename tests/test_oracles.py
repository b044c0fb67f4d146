import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from agents.evaluator import GradingOracle, ground_truth_summary
from agents.interviewer import ReasoningOracle, build_conversation
from agents.llm import parse_json_response
from conftest import FakeChatModel, grading_reply, interviewer_reply
from errors import GradingError, OracleError
from prompts.evaluator_prompt import format_transcript
from prompts.interviewer_prompt import BOOTSTRAP_TRIGGER, get_style_directive
from state import DialogueTurn, InterviewerState, Phase


def _transcript(exchanges: int):
    turns = [DialogueTurn.from_state(InterviewerState.model_validate(interviewer_reply()))]
    for i in range(exchanges):
        turns.append(DialogueTurn.from_candidate(f"Candidate answer {i}"))
        turns.append(
            DialogueTurn.from_state(
                InterviewerState.model_validate(
                    interviewer_reply(current_phase="CLARIFYING", message_content=f"Follow-up {i}")
                )
            )
        )
    return turns


# =============================================================================
# REASONING ORACLE
# =============================================================================

def test_build_conversation_leads_with_bootstrap():
    transcript = _transcript(1)
    messages = build_conversation(transcript)

    assert isinstance(messages[0], HumanMessage)
    assert messages[0].content == BOOTSTRAP_TRIGGER
    assert [type(m) for m in messages[1:]] == [AIMessage, HumanMessage, AIMessage]
    assert messages[2].content == "Candidate answer 0"


def test_primary_model_answers(case):
    primary = FakeChatModel(interviewer_reply(current_phase="CASE_OPENING"))
    fallback = FakeChatModel(RuntimeError("should not be called"))
    oracle = ReasoningOracle(primary, fallback)

    state = oracle.advance([], case, get_style_directive(case.case_style))

    assert state.current_phase == Phase.CASE_OPENING
    assert len(primary.calls) == 1
    assert fallback.calls == []
    assert oracle.total_tokens == 20

    system, trigger = primary.calls[0]
    assert isinstance(system, SystemMessage)
    assert case.title in system.content
    assert trigger.content == BOOTSTRAP_TRIGGER


def test_fenced_json_is_accepted(case):
    reply = "Here you go:\n```json\n" + '{"current_phase": "FIT", "data_revealed": [], ' \
        '"math_status": "PENDING", "interviewer_thought": "t", "message_content": "Hi"}' + "\n```"
    oracle = ReasoningOracle(FakeChatModel(reply), FakeChatModel(RuntimeError("unused")))

    state = oracle.advance([], case, "")
    assert state.message_content == "Hi"
    assert state.completion_percentage is None


@pytest.mark.parametrize(
    "primary_reply",
    [
        RuntimeError("overloaded"),
        "I think the candidate is doing well.",
        "",
        interviewer_reply(current_phase="DEBRIEF"),
    ],
)
def test_fallback_used_when_primary_fails(case, primary_reply):
    primary = FakeChatModel(primary_reply)
    fallback = FakeChatModel(interviewer_reply(message_content="From the fallback"))
    oracle = ReasoningOracle(primary, fallback)

    state = oracle.advance(_transcript(1), case, "")

    assert state.message_content == "From the fallback"
    assert len(primary.calls) == 1
    assert len(fallback.calls) == 1
    assert fallback.calls[0] == primary.calls[0]


def test_both_tiers_failing_raises(case):
    oracle = ReasoningOracle(FakeChatModel(RuntimeError("primary")), FakeChatModel("not json"))
    with pytest.raises(OracleError) as info:
        oracle.advance([], case, "")
    assert info.value.__cause__ is not None


def test_no_fallback_configured(case):
    oracle = ReasoningOracle(FakeChatModel(RuntimeError("primary")))
    with pytest.raises(OracleError):
        oracle.advance([], case, "")


def test_injected_models_need_no_key(no_api_key):
    ReasoningOracle(FakeChatModel(interviewer_reply())).ensure_credentials()


def test_session_key_satisfies_credentials(no_api_key):
    ReasoningOracle(api_key="sk-session").ensure_credentials()


def test_parse_json_response_errors():
    with pytest.raises(ValueError):
        parse_json_response("   ")
    with pytest.raises(ValueError):
        parse_json_response("[1, 2, 3]")
    assert parse_json_response('```\n{"a": 1}\n```') == {"a": 1}


# =============================================================================
# GRADING ORACLE
# =============================================================================

def test_grading_ten_turn_transcript_fills_blank_summary(case):
    reply = grading_reply(
        solution_comparison={
            "user_recommendation_summary": "Raise prices.",
            "actual_ground_truth_summary": "",
        }
    )
    llm = FakeChatModel(reply)
    grader = GradingOracle(llm)
    transcript = _transcript(5)[:10]

    report = grader.grade(transcript, case)

    assert report.solution_comparison.actual_ground_truth_summary == ground_truth_summary(case)
    assert case.ground_truth.overview in report.solution_comparison.actual_ground_truth_summary
    for score in report.scores.model_dump().values():
        assert 1 <= score <= 10

    system, human = llm.calls[0]
    assert "Rising variable costs" in system.content
    assert format_transcript(transcript) in human.content


def test_grading_clamps_out_of_range_scores(case):
    reply = grading_reply(scores={"structuring": 12, "numeracy": 0, "judgment": 9, "communication": 10})
    report = GradingOracle(FakeChatModel(reply)).grade(_transcript(2), case)
    assert report.scores.structuring == 10
    assert report.scores.numeracy == 1


@pytest.mark.parametrize("bad_reply", [RuntimeError("500"), "no json here", {"scores": {}}])
def test_grading_failure_raises_grading_error(case, bad_reply):
    with pytest.raises(GradingError):
        GradingOracle(FakeChatModel(bad_reply)).grade(_transcript(2), case)


def test_format_transcript_labels_roles():
    text = format_transcript(_transcript(1))
    assert text.startswith("INTERVIEWER: Welcome.")
    assert "CANDIDATE: Candidate answer 0" in text
