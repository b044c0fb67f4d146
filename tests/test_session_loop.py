import asyncio

import pytest

from conftest import ScriptedGrader, ScriptedOracle, interviewer_reply
from graph import InterviewRunner
from session_loop import SessionEvents, run_session_loop
from state import Session, SessionStatus


def make_runner(case, *replies):
    replies = replies or (interviewer_reply(),)
    return InterviewRunner(Session(case), oracle=ScriptedOracle(*replies), grader=ScriptedGrader())


def test_loop_runs_until_session_ends(case):
    runner = make_runner(
        case,
        interviewer_reply(),
        interviewer_reply(current_phase="CASE_OPENING", message_content="Here is the case."),
        interviewer_reply(current_phase="CLARIFYING", message_content="Good question."),
    )
    spoken = []

    async def scenario():
        events = SessionEvents()
        events.utterance_finalized("I studied physics.")
        events.utterance_finalized("   ")
        events.utterance_finalized("Who is the client?")
        events.end_session()
        return await run_session_loop(runner, events, speak=spoken.append)

    delivered = asyncio.run(scenario())

    assert delivered == ["Welcome. Tell me about yourself.", "Here is the case.", "Good question."]
    assert spoken == delivered
    assert runner.session.candidate_turn_count == 2
    assert runner.is_active()


def test_loop_waits_for_playback(case):
    runner = make_runner(case)

    async def speak(message):
        await asyncio.sleep(0)

    async def scenario():
        events = SessionEvents()
        task = asyncio.create_task(
            run_session_loop(runner, events, speak=speak, wait_for_playback=True)
        )
        events.utterance_finalized("Hello")
        events.end_session()
        await asyncio.sleep(0.05)
        assert not task.done()

        events.playback_finished()
        events.playback_finished()
        return await asyncio.wait_for(task, timeout=5)

    delivered = asyncio.run(scenario())
    assert len(delivered) == 2


def test_loop_stops_on_synthesis(case):
    runner = make_runner(
        case,
        interviewer_reply(),
        interviewer_reply(current_phase="SYNTHESIS", message_content="What is your recommendation?"),
    )

    async def scenario():
        events = SessionEvents()
        events.utterance_finalized("Costs are the issue.")
        events.utterance_finalized("This one is never read.")
        return await run_session_loop(runner, events, stop_on_synthesis=True)

    delivered = asyncio.run(scenario())
    assert delivered[-1] == "What is your recommendation?"
    assert runner.session.candidate_turn_count == 1


def test_cancelled_loop_abandons_session(case):
    runner = make_runner(case)

    async def scenario():
        events = SessionEvents()
        task = asyncio.create_task(run_session_loop(runner, events))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert runner.session.status == SessionStatus.ABANDONED
