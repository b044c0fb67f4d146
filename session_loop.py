"""
Cooperative session loop driven by discrete audio/text events.

Speech capture and playback live outside this package. They talk to the loop
through two channels only:

- utterance finalized: a complete candidate utterance (None ends the session)
- playback finished: the interviewer's last message has been played

Turns run one at a time in a worker thread so the event loop stays free.
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from graph import InterviewRunner

logger = logging.getLogger(__name__)


@dataclass
class SessionEvents:
    utterances: asyncio.Queue = field(default_factory=asyncio.Queue)
    playback: asyncio.Queue = field(default_factory=asyncio.Queue)

    def utterance_finalized(self, text: Optional[str]) -> None:
        self.utterances.put_nowait(text)

    def end_session(self) -> None:
        self.utterances.put_nowait(None)

    def playback_finished(self) -> None:
        self.playback.put_nowait(True)


async def run_session_loop(
    runner: InterviewRunner,
    events: SessionEvents,
    speak: Optional[Callable[[str], Any]] = None,
    wait_for_playback: bool = False,
    stop_on_synthesis: bool = False,
) -> List[str]:
    """
    Run the interview until the candidate leaves.

    Returns the interviewer messages delivered, in order. If the task is
    cancelled the session is abandoned; an in-flight model call is left to
    finish on its own.
    """
    delivered: List[str] = []

    async def deliver(message: str) -> None:
        delivered.append(message)
        if speak is not None:
            result = speak(message)
            if inspect.isawaitable(result):
                await result
        if wait_for_playback:
            await events.playback.get()

    try:
        opening = await asyncio.to_thread(runner.start)
        await deliver(opening)

        while True:
            utterance = await events.utterances.get()
            if utterance is None:
                break
            if not utterance.strip():
                logger.debug("Ignoring empty utterance")
                continue

            reply = await asyncio.to_thread(runner.respond, utterance)
            await deliver(reply)

            if stop_on_synthesis and runner.get_phase().is_terminal:
                break
    except asyncio.CancelledError:
        logger.info("Session loop cancelled; abandoning session %s", runner.session.session_id)
        if not runner.is_complete():
            runner.abandon()
        raise

    return delivered
