"""
Interviewer Agent - the external reasoning oracle.

Given the transcript, the case and a style directive, asks the model for the
next InterviewerState. The primary model gets one shot; on any failure the
same request is replayed once on the cheaper fallback model.
"""
import logging
from typing import List, Optional, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from agents.llm import build_chat_model, invoke_structured
from config import Settings, get_settings, resolve_api_key
from errors import OracleError
from prompts.interviewer_prompt import BOOTSTRAP_TRIGGER, get_interviewer_system_prompt
from state import CaseDefinition, DialogueTurn, InterviewerState, Role

logger = logging.getLogger(__name__)


def build_conversation(transcript: Sequence[DialogueTurn]) -> List[BaseMessage]:
    """
    Role-tagged view of the transcript.

    The bootstrap trigger always leads, so the model sees a user-role message
    first even before the candidate has said anything.
    """
    messages: List[BaseMessage] = [HumanMessage(content=BOOTSTRAP_TRIGGER)]
    for turn in transcript:
        if turn.role == Role.CANDIDATE:
            messages.append(HumanMessage(content=turn.content))
        else:
            messages.append(AIMessage(content=turn.content))
    return messages


class ReasoningOracle:
    """
    Two-tier interviewer model.

    Models can be injected (tests, custom providers); otherwise ChatAnthropic
    models are built on first use from the settings and the resolved API key.
    """

    def __init__(
        self,
        primary_llm=None,
        fallback_llm=None,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self._api_key = api_key
        self._primary = primary_llm
        self._fallback = fallback_llm
        self._build_models = primary_llm is None
        self.total_tokens = 0

    def ensure_credentials(self) -> None:
        """Raise MissingCredentialError now rather than in the middle of a turn."""
        if self._build_models:
            resolve_api_key(self._api_key)

    def _models(self):
        if self._build_models and self._primary is None:
            self._primary = build_chat_model(
                self.settings.primary_model,
                self.settings.interviewer_temperature,
                api_key=self._api_key,
                settings=self.settings,
            )
            if self._fallback is None:
                self._fallback = build_chat_model(
                    self.settings.fallback_model,
                    self.settings.interviewer_temperature,
                    api_key=self._api_key,
                    settings=self.settings,
                )
        return self._primary, self._fallback

    def advance(
        self,
        transcript: Sequence[DialogueTurn],
        case: CaseDefinition,
        style_directive: str,
        background_summary: Optional[str] = None,
    ) -> InterviewerState:
        """Return the interviewer's next state. Raises OracleError if both tiers fail."""
        primary, fallback = self._models()

        messages = [
            SystemMessage(content=get_interviewer_system_prompt(case, style_directive, background_summary)),
            *build_conversation(transcript),
        ]

        try:
            state, tokens = invoke_structured(primary, messages, InterviewerState)
        except Exception as primary_error:
            if fallback is None:
                raise OracleError("Interviewer model failed") from primary_error
            logger.warning(
                "Primary interviewer model failed (%s: %s); retrying on fallback model",
                type(primary_error).__name__, primary_error,
            )
            try:
                state, tokens = invoke_structured(fallback, messages, InterviewerState)
            except Exception as fallback_error:
                raise OracleError("Primary and fallback interviewer models both failed") from fallback_error

        self.total_tokens += tokens
        return state
