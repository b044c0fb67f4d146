"""
Shared LLM plumbing for the agents: model construction, response parsing and
token accounting.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import BaseMessage
from pydantic import BaseModel

from config import Settings, get_settings, resolve_api_key

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def build_chat_model(
    model: str,
    temperature: float,
    api_key: Optional[str] = None,
    settings: Optional[Settings] = None,
    max_tokens: Optional[int] = None,
) -> ChatAnthropic:
    """Create a chat model. Fails fast with MissingCredentialError when no key is available."""
    settings = settings or get_settings()
    return ChatAnthropic(
        model=model,
        temperature=temperature,
        max_tokens=max_tokens or settings.max_tokens,
        api_key=resolve_api_key(api_key),
        max_retries=settings.llm_max_retries,
        timeout=settings.llm_timeout,
    )


def extract_json_text(response_text: str) -> str:
    """Strip markdown code fences around a JSON payload."""
    text = response_text
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    return text.strip()


def parse_json_response(response_text: str) -> Dict[str, Any]:
    """Parse a JSON object out of a model response. Raises ValueError if there is none."""
    if not response_text or not response_text.strip():
        raise ValueError("Empty response from model")

    data = json.loads(extract_json_text(response_text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def response_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Anthropic content blocks
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return content or ""


def tokens_used(response: Any) -> int:
    metadata = getattr(response, "response_metadata", None) or {}
    usage = metadata.get("usage", {}) or {}
    return int(usage.get("input_tokens", 0) or 0) + int(usage.get("output_tokens", 0) or 0)


def invoke_structured(llm: Any, messages: List[BaseMessage], schema: Type[T]) -> Tuple[T, int]:
    """
    Call `llm` and validate its JSON answer against `schema`.

    Returns the validated model and the tokens the call consumed. Any failure
    (transport, empty text, bad JSON, schema mismatch) propagates.
    """
    response = llm.invoke(messages)
    data = parse_json_response(response_text(response))
    return schema.model_validate(data), tokens_used(response)
