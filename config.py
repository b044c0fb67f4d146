"""
Configuration, credentials and logging setup.

Values come from the process environment, with a project-level `.env` file
loaded first. Credentials are never written anywhere: a session may supply its
own key, otherwise ANTHROPIC_API_KEY from the environment is used.
"""
import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from errors import MissingCredentialError

load_dotenv(Path(__file__).parent / ".env")

API_KEY_ENV = "ANTHROPIC_API_KEY"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


class Settings(BaseModel):
    """Runtime settings for the LLM-backed agents."""

    primary_model: str = Field(
        default_factory=lambda: _env("CASE_PRIMARY_MODEL", "claude-sonnet-4-20250514")
    )
    fallback_model: str = Field(
        default_factory=lambda: _env("CASE_FALLBACK_MODEL", "claude-haiku-4-5-20251001")
    )
    interviewer_temperature: float = Field(
        default_factory=lambda: float(_env("CASE_INTERVIEWER_TEMPERATURE", "0.7"))
    )
    grader_temperature: float = Field(
        default_factory=lambda: float(_env("CASE_GRADER_TEMPERATURE", "0.4"))
    )
    author_temperature: float = Field(
        default_factory=lambda: float(_env("CASE_AUTHOR_TEMPERATURE", "0.8"))
    )
    max_tokens: int = Field(default_factory=lambda: int(_env("CASE_MAX_TOKENS", "1024")))
    # Retries inside the client; the primary/fallback pair is the retry policy.
    llm_max_retries: int = Field(default_factory=lambda: int(_env("CASE_LLM_MAX_RETRIES", "0")))
    llm_timeout: float = Field(default_factory=lambda: float(_env("CASE_LLM_TIMEOUT", "60")))
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def resolve_api_key(session_key: Optional[str] = None) -> str:
    """
    Return the credential to use for LLM calls.

    A key supplied for the current session wins over the environment.
    Raises MissingCredentialError before any model call is attempted.
    """
    if session_key and session_key.strip():
        return session_key.strip()

    env_key = os.getenv(API_KEY_ENV, "").strip()
    if env_key:
        return env_key

    raise MissingCredentialError()


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a single console handler to the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(level or get_settings().log_level)
    if any(getattr(h, "_case_interview", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._case_interview = True
    root.addHandler(handler)
