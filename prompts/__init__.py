"""
Prompt templates for agents.
"""
from .evaluator_prompt import get_grading_system_prompt, format_transcript
from .interviewer_prompt import (
    BOOTSTRAP_TRIGGER,
    get_interviewer_system_prompt,
    get_style_directive,
)
from .case_prompt import (
    get_case_extraction_prompt,
    get_case_generation_prompt,
    get_resume_analysis_prompt,
)

__all__ = [
    "BOOTSTRAP_TRIGGER",
    "format_transcript",
    "get_case_extraction_prompt",
    "get_case_generation_prompt",
    "get_grading_system_prompt",
    "get_interviewer_system_prompt",
    "get_resume_analysis_prompt",
    "get_style_directive",
]
