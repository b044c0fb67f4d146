"""
Interview Factory

Convenience functions for creating interviews from each case source.
This is the recommended entry point for creating new interviews.

Usage:
    from interview_factory import (
        create_catalog_interview,
        create_generated_interview,
        create_interview_from_transcript,
        create_resume_interview,
    )

    # Catalog case matching the chosen facets
    runner = create_catalog_interview(industry="Financial Services")
    opening = runner.start()

    # Freshly generated case
    runner = create_generated_interview(case_type="Market Entry")

    # Case extracted from a pasted transcript
    runner = create_interview_from_transcript(pasted_text)

All of them return an InterviewRunner that behaves the same way regardless
of where its case came from.
"""

import random
from typing import Optional, Sequence

from agents.case_author import CaseAuthor
from agents.evaluator import GradingOracle
from agents.interviewer import ReasoningOracle
from case_loader import load_case, load_catalog, select_case, select_case_for_resume
from graph import InterviewRunner
from state import CaseDefinition


# =============================================================================
# FROM A CASE
# =============================================================================

def create_case_interview(
    case: CaseDefinition,
    background_summary: Optional[str] = None,
    candidate_id: Optional[str] = None,
    api_key: Optional[str] = None,
    oracle: Optional[ReasoningOracle] = None,
    grader: Optional[GradingOracle] = None,
) -> InterviewRunner:
    """
    Create an interview for an already-obtained case.

    Args:
        case: The case to run
        background_summary: Optional resume summary shown to the interviewer
        candidate_id: Optional identifier for the candidate
        api_key: Session-scoped API key (falls back to the environment)
        oracle / grader: Pre-built agents, mainly for tests

    Returns:
        InterviewRunner ready to start
    """
    return InterviewRunner.for_case(
        case,
        background_summary=background_summary,
        candidate_id=candidate_id,
        api_key=api_key,
        oracle=oracle,
        grader=grader,
    )


def create_case_interview_from_id(case_id: str, **kwargs) -> InterviewRunner:
    """Create an interview for a catalog case by its ID."""
    return create_case_interview(load_case(case_id), **kwargs)


# =============================================================================
# CATALOG SELECTION
# =============================================================================

def create_catalog_interview(
    industry: Optional[str] = None,
    case_type: Optional[str] = None,
    style: Optional[str] = None,
    difficulty: Optional[str] = None,
    catalog: Optional[Sequence[CaseDefinition]] = None,
    rng: Optional[random.Random] = None,
    **kwargs,
) -> InterviewRunner:
    """
    Create an interview from the catalog case that best fits the facets.

    Facets left out match anything; see case_loader.select_case for how the
    filter is relaxed when nothing matches.
    """
    catalog = catalog if catalog is not None else load_catalog()
    case = select_case(catalog, industry, case_type, style, difficulty, rng=rng)
    return create_case_interview(case, **kwargs)


# =============================================================================
# LLM-AUTHORED CASES
# =============================================================================

def create_generated_interview(
    industry: Optional[str] = None,
    case_type: Optional[str] = None,
    style: Optional[str] = None,
    difficulty: Optional[str] = None,
    author: Optional[CaseAuthor] = None,
    api_key: Optional[str] = None,
    **kwargs,
) -> InterviewRunner:
    """Create an interview for a freshly generated case."""
    author = author or CaseAuthor(api_key=api_key)
    case = author.generate_case(industry, case_type, style, difficulty)
    return create_case_interview(case, api_key=api_key, **kwargs)


def create_interview_from_transcript(
    transcript_text: str,
    author: Optional[CaseAuthor] = None,
    api_key: Optional[str] = None,
    **kwargs,
) -> InterviewRunner:
    """Create an interview for a case extracted from pasted text."""
    author = author or CaseAuthor(api_key=api_key)
    case = author.extract_case(transcript_text)
    return create_case_interview(case, api_key=api_key, **kwargs)


def create_resume_interview(
    resume_text: str,
    author: Optional[CaseAuthor] = None,
    catalog: Optional[Sequence[CaseDefinition]] = None,
    rng: Optional[random.Random] = None,
    api_key: Optional[str] = None,
    **kwargs,
) -> InterviewRunner:
    """
    Create an interview tailored to a resume.

    The resume is summarised, a catalog case is chosen from the suggested
    industry and difficulty, and the summary is handed to the interviewer.
    """
    author = author or CaseAuthor(api_key=api_key)
    analysis = author.analyze_resume(resume_text)
    catalog = catalog if catalog is not None else load_catalog()
    case = select_case_for_resume(catalog, analysis, rng=rng)
    return create_case_interview(
        case, background_summary=analysis.summary, api_key=api_key, **kwargs
    )


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "create_case_interview",
    "create_case_interview_from_id",
    "create_catalog_interview",
    "create_generated_interview",
    "create_interview_from_transcript",
    "create_resume_interview",
]
