"""
Case Author Agent - obtains cases that are not in the catalog.

- generate_case: a brand-new synthetic case for the chosen facets
- extract_case: a case inferred from a pasted transcript or write-up
- analyze_resume: background summary and suggested facets from resume text

Whatever the provenance, the result is an ordinary CaseDefinition.
"""
import logging
import uuid
from typing import Any, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field, field_validator

from agents.llm import build_chat_model, invoke_structured
from case_loader import normalize_math_data
from config import Settings, get_settings
from errors import CaseAcquisitionError
from prompts.case_prompt import (
    get_case_extraction_prompt,
    get_case_generation_prompt,
    get_resume_analysis_prompt,
)
from state import CaseDefinition, CaseStyle, GroundTruth, ResumeAnalysis

logger = logging.getLogger(__name__)


# =============================================================================
# WIRE SHAPE
# =============================================================================

class MathFact(BaseModel):
    key: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)


class GroundTruthDraft(BaseModel):
    overview: str
    framework_buckets: List[str] = Field(default_factory=list)
    math_data: List[MathFact] = Field(default_factory=list)
    conclusion_key_points: List[str] = Field(default_factory=list)

    @field_validator("math_data", mode="before")
    @classmethod
    def _accept_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return [{"key": k, "value": v} for k, v in value.items()]
        return value


class CaseDraft(BaseModel):
    """A case as the authoring prompts return it: math facts as key/value pairs."""
    title: str
    industry: str
    case_type: str
    case_style: CaseStyle
    difficulty: str
    ground_truth: GroundTruthDraft

    def to_case_definition(self, case_id: str) -> CaseDefinition:
        draft = self.ground_truth
        return CaseDefinition(
            id=case_id,
            title=self.title,
            industry=self.industry,
            case_type=self.case_type,
            case_style=self.case_style,
            difficulty=self.difficulty,
            ground_truth=GroundTruth(
                overview=draft.overview,
                framework_buckets=draft.framework_buckets,
                math_data=normalize_math_data([f.model_dump() for f in draft.math_data]),
                conclusion_key_points=draft.conclusion_key_points,
            ),
        )


# =============================================================================
# AGENT
# =============================================================================

class CaseAuthor:
    def __init__(
        self,
        llm=None,
        fast_llm=None,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self._api_key = api_key
        self._llm = llm
        self._fast_llm = fast_llm if fast_llm is not None else llm

    def _model(self):
        if self._llm is None:
            self._llm = build_chat_model(
                self.settings.primary_model,
                self.settings.author_temperature,
                api_key=self._api_key,
                settings=self.settings,
                max_tokens=2048,
            )
        return self._llm

    def _fast_model(self):
        if self._fast_llm is None:
            self._fast_llm = build_chat_model(
                self.settings.fallback_model,
                0.2,
                api_key=self._api_key,
                settings=self.settings,
            )
        return self._fast_llm

    def _draft(self, llm, system_prompt: str, user_prompt: str, what: str) -> CaseDraft:
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        try:
            draft, _ = invoke_structured(llm, messages, CaseDraft)
        except Exception as e:
            logger.error("Case %s failed", what, exc_info=True)
            raise CaseAcquisitionError(f"Case {what} failed: {e}") from e
        return draft

    def generate_case(
        self,
        industry: Optional[str] = None,
        case_type: Optional[str] = None,
        style: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> CaseDefinition:
        """Generate a new case. Facets that were chosen are kept as chosen."""
        llm = self._model()
        draft = self._draft(
            llm,
            get_case_generation_prompt(industry, case_type, style, difficulty),
            "Generate the case now.",
            "generation",
        )

        overrides = {
            "industry": industry,
            "case_type": case_type,
            "case_style": CaseStyle(style) if style else None,
            "difficulty": difficulty,
        }
        draft = draft.model_copy(update={k: v for k, v in overrides.items() if v})

        case = draft.to_case_definition(f"generated_{uuid.uuid4().hex[:8]}")
        logger.info("Generated case %s (%s)", case.id, case.title)
        return case

    def extract_case(self, transcript_text: str) -> CaseDefinition:
        """Infer a case from free text such as a pasted interview transcript."""
        text = (transcript_text or "").strip()
        if not text:
            raise CaseAcquisitionError("No transcript text supplied")

        llm = self._model()
        draft = self._draft(llm, get_case_extraction_prompt(), text, "extraction")

        case = draft.to_case_definition(f"extracted_{uuid.uuid4().hex[:8]}")
        logger.info("Extracted case %s (%s)", case.id, case.title)
        return case

    def analyze_resume(self, resume_text: str) -> ResumeAnalysis:
        text = (resume_text or "").strip()
        if not text:
            raise CaseAcquisitionError("No resume text supplied")

        llm = self._fast_model()
        messages = [
            SystemMessage(content=get_resume_analysis_prompt()),
            HumanMessage(content=text),
        ]
        try:
            analysis, _ = invoke_structured(llm, messages, ResumeAnalysis)
        except Exception as e:
            logger.error("Resume analysis failed", exc_info=True)
            raise CaseAcquisitionError(f"Failed to analyze resume: {e}") from e
        return analysis
