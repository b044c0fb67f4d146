"""
Case catalog loading and selection.
"""
import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from errors import CaseNotFoundError
from state import CaseDefinition, CaseStyle, ResumeAnalysis

logger = logging.getLogger(__name__)

CASES_DIR = Path(__file__).parent / "cases"


def load_case(case_id: str, cases_dir: Path = CASES_DIR) -> CaseDefinition:
    """Load a case definition from its JSON file."""
    case_path = Path(cases_dir) / f"{case_id}.json"
    if not case_path.exists():
        raise CaseNotFoundError(f"Case not found: {case_id}")

    with open(case_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    data.setdefault("id", case_id)
    return CaseDefinition.model_validate(data)


def load_catalog(cases_dir: Path = CASES_DIR) -> List[CaseDefinition]:
    """Load every case in the catalog, skipping files that do not validate."""
    catalog = []
    for case_file in sorted(Path(cases_dir).glob("*.json")):
        try:
            catalog.append(load_case(case_file.stem, cases_dir))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping invalid case file %s: %s", case_file.name, e)
    return catalog


def get_available_cases(cases_dir: Path = CASES_DIR) -> List[str]:
    """List all available case IDs."""
    return sorted(f.stem for f in Path(cases_dir).glob("*.json"))


def facet_values(catalog: Iterable[CaseDefinition]) -> Dict[str, List[str]]:
    """Distinct facet values present in the catalog, for setup menus."""
    catalog = list(catalog)
    return {
        "industry": sorted({c.industry for c in catalog}),
        "case_type": sorted({c.case_type for c in catalog}),
        "case_style": sorted({c.case_style.value for c in catalog}),
        "difficulty": sorted({c.difficulty for c in catalog}),
    }


def filter_cases(
    catalog: Sequence[CaseDefinition],
    industry: Optional[str] = None,
    case_type: Optional[str] = None,
    style: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> List[CaseDefinition]:
    """Cases matching every facet that was given. None means "any"."""
    style = CaseStyle(style) if style else None
    return [
        c for c in catalog
        if (not industry or c.industry == industry)
        and (not case_type or c.case_type == case_type)
        and (not style or c.case_style == style)
        and (not difficulty or c.difficulty == difficulty)
    ]


def select_case(
    catalog: Sequence[CaseDefinition],
    industry: Optional[str] = None,
    case_type: Optional[str] = None,
    style: Optional[str] = None,
    difficulty: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> CaseDefinition:
    """
    Pick a case for the chosen facets, relaxing the filter when nothing fits.

    Order of relaxation:
    1. all four facets
    2. industry + case type only
    3. the whole catalog

    A case is drawn uniformly at random from the first non-empty pool. When a
    style was requested the chosen case is run in that style.
    """
    if not catalog:
        raise CaseNotFoundError("The case catalog is empty")
    rng = rng or random.Random()

    pool = filter_cases(catalog, industry, case_type, style, difficulty)
    if not pool:
        logger.info("No exact case match; relaxing to industry=%r type=%r", industry, case_type)
        pool = filter_cases(catalog, industry, case_type)
    if not pool:
        logger.info("No industry/type match; drawing from the whole catalog")
        pool = list(catalog)

    chosen = rng.choice(pool)
    if style:
        chosen = chosen.with_style(CaseStyle(style))
    return chosen


def select_case_for_resume(
    catalog: Sequence[CaseDefinition],
    analysis: ResumeAnalysis,
    rng: Optional[random.Random] = None,
) -> CaseDefinition:
    """Pick a case suited to a resume: same industry, preferably same difficulty."""
    if not catalog:
        raise CaseNotFoundError("The case catalog is empty")
    rng = rng or random.Random()

    pool = filter_cases(catalog, industry=analysis.suggested_industry)
    if not pool:
        pool = list(catalog)

    for case in pool:
        if case.difficulty == analysis.suggested_difficulty:
            return case
    return rng.choice(pool)


def normalize_math_data(pairs: Any) -> Dict[str, str]:
    """
    Flatten quantitative facts into a {name: value} mapping.

    Accepts a list of {"key": ..., "value": ...} pairs (the shape the case
    authoring prompts ask for), a list of 2-item sequences, or a mapping.
    """
    if not pairs:
        return {}
    if isinstance(pairs, dict):
        return {str(k): str(v) for k, v in pairs.items()}

    facts: Dict[str, str] = {}
    for item in pairs:
        if isinstance(item, dict):
            key, value = item.get("key"), item.get("value")
        else:
            key, value = item
        if key is None or str(key).strip() == "":
            continue
        facts[str(key).strip()] = "" if value is None else str(value)
    return facts
