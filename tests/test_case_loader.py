import json
import random

import pytest

from case_loader import (
    facet_values,
    filter_cases,
    get_available_cases,
    load_case,
    load_catalog,
    normalize_math_data,
    select_case,
    select_case_for_resume,
)
from errors import CaseNotFoundError
from state import CaseStyle, ResumeAnalysis


def test_catalog_loads_every_case(catalog):
    ids = [c.id for c in catalog]
    assert ids == get_available_cases()
    assert len(ids) == 12
    assert "fintech_pricing_strategy" in ids


def test_load_missing_case():
    with pytest.raises(CaseNotFoundError):
        load_case("no_such_case")


def test_invalid_case_files_are_skipped(tmp_path, case):
    (tmp_path / "good.json").write_text(case.model_dump_json())
    (tmp_path / "broken.json").write_text("{ not json")
    (tmp_path / "incomplete.json").write_text(json.dumps({"title": "No ground truth"}))

    catalog = load_catalog(tmp_path)
    assert [c.id for c in catalog] == [case.id]


def test_undecodable_case_file_is_skipped(tmp_path, case):
    (tmp_path / "good.json").write_text(case.model_dump_json(), encoding="utf-8")
    (tmp_path / "latin1.json").write_bytes(b'{"title": "Caf\xe9 chain"}')

    catalog = load_catalog(tmp_path)
    assert [c.id for c in catalog] == [case.id]


def test_facet_values(catalog):
    facets = facet_values(catalog)
    assert "Financial Services" in facets["industry"]
    assert set(facets["case_style"]) == {s.value for s in CaseStyle}


def test_filter_cases_matches_all_given_facets(catalog):
    found = filter_cases(catalog, industry="Industrials & Manufacturing", difficulty="Intermediate")
    assert [c.id for c in found] == ["gigafactory_location"]


def test_select_exact_match(catalog):
    chosen = select_case(
        catalog,
        industry="Energy & Environment",
        case_type="Market Sizing (Guesstimate)",
        style=CaseStyle.INTERVIEWER_LED.value,
        difficulty="Beginner",
        rng=random.Random(0),
    )
    assert chosen.id == "ev_charging_network"


def test_select_relaxes_style_and_difficulty(catalog):
    chosen = select_case(
        catalog,
        industry="Financial Services",
        case_type="Pricing Strategy",
        difficulty="Advanced (Partner Level)",
        rng=random.Random(0),
    )
    assert chosen.id == "fintech_pricing_strategy"
    assert chosen.difficulty == "Intermediate"


def test_select_relaxes_to_whole_catalog(catalog):
    chosen = select_case(catalog, industry="Aerospace", rng=random.Random(3))
    assert chosen in catalog


def test_select_applies_requested_style(catalog):
    chosen = select_case(
        catalog,
        industry="Financial Services",
        style=CaseStyle.CANDIDATE_LED.value,
        rng=random.Random(0),
    )
    assert chosen.id == "fintech_pricing_strategy"
    assert chosen.case_style == CaseStyle.CANDIDATE_LED


def test_select_from_empty_catalog():
    with pytest.raises(CaseNotFoundError):
        select_case([])


def test_select_for_resume_prefers_matching_difficulty(catalog):
    analysis = ResumeAnalysis(
        summary="Former software engineer",
        suggested_industry="Technology, Media & Telecom (TMT)",
        suggested_difficulty="Intermediate",
    )
    assert select_case_for_resume(catalog, analysis).id == "streamplus_content_strategy"


def test_select_for_resume_unknown_industry_uses_catalog(catalog):
    analysis = ResumeAnalysis(summary="Chef", suggested_industry="Hospitality")
    assert select_case_for_resume(catalog, analysis, rng=random.Random(1)) in catalog


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([{"key": "price", "value": 5}, {"key": "units", "value": "1M"}], {"price": "5", "units": "1M"}),
        ({"margin": 0.4}, {"margin": "0.4"}),
        ([("cost", "$100")], {"cost": "$100"}),
        ([{"key": "  ", "value": "x"}, {"key": "ok", "value": None}], {"ok": ""}),
        (None, {}),
    ],
)
def test_normalize_math_data(raw, expected):
    assert normalize_math_data(raw) == expected
