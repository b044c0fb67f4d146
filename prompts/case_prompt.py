"""
Case authoring prompts: synthetic case generation, case extraction from a
pasted transcript, and resume analysis.
"""

from typing import Optional

from state import CASE_TYPES, DIFFICULTIES, INDUSTRIES, CaseStyle

CASE_JSON_FORMAT = """```json
{
    "title": "<short case title>",
    "industry": "<industry>",
    "case_type": "<case type>",
    "case_style": "<Interviewer-Led (McKinsey Style)|Candidate-Led (BCG/Bain Style)>",
    "difficulty": "<Beginner|Intermediate|Advanced (Partner Level)>",
    "ground_truth": {
        "overview": "<2-3 sentence case prompt as the interviewer would read it>",
        "framework_buckets": ["<expected framework bucket>", "..."],
        "math_data": [
            {"key": "<snake_case fact name>", "value": "<value with units>"}
        ],
        "conclusion_key_points": ["<expected conclusion point>", "..."]
    }
}
```"""


def _or_any(value: Optional[str], choices) -> str:
    if value:
        return value
    return "choose one of: " + "; ".join(choices)


def get_case_generation_prompt(
    industry: Optional[str] = None,
    case_type: Optional[str] = None,
    style: Optional[str] = None,
    difficulty: Optional[str] = None,
) -> str:
    """Prompt for a brand-new case. Facets left empty are picked by the model."""
    return f"""You write realistic management consulting case interviews for practice.

Create ONE new, original case with these characteristics:

- **Industry:** {_or_any(industry, INDUSTRIES)}
- **Case type:** {_or_any(case_type, CASE_TYPES)}
- **Style:** {_or_any(style, [s.value for s in CaseStyle])}
- **Difficulty:** {_or_any(difficulty, DIFFICULTIES)}

Requirements:
- The overview states the client, the situation and the question to answer.
- 3-5 framework buckets a strong candidate would use.
- 3-6 quantitative facts that make the math phase solvable, with units.
- 3 conclusion key points that follow from those facts.

Respond with JSON only:

{CASE_JSON_FORMAT}"""


def get_case_extraction_prompt() -> str:
    return f"""You convert case interview transcripts and write-ups into structured practice cases.

Read the text supplied by the user. Infer:
- the client situation and question (overview),
- the framework buckets the case expects,
- every quantitative fact mentioned (name each one in snake_case),
- the conclusion points a strong candidate should reach.

Classify the industry, case type, style and difficulty as best you can.
Use "Candidate-Led (BCG/Bain Style)" if the style is unclear.

Respond with JSON only:

{CASE_JSON_FORMAT}"""


def get_resume_analysis_prompt() -> str:
    return f"""Analyze this resume for a management consulting interview.

1. Summarize the candidate's background in 2 sentences.
2. Suggest the best matching industry from this list: [{', '.join(INDUSTRIES)}].
3. Suggest a difficulty level based on experience: [{', '.join(DIFFICULTIES)}].

Respond with JSON only:

```json
{{
    "summary": "<2 sentence summary>",
    "suggested_industry": "<industry from the list>",
    "suggested_difficulty": "<difficulty from the list>"
}}
```"""
