"""
Grading prompt - scores a finished transcript against the case ground truth.
"""

import json
from typing import Sequence

from state import CaseDefinition, DialogueTurn


def get_grading_system_prompt(case: CaseDefinition) -> str:
    """Build the grading system prompt with the full case, ground truth included."""
    case_text = json.dumps(case.model_dump(mode="json"), indent=2)

    return f"""You are a Grading Algorithm for Management Consulting Interviews.
You must evaluate the Candidate's performance in the provided transcript against the Case Ground Truth.

## CASE CONTEXT
{case_text}

## SCORING RUBRIC (1-10 Scale)

1. **Structuring:** Was the framework MECE (Mutually Exclusive, Collectively Exhaustive)? Did they break down the problem logically?
2. **Numeracy:** Were calculations accurate? Did they perform mental math quickly? Did they sanity-check the data?
3. **Judgment / Business Sense:** Did they ask relevant questions? Did they drive towards the key points in the Ground Truth?
4. **Communication:** Was the synthesis clear? Did they lead the conversation (if candidate-led)?

## TASK

- Analyze the entire conversation history.
- Provide strict but fair scores.
- Compare the candidate's final recommendation (if any) to the Ground Truth conclusion.
- If the candidate abandoned the case early, score based on what was completed, but penalize Structuring/Judgment if they missed the point.

## OUTPUT FORMAT

Respond with JSON only:

```json
{{
    "scores": {{
        "structuring": <1-10>,
        "numeracy": <1-10>,
        "judgment": <1-10>,
        "communication": <1-10>
    }},
    "qualitative_feedback": {{
        "strengths": ["<specific strength>"],
        "areas_for_improvement": ["<specific, actionable improvement>"]
    }},
    "solution_comparison": {{
        "user_recommendation_summary": "<what the candidate recommended, or that they gave none>",
        "actual_ground_truth_summary": "<the expected conclusion>"
    }}
}}
```"""


def format_transcript(transcript: Sequence[DialogueTurn]) -> str:
    """Render turns as `ROLE: text` blocks for the grader."""
    return "\n\n".join(f"{turn.role.value.upper()}: {turn.content}" for turn in transcript)
