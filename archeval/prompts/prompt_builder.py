# archeval/prompts/prompt_builder.py

from archeval.engine.questions import (
    GATEKEEPER_QUESTIONS,
    SCORED_QUESTIONS,
    EXTERNAL_API_QUESTION_ID,
    ExternalApiTolerance,
    ModelChoice,
)
from archeval.models import AssessmentAnswers, DecisionResult


def build_narrative_prompt(
    answers: AssessmentAnswers,
    result: DecisionResult,
) -> str:
    """
    Build the executive-summary prompt for one assessment.

    The hard blocker, when present, must lead the summary.
    """

    prompt = f"""
Task: Write an executive summary (approx 150 words) justifying the selected AI architecture.

Context:
- Project: {answers.projectName}
- Description: {answers.projectDescription}
- Decision: {result.decision.value}
- Fit score: {result.score} / {result.max_score}
- Hard Blocker (if any): {result.hard_blocker or 'None'}

Key Constraints:
- Edge/Offline Required: {answers.g1_edge or answers.g2_offline}
- Data Residency/Regs: {answers.g3_dataResidency or answers.g4_regulatory}
- External API Tolerance: {answers.g5_externalApi.value}
- Infra Refusal: {answers.g6_infraRefusal}
- Time to Market Critical: {answers.g7_timeToMarket}

Instructions:
1. If a Hard Blocker exists, start by citing it as the primary reason.
2. Explain the trade-offs (Latency vs. Intelligence, Control vs. Convenience).
3. Be professional and direct. No markdown.
"""

    return prompt.strip()


def build_scenario_prompt(target: ModelChoice) -> str:
    """
    Ask for a random answer set that should land on `target`.
    """

    if target == ModelChoice.SLM:
        target_line = "SMALL LANGUAGE MODEL (SLM) - Needs privacy, edge, or offline."
    else:
        target_line = "LARGE LANGUAGE MODEL (LLM) - Needs complex reasoning, cloud, or zero maintenance."

    gatekeeper_fields = ",\n".join(
        f'  "{q.id}": boolean' for q in GATEKEEPER_QUESTIONS
    )
    tolerance_values = " | ".join(f'"{t.value}"' for t in ExternalApiTolerance)
    scored_fields = ",\n".join(
        f'  "{q.id}": 1-5' for q in SCORED_QUESTIONS
    )

    prompt = f"""
Generate a realistic enterprise software project scenario for an AI architecture assessment.

Target Outcome: {target_line}

Return a valid JSON object with exactly these keys:
{{
  "userName": "Name",
  "email": "email",
  "companyName": "Company",
  "projectName": "Project Name",
  "projectDescription": "Description > 100 chars",
{gatekeeper_fields},
  "{EXTERNAL_API_QUESTION_ID}": {tolerance_values},
{scored_fields}
}}

Rules:
1. If Target is SLM: Set g1, g2, or g3 to true often. Set s1, s2, s5 high (4 or 5).
2. If Target is LLM: Set g6 or g7 to true often. Set s12, s13 high (4 or 5).
3. All 1-5 values must be integers.
"""

    return prompt.strip()
