# archeval/workflow/narrative.py
import json
import logging
import random
import re
from typing import Optional

from pydantic import ValidationError

from archeval.config import (
    NARRATIVE_TEMPERATURE,
    NARRATIVE_MAX_TOKENS,
    SCENARIO_TEMPERATURE,
    SCENARIO_MAX_TOKENS,
    MISSING_KEY_EXPLANATION,
    FAILED_EXPLANATION,
    EMPTY_EXPLANATION,
)
from archeval.engine.questions import ModelChoice
from archeval.models import AssessmentAnswers, DecisionResult
from archeval.prompts.prompt_builder import build_narrative_prompt, build_scenario_prompt
from archeval.prompts.system_prompts import ARCHITECT_SYSTEM_PROMPT, SCENARIO_SYSTEM_PROMPT


logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _llm_ready(llm_client) -> bool:
    return llm_client is not None and getattr(llm_client, "available", False)


def explain(
    answers: AssessmentAnswers,
    result: DecisionResult,
    llm_client,
) -> str:
    """
    Prose justification for an engine result.

    Never raises. Every failure resolves to a fixed fallback string.
    """
    if not _llm_ready(llm_client):
        return MISSING_KEY_EXPLANATION

    prompt = build_narrative_prompt(answers, result)

    try:
        text = llm_client.generate(
            prompt,
            system_prompt=ARCHITECT_SYSTEM_PROMPT,
            temperature=NARRATIVE_TEMPERATURE,
            max_tokens=NARRATIVE_MAX_TOKENS,
        )
    except Exception as e:
        logger.error(
            "Narrative generation failed",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        return FAILED_EXPLANATION

    if not text or not text.strip():
        return EMPTY_EXPLANATION

    return text.strip()


def parse_scenario(text: str) -> Optional[AssessmentAnswers]:
    """Parse a model's JSON reply into an answer set, or None."""
    if not text:
        return None

    cleaned = _CODE_FENCE.sub("", text.strip())

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Scenario JSON invalid", extra={"error": str(e)})
        return None

    if not isinstance(payload, dict):
        logger.warning("Scenario JSON is not an object")
        return None

    try:
        return AssessmentAnswers.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "Scenario failed validation",
            extra={"error_count": e.error_count()},
        )
        return None


def generate_scenario(llm_client, rng: random.Random = None) -> Optional[AssessmentAnswers]:
    """
    Ask the model for a random, realistic answer set.

    Returns None when no backend is configured or anything goes wrong.
    """
    if not _llm_ready(llm_client):
        logger.warning("API Key missing for scenario generation")
        return None

    rng = rng or random
    target = ModelChoice.SLM if rng.random() > 0.5 else ModelChoice.LLM

    try:
        text = llm_client.generate(
            build_scenario_prompt(target),
            system_prompt=SCENARIO_SYSTEM_PROMPT,
            temperature=SCENARIO_TEMPERATURE,
            max_tokens=SCENARIO_MAX_TOKENS,
            json_mode=True,
        )
    except Exception as e:
        logger.error(
            "Scenario generation failed",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        return None

    scenario = parse_scenario(text)

    if scenario is not None:
        logger.info("Scenario generated", extra={"target": target.name})

    return scenario
