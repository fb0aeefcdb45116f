# archeval/workflow/assessment.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from archeval.config import (
    PENDING_EXPLANATION,
    MISSING_KEY_EXPLANATION,
    FAILED_EXPLANATION,
    EMPTY_EXPLANATION,
)
from archeval.engine.decision import evaluate
from archeval.models import AssessmentAnswers, DecisionResult, Submission
from archeval.workflow.narrative import explain


logger = logging.getLogger(__name__)

FALLBACK_EXPLANATIONS = frozenset({
    MISSING_KEY_EXPLANATION,
    FAILED_EXPLANATION,
    EMPTY_EXPLANATION,
})


def generate_submission_id() -> str:
    return f"sub_{uuid.uuid4().hex[:12]}"


def create_submission(
    answers: AssessmentAnswers,
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = generate_submission_id,
) -> Submission:
    """
    Run the engine and build a publishable submission.

    The explanation is a placeholder until complete_submission() runs.
    """
    result = evaluate(answers)

    submission = Submission(
        id=id_factory(),
        user=answers.userName or "Guest User",
        timestamp=now or datetime.now(timezone.utc),
        data=answers,
        score=result.score,
        max_score=result.max_score,
        decision=result.decision,
        hard_blocker=result.hard_blocker,
        ai_explanation=PENDING_EXPLANATION,
    )

    logger.info(
        "Assessment evaluated",
        extra={
            "submission_id": submission.id,
            "decision": result.decision.name,
            "score": result.score,
            "hard_blocker": result.hard_blocker,
        },
    )

    return submission


def complete_submission(submission: Submission, llm_client, store) -> Tuple[Submission, bool]:
    """
    Attach the narrative, then persist. Both steps are best effort.

    Returns the enriched copy and whether the save succeeded.
    The input submission is left untouched.
    """
    result = DecisionResult(
        decision=submission.decision,
        score=submission.score,
        max_score=submission.max_score,
        hard_blocker=submission.hard_blocker,
    )

    explanation = explain(submission.data, result, llm_client)

    completed = submission.model_copy(update={"ai_explanation": explanation})

    saved = store.save(completed) if store is not None else False

    logger.info(
        "Assessment completed",
        extra={
            "submission_id": completed.id,
            "narrative_fallback": explanation in FALLBACK_EXPLANATIONS,
            "saved": saved,
        },
    )

    return completed, saved
