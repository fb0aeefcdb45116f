# archeval/engine/decision.py
from typing import Any, Dict, List, Mapping, Optional, Union

from archeval.engine.questions import (
    GATEKEEPER_QUESTIONS,
    LLM_FORCING_GATEKEEPERS,
    SLM_FORCING_GATEKEEPERS,
    SCORED_QUESTIONS,
    LIKERT_MAX,
    LIKERT_MIN,
    MAX_POSSIBLE_SCORE,
    SCORING_THRESHOLD,
    GatekeeperQuestion,
    ModelChoice,
)
from archeval.models import AssessmentAnswers, DecisionResult


AnswerInput = Union[AssessmentAnswers, Mapping[str, Any]]


class InvalidAnswersError(ValueError):
    """Answer set is missing a declared question or holds an out-of-range value."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("Invalid answers: " + "; ".join(problems))


def validate_answers(answers: AnswerInput) -> Dict[str, Any]:
    """
    Extract the values the engine reads and reject anything malformed.

    No clamping or defaulting: every declared gatekeeper needs a real bool
    and every scored question an int in [1, 5].
    """
    if isinstance(answers, AssessmentAnswers):
        answers = answers.model_dump()

    problems = []
    values = {}

    for q in GATEKEEPER_QUESTIONS:
        if q.id not in answers:
            problems.append(f"missing gatekeeper answer '{q.id}'")
            continue
        value = answers[q.id]
        if not isinstance(value, bool):
            problems.append(f"gatekeeper '{q.id}' must be a boolean, got {value!r}")
            continue
        values[q.id] = value

    for q in SCORED_QUESTIONS:
        if q.id not in answers:
            problems.append(f"missing scored answer '{q.id}'")
            continue
        value = answers[q.id]
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            problems.append(f"scored answer '{q.id}' must be an integer, got {value!r}")
            continue
        if not LIKERT_MIN <= value <= LIKERT_MAX:
            problems.append(
                f"scored answer '{q.id}' must be between {LIKERT_MIN} and {LIKERT_MAX}, got {value}"
            )
            continue
        values[q.id] = value

    if problems:
        raise InvalidAnswersError(problems)

    return values


def find_hard_blocker(gatekeeper_values: Mapping[str, bool]) -> Optional[GatekeeperQuestion]:
    """
    First true gatekeeper, LLM-forcing tier before SLM-forcing tier.

    Within a tier the declared order breaks ties.
    """
    for tier in (LLM_FORCING_GATEKEEPERS, SLM_FORCING_GATEKEEPERS):
        for q in tier:
            if gatekeeper_values[q.id]:
                return q
    return None


def compute_score(likert_values: Mapping[str, int]) -> int:
    """
    Weighted fit score. Higher favors SLM.

    Reverse questions are inverted (6 - response) before weighting.
    """
    score = 0
    for q in SCORED_QUESTIONS:
        response = likert_values[q.id]
        effective = (LIKERT_MAX + LIKERT_MIN - response) if q.reverse else response
        score += effective * q.weight
    return score


def evaluate(answers: AnswerInput) -> DecisionResult:
    """
    Recommend SLM or LLM for one answer set.

    A true gatekeeper fixes the decision; the score is still computed and
    reported. Without one, score >= SCORING_THRESHOLD means SLM.
    """
    values = validate_answers(answers)

    blocker = find_hard_blocker(values)
    score = compute_score(values)

    if blocker is not None:
        decision = blocker.force_decision
    elif score >= SCORING_THRESHOLD:
        decision = ModelChoice.SLM
    else:
        decision = ModelChoice.LLM

    return DecisionResult(
        decision=decision,
        score=score,
        max_score=MAX_POSSIBLE_SCORE,
        hard_blocker=blocker.blocker_text if blocker else None,
    )
