from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
import hmac
import logging
import os
import threading
import time

from typing import Dict, Optional

from archeval.config import ADMIN_PASSWORD_ENV
from archeval.engine.decision import evaluate
from archeval.engine.questions import (
    GATEKEEPER_QUESTIONS,
    SCORED_QUESTIONS,
    EXTERNAL_API_QUESTION_ID,
    EXTERNAL_API_QUESTION_LABEL,
    EXTERNAL_API_OPTIONS,
    MAX_POSSIBLE_SCORE,
    SCORING_THRESHOLD,
)
from archeval.llm.multi_model_client import MultiModelLLMClient
from archeval.models import (
    AssessmentAnswers,
    DecisionResult,
    Submission,
    ListSubmissionsResponse,
    QuestionsResponse,
    GatekeeperInfo,
    ScoredQuestionInfo,
    LoginRequest,
    LoginResponse,
    HealthResponse,
)
from archeval.observability.logger import (
    log_request_start,
    log_request_complete,
)
from archeval.observability.metrics import metrics_tracker
from archeval.observability.posthog_client import posthog_client
from archeval.storage.mock_data import mock_submissions
from archeval.storage.submission_store import SubmissionStore, newest_first
from archeval.workflow.assessment import (
    FALLBACK_EXPLANATIONS,
    create_submission,
    complete_submission,
)
from archeval.workflow.narrative import generate_scenario


# ============================================================
# LOGGER
# ============================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================
# GLOBAL SINGLETONS
# ============================================================

llm_client = MultiModelLLMClient()

submission_store = SubmissionStore.from_env()


# ============================================================
# SUBMISSION REGISTRY (IN-MEMORY HISTORY)
# ============================================================

submission_registry: Dict[str, Submission] = {}

registry_lock = threading.Lock()


def load_submission_history():
    """
    Seed the registry from the store, or from mock data
    when the store is unconfigured, empty or failing.
    """

    history = submission_store.fetch_all()

    source = "store"

    if not history:
        history = mock_submissions()
        source = "mock"

    with registry_lock:
        submission_registry.clear()
        submission_registry.update({s.id: s for s in history})

    logger.info(
        "Submission history loaded",
        extra={"source": source, "submissions": len(history)},
    )


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


# ============================================================
# ADMIN ACCESS
# ============================================================

def _admin_password() -> Optional[str]:
    return os.getenv(ADMIN_PASSWORD_ENV) or None


def _password_matches(candidate: Optional[str]) -> bool:

    expected = _admin_password()

    if not expected or not candidate:
        return False

    return hmac.compare_digest(candidate.encode(), expected.encode())


def require_admin(x_admin_password: Optional[str] = Header(None)):

    if not _admin_password():
        raise HTTPException(
            status_code=403,
            detail="Admin access is not configured",
        )

    if not _password_matches(x_admin_password):
        raise HTTPException(
            status_code=401,
            detail="Invalid admin password",
        )


# ============================================================
# HEALTH
# ============================================================

@router.get("/health", response_model=HealthResponse)
def health_check():

    with registry_lock:
        total = len(submission_registry)

    return HealthResponse(
        status="healthy",
        total_submissions=total,
        store_configured=submission_store.configured,
        llm_available=llm_client.available,
    )


# ============================================================
# QUESTION TABLES
# ============================================================

@router.get("/questions", response_model=QuestionsResponse)
def list_questions():

    return QuestionsResponse(
        gatekeepers=[
            GatekeeperInfo(
                id=q.id,
                label=q.label,
                sub_label=q.sub_label,
                force_decision=q.force_decision,
                blocker_text=q.blocker_text,
                tier="A" if q.forces_llm else "B",
            )
            for q in GATEKEEPER_QUESTIONS
        ],
        external_api_question={
            "id": EXTERNAL_API_QUESTION_ID,
            "label": EXTERNAL_API_QUESTION_LABEL,
        },
        external_api_options={
            option.value: label for option, label in EXTERNAL_API_OPTIONS.items()
        },
        scored_questions=[
            ScoredQuestionInfo(
                id=q.id,
                text=q.text,
                weight=q.weight,
                reverse=q.reverse,
            )
            for q in SCORED_QUESTIONS
        ],
        max_score=MAX_POSSIBLE_SCORE,
        threshold=SCORING_THRESHOLD,
    )


# ============================================================
# EVALUATE (ENGINE ONLY)
# ============================================================

@router.post("/evaluate", response_model=DecisionResult)
def evaluate_answers(payload: AssessmentAnswers):

    return evaluate(payload)


# ============================================================
# SUBMIT ASSESSMENT
# ============================================================

def finish_submission(submission_id: str, distinct_id: str):
    """Background step: narrative, then best-effort save."""

    with registry_lock:
        submission = submission_registry.get(submission_id)

    if submission is None:
        logger.warning(
            "Submission vanished before narrative",
            extra={"submission_id": submission_id},
        )
        return

    completed, saved = complete_submission(
        submission,
        llm_client=llm_client,
        store=submission_store,
    )

    with registry_lock:
        submission_registry[submission_id] = completed

    fallback = completed.ai_explanation in FALLBACK_EXPLANATIONS

    if fallback:
        metrics_tracker.record_narrative_fallback()

    posthog_client.track_narrative(
        distinct_id=distinct_id,
        submission_id=submission_id,
        fallback=fallback,
        saved=saved,
    )


@router.post("/assessments", response_model=Submission)
def submit_assessment(
    payload: AssessmentAnswers,
    request: Request,
    background_tasks: BackgroundTasks,
):

    request_id = _request_id(request)

    start_time = time.time()

    log_request_start(logger, request_id, "assessment", project=payload.projectName)

    submission = create_submission(payload)

    with registry_lock:
        submission_registry[submission.id] = submission

    metrics_tracker.record_decision(
        submission.decision.name,
        hard_blocked=submission.hard_blocker is not None,
    )

    latency = time.time() - start_time

    posthog_client.track_assessment(
        distinct_id=request_id,
        submission_id=submission.id,
        decision=submission.decision.name,
        score=submission.score,
        hard_blocker=submission.hard_blocker,
        latency=latency,
    )

    log_request_complete(
        logger,
        request_id,
        "assessment",
        latency,
        submission_id=submission.id,
        decision=submission.decision.name,
    )

    # Decision is returned now; narrative follows
    background_tasks.add_task(finish_submission, submission.id, request_id)

    return submission


@router.get("/assessments/{submission_id}", response_model=Submission)
def get_assessment(submission_id: str):

    with registry_lock:
        submission = submission_registry.get(submission_id)

    if submission is None:

        raise HTTPException(
            status_code=404,
            detail="Submission not found",
        )

    return submission


# ============================================================
# RANDOM SCENARIO
# ============================================================

@router.post("/scenarios/generate", response_model=AssessmentAnswers)
def generate_random_scenario(request: Request):

    scenario = generate_scenario(llm_client)

    posthog_client.track_scenario(_request_id(request), success=scenario is not None)

    if scenario is None:

        raise HTTPException(
            status_code=503,
            detail="Could not generate scenario. Please check your network.",
        )

    return scenario


# ============================================================
# ADMIN
# ============================================================

@router.post("/admin/login", response_model=LoginResponse)
def admin_login(payload: LoginRequest, request: Request):

    authenticated = _password_matches(payload.password)

    posthog_client.track_admin_login(_request_id(request), success=authenticated)

    if not authenticated:
        logger.warning("Admin login rejected")

    return LoginResponse(authenticated=authenticated)


@router.get(
    "/submissions",
    response_model=ListSubmissionsResponse,
    dependencies=[Depends(require_admin)],
)
def list_submissions():

    with registry_lock:
        submissions = newest_first(list(submission_registry.values()))

    decisions = {"SLM": 0, "LLM": 0}

    for s in submissions:
        decisions[s.decision.name] += 1

    return ListSubmissionsResponse(
        submissions=submissions,
        total_submissions=len(submissions),
        decisions=decisions,
    )


# ============================================================
# METRICS ENDPOINT
# ============================================================

@router.get("/metrics")
def get_metrics():

    return metrics_tracker.get_metrics()
