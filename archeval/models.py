from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from archeval.engine.questions import (
    ExternalApiTolerance,
    ModelChoice,
    LIKERT_MAX,
    LIKERT_MIN,
    MAX_POSSIBLE_SCORE,
)


def likert_field():
    return Field(..., ge=LIKERT_MIN, le=LIKERT_MAX, strict=True)


def gatekeeper_field():
    return Field(..., strict=True)


class AssessmentAnswers(BaseModel):
    """
    One completed questionnaire.

    Field names match the question ids in archeval.engine.questions.
    """

    # User info (not used by the engine)
    userName: str = Field(..., min_length=1, max_length=200)
    email: str = Field("", max_length=320)
    companyName: str = Field("", max_length=200)
    projectName: str = Field(..., min_length=1, max_length=200)
    projectDescription: str = Field(..., min_length=1, max_length=5000)

    # Gatekeepers, all required
    g1_edge: bool = gatekeeper_field()
    g2_offline: bool = gatekeeper_field()
    g3_dataResidency: bool = gatekeeper_field()
    g4_regulatory: bool = gatekeeper_field()
    g5_externalApi: ExternalApiTolerance = ExternalApiTolerance.RISK_MITIGATION
    g6_infraRefusal: bool = gatekeeper_field()
    g7_timeToMarket: bool = gatekeeper_field()

    # Scored questions, all required. 1 = Strongly Disagree .. 5 = Strongly Agree
    s1_latency: int = likert_field()
    s2_volume: int = likert_field()
    s3_cost: int = likert_field()
    s4_longevity: int = likert_field()
    s5_narrowness: int = likert_field()
    s6_domain: int = likert_field()
    s7_determinism: int = likert_field()
    s8_explainability: int = likert_field()
    s9_readiness: int = likert_field()
    s10_maintenance: int = likert_field()
    s11_investment: int = likert_field()
    s12_breadth: int = likert_field()
    s13_experimentation: int = likert_field()
    s14_lowVolume: int = likert_field()

    @field_validator("userName", "projectName", "projectDescription")
    @classmethod
    def validate_required_text(cls, v):
        """Ensure required fields are not just whitespace."""
        if not v.strip():
            raise ValueError("Field cannot be empty or only whitespace")
        return v.strip()


class DecisionResult(BaseModel):
    """Output of the decision engine. Immutable."""

    model_config = ConfigDict(frozen=True)

    decision: ModelChoice
    score: int
    max_score: int = MAX_POSSIBLE_SCORE
    hard_blocker: Optional[str] = None


class Submission(BaseModel):
    """A questionnaire, its engine result and the narrative explanation."""

    id: str
    user: str
    timestamp: datetime
    data: AssessmentAnswers
    score: int
    max_score: int = MAX_POSSIBLE_SCORE
    decision: ModelChoice
    ai_explanation: str
    hard_blocker: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Naive timestamps would not sort against aware ones
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ListSubmissionsResponse(BaseModel):
    submissions: List[Submission]
    total_submissions: int
    decisions: Dict[str, int]


class GatekeeperInfo(BaseModel):
    id: str
    label: str
    sub_label: Optional[str] = None
    force_decision: ModelChoice
    blocker_text: str
    tier: str


class ScoredQuestionInfo(BaseModel):
    id: str
    text: str
    weight: int
    reverse: bool


class QuestionsResponse(BaseModel):
    gatekeepers: List[GatekeeperInfo]
    external_api_question: Dict[str, str]
    external_api_options: Dict[str, str]
    scored_questions: List[ScoredQuestionInfo]
    max_score: int
    threshold: int


class LoginRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=200)


class LoginResponse(BaseModel):
    authenticated: bool


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    total_submissions: int
    store_configured: bool
    llm_available: bool
