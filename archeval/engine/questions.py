# archeval/engine/questions.py
"""
Static question tables for the SLM vs LLM assessment.

These tables are the engine's schema. Order matters:
gatekeepers are evaluated in declared order within each tier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ModelChoice(str, Enum):
    SLM = "Small Language Model (SLM)"
    LLM = "Large Language Model (LLM)"


class ExternalApiTolerance(str, Enum):
    NOT_ACCEPTABLE = "not_acceptable"
    RISK_MITIGATION = "risk_mitigation"
    FULLY_ACCEPTABLE = "fully_acceptable"


@dataclass(frozen=True)
class GatekeeperQuestion:
    id: str
    label: str
    force_decision: ModelChoice
    blocker_text: str
    sub_label: Optional[str] = None

    @property
    def forces_llm(self) -> bool:
        return self.force_decision == ModelChoice.LLM


@dataclass(frozen=True)
class ScoredQuestion:
    id: str
    text: str
    weight: int
    reverse: bool = False


# ========== GATEKEEPERS ==========

GATEKEEPER_QUESTIONS: Tuple[GatekeeperQuestion, ...] = (
    GatekeeperQuestion(
        id="g1_edge",
        label="Does this solution require on-device or edge deployment?",
        sub_label="(e.g., mobile apps, kiosks, embedded systems, offline-first environments)",
        force_decision=ModelChoice.SLM,
        blocker_text="On-device or edge deployment requirement",
    ),
    GatekeeperQuestion(
        id="g2_offline",
        label="Must the solution operate in environments with limited or no internet connectivity?",
        force_decision=ModelChoice.SLM,
        blocker_text="Offline or limited connectivity requirement",
    ),
    GatekeeperQuestion(
        id="g3_dataResidency",
        label="Must all data processed by the model remain within your internal infrastructure at all times?",
        sub_label="(e.g., confidential, regulated, proprietary data)",
        force_decision=ModelChoice.SLM,
        blocker_text="Internal-only data and inference requirement",
    ),
    GatekeeperQuestion(
        id="g4_regulatory",
        label=(
            "Are there regulatory, legal, or contractual obligations requiring "
            "full control over the model and inference process?"
        ),
        sub_label="(e.g., healthcare, finance, government, enterprise IP protection)",
        force_decision=ModelChoice.SLM,
        blocker_text="Regulatory mandate for model control",
    ),
    GatekeeperQuestion(
        id="g6_infraRefusal",
        label="Is the organization unwilling to host or manage AI infrastructure under any circumstances?",
        force_decision=ModelChoice.LLM,
        blocker_text="Organization refuses infrastructure ownership",
    ),
    GatekeeperQuestion(
        id="g7_timeToMarket",
        label="Is immediate production readiness required (weeks rather than months)?",
        force_decision=ModelChoice.LLM,
        blocker_text="Time-to-market constraint favors managed LLMs",
    ),
)

# Tier A (forces LLM) always beats tier B (forces SLM)
LLM_FORCING_GATEKEEPERS = tuple(q for q in GATEKEEPER_QUESTIONS if q.forces_llm)
SLM_FORCING_GATEKEEPERS = tuple(q for q in GATEKEEPER_QUESTIONS if not q.forces_llm)

# Informational only: collected and shown, never consulted by the engine
EXTERNAL_API_QUESTION_ID = "g5_externalApi"
EXTERNAL_API_QUESTION_LABEL = (
    "How acceptable is sending data to an external, third-party model API?"
)
EXTERNAL_API_OPTIONS = {
    ExternalApiTolerance.NOT_ACCEPTABLE: "Not acceptable",
    ExternalApiTolerance.RISK_MITIGATION: "Acceptable with risk mitigation",
    ExternalApiTolerance.FULLY_ACCEPTABLE: "Fully acceptable",
}


# ========== SCORED QUESTIONS ==========

SCORED_QUESTIONS: Tuple[ScoredQuestion, ...] = (
    ScoredQuestion("s1_latency", "Sub-100ms response latency is critical to the user experience.", 5),
    ScoredQuestion("s2_volume", "This system will handle high or rapidly growing request volumes.", 5),
    ScoredQuestion("s3_cost", "Predictable, fixed operating costs are preferred over usage-based pricing.", 4),
    ScoredQuestion("s4_longevity", "This system is expected to remain in production for 3 years or more.", 4),
    ScoredQuestion("s5_narrowness", "The use case is narrow, repetitive, and well-defined.", 3),
    ScoredQuestion("s6_domain", "The solution relies heavily on domain-specific terminology or workflows.", 3),
    ScoredQuestion("s7_determinism", "Deterministic, tightly controlled outputs are required.", 3),
    ScoredQuestion("s8_explainability", "Explainability or auditability of model behavior is important.", 3),
    ScoredQuestion("s9_readiness", "Our organization has the technical capability to host and manage AI models.", 4),
    ScoredQuestion(
        "s10_maintenance",
        "We are comfortable maintaining infrastructure for model deployment, scaling, and monitoring.",
        3,
    ),
    ScoredQuestion(
        "s11_investment",
        "We are willing to invest upfront in exchange for long-term operational benefits.",
        4,
    ),
    # Reverse indicators: high agreement favors LLM
    ScoredQuestion(
        "s12_breadth",
        "This solution requires broad general intelligence across many unrelated tasks.",
        4,
        reverse=True,
    ),
    ScoredQuestion(
        "s13_experimentation",
        "Rapid experimentation and speed to market are more important than optimization and control.",
        3,
        reverse=True,
    ),
    ScoredQuestion(
        "s14_lowVolume",
        "The expected request volume is low and unlikely to scale significantly.",
        4,
        reverse=True,
    ),
)


# ========== SCORING CONSTANTS ==========

LIKERT_MIN = 1
LIKERT_MAX = 5

TOTAL_WEIGHT = sum(q.weight for q in SCORED_QUESTIONS)  # 52

MAX_POSSIBLE_SCORE = LIKERT_MAX * TOTAL_WEIGHT  # 260

# Midpoint of the maximum score
# - score >= threshold -> SLM
# - score <  threshold -> LLM
SCORING_THRESHOLD = MAX_POSSIBLE_SCORE // 2  # 130
