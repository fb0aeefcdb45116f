# archeval/storage/mock_data.py
"""
Canned history shown when no submission store is configured
or the store returns nothing.
"""

from datetime import datetime, timezone
from typing import List

from archeval.engine.decision import evaluate
from archeval.models import AssessmentAnswers, Submission
from archeval.storage.submission_store import newest_first


_MOCK_ENTRIES = [
    {
        "id": "1",
        "timestamp": datetime(2025, 2, 1, 10, 0, tzinfo=timezone.utc),
        "explanation": (
            "The requirement for offline capability and edge deployment strictly "
            "mandates a Small Language Model. The high scoring on volume and low "
            "latency further solidifies this choice."
        ),
        "data": {
            "userName": "Sarah Jenkins", "email": "sarah@example.com",
            "companyName": "MedTech Inc", "projectName": "Field Medic",
            "projectDescription": "Offline medic helper",
            "g1_edge": True, "g2_offline": True, "g3_dataResidency": True,
            "g4_regulatory": False, "g5_externalApi": "not_acceptable",
            "g6_infraRefusal": False, "g7_timeToMarket": False,
            "s1_latency": 5, "s2_volume": 4, "s3_cost": 5, "s4_longevity": 5,
            "s5_narrowness": 5, "s6_domain": 5, "s7_determinism": 5,
            "s8_explainability": 4, "s9_readiness": 4, "s10_maintenance": 4,
            "s11_investment": 4, "s12_breadth": 1, "s13_experimentation": 1,
            "s14_lowVolume": 1,
        },
    },
    {
        "id": "2",
        "timestamp": datetime(2025, 2, 2, 14, 30, tzinfo=timezone.utc),
        "explanation": (
            "The organization refusal to manage infrastructure and the need for "
            "rapid time-to-market necessitates a Managed LLM. The broad intelligence "
            "requirement also favors large models."
        ),
        "data": {
            "userName": "David Chen", "email": "d.chen@lawfirm.com",
            "companyName": "Global Law", "projectName": "Case Summarizer",
            "projectDescription": "Summarizing court cases from public web data",
            "g1_edge": False, "g2_offline": False, "g3_dataResidency": False,
            "g4_regulatory": False, "g5_externalApi": "fully_acceptable",
            "g6_infraRefusal": True, "g7_timeToMarket": True,
            "s1_latency": 2, "s2_volume": 2, "s3_cost": 2, "s4_longevity": 2,
            "s5_narrowness": 2, "s6_domain": 2, "s7_determinism": 3,
            "s8_explainability": 3, "s9_readiness": 1, "s10_maintenance": 1,
            "s11_investment": 1, "s12_breadth": 5, "s13_experimentation": 5,
            "s14_lowVolume": 4,
        },
    },
]


def mock_submissions() -> List[Submission]:
    """Mock history, newest first, scored by the engine."""

    submissions = []

    for entry in _MOCK_ENTRIES:

        answers = AssessmentAnswers.model_validate(entry["data"])
        result = evaluate(answers)

        submissions.append(
            Submission(
                id=entry["id"],
                user=answers.userName,
                timestamp=entry["timestamp"],
                data=answers,
                score=result.score,
                max_score=result.max_score,
                decision=result.decision,
                ai_explanation=entry["explanation"],
                hard_blocker=result.hard_blocker,
            )
        )

    return newest_first(submissions)
