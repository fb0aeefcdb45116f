# archeval/storage/submission_store.py
"""
Submission persistence over the Supabase REST (PostgREST) API.

Expected table:

    create table submissions (
      id text primary key,
      user_name text,
      created_at timestamptz,
      data jsonb,
      score numeric,
      decision text,
      ai_explanation text,
      hard_blocker text
    );

Absence of configuration is a legal state: save() returns False and
fetch_all() returns [] without raising.
"""

import json
import logging
from typing import Dict, List, Optional

import requests
from pydantic import ValidationError

from archeval.config import (
    SUPABASE_URL,
    SUPABASE_KEY,
    SUPABASE_TABLE,
    STORE_TIMEOUT_SECONDS,
)
from archeval.engine.questions import MAX_POSSIBLE_SCORE
from archeval.models import Submission


logger = logging.getLogger(__name__)


def submission_to_row(submission: Submission) -> Dict:
    """Map a Submission to the snake_case table row."""

    return {
        "id": submission.id,
        "user_name": submission.user,
        "created_at": submission.timestamp.isoformat(),
        "data": submission.data.model_dump(mode="json"),
        "score": submission.score,
        "decision": submission.decision.value,
        "ai_explanation": submission.ai_explanation,
        "hard_blocker": submission.hard_blocker,
    }


def row_to_submission(row: Dict) -> Submission:
    """
    Map a table row back to a Submission.

    Accepts snake_case or camelCase columns and a JSON-string `data`.
    """

    data = row.get("data")
    if isinstance(data, str):
        data = json.loads(data)

    explanation = row.get("ai_explanation")
    if explanation is None:
        explanation = row.get("aiExplanation", "")

    hard_blocker = row.get("hard_blocker")
    if hard_blocker is None:
        hard_blocker = row.get("hardBlocker")

    timestamp = row.get("created_at") or row.get("timestamp")

    return Submission(
        id=str(row["id"]),
        user=row.get("user_name") or row.get("user") or "",
        timestamp=timestamp,
        data=data,
        score=int(float(row.get("score") or 0)),
        max_score=row.get("max_score") or MAX_POSSIBLE_SCORE,
        decision=row.get("decision"),
        ai_explanation=str(explanation),
        hard_blocker=hard_blocker,
    )


class SubmissionStore:

    def __init__(
        self,
        url: Optional[str],
        key: Optional[str],
        table: str = SUPABASE_TABLE,
        timeout: float = STORE_TIMEOUT_SECONDS,
    ):

        self._url = url.rstrip("/") if url else None
        self._key = key
        self._table = table
        self._timeout = timeout

        if self.configured:
            logger.info(
                "Submission store configured",
                extra={"table": table},
            )
        else:
            logger.info("Submission store not configured, using local state")

    @classmethod
    def from_env(cls) -> "SubmissionStore":
        return cls(SUPABASE_URL, SUPABASE_KEY)

    @property
    def configured(self) -> bool:
        return bool(self._url and self._key)

    @property
    def endpoint(self) -> str:
        return f"{self._url}/rest/v1/{self._table}"

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self._key,
            "Authorization": f"Bearer {self._key}",
            "Content-Type": "application/json",
        }

    # ============================================================
    # SAVE
    # ============================================================

    def save(self, submission: Submission) -> bool:

        if not self.configured:
            return False

        try:

            response = requests.post(
                self.endpoint,
                headers={**self._headers(), "Prefer": "return=minimal"},
                json=[submission_to_row(submission)],
                timeout=self._timeout,
            )

            response.raise_for_status()

        except Exception as e:

            logger.error(
                "Submission save failed",
                extra={
                    "submission_id": submission.id,
                    "error": str(e),
                },
            )

            return False

        logger.info(
            "Submission saved",
            extra={"submission_id": submission.id},
        )

        return True

    # ============================================================
    # FETCH
    # ============================================================

    def fetch_all(self) -> List[Submission]:
        """All stored submissions, newest first."""

        if not self.configured:
            return []

        try:

            response = requests.get(
                self.endpoint,
                headers=self._headers(),
                params={"select": "*", "order": "created_at.desc"},
                timeout=self._timeout,
            )

            response.raise_for_status()

            rows = response.json()

        except Exception as e:

            logger.error(
                "Submission fetch failed",
                extra={"error": str(e)},
            )

            return []

        submissions = []

        for row in rows or []:

            try:
                submissions.append(row_to_submission(row))
            except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
                logger.warning(
                    "Skipping malformed submission row",
                    extra={"row_id": row.get("id") if isinstance(row, dict) else None,
                           "error": str(e)},
                )

        return newest_first(submissions)


def newest_first(submissions: List[Submission]) -> List[Submission]:
    return sorted(submissions, key=lambda s: s.timestamp, reverse=True)
