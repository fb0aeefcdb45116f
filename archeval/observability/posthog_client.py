# archeval/observability/posthog_client.py
"""
Product analytics for the assessment flow.

Events (distinct_id is the request_id):

    assessment_submitted   decision, score, hard blocker, latency
    narrative_generated    whether a fallback text was used, whether saved
    scenario_generated     success flag
    admin_login            success flag
    system_error           unhandled or middleware-level failures

Analytics never decides whether a request succeeds. Every PostHog
error is logged at WARNING and dropped.
"""

import os
import logging
from typing import Optional, Dict, Any

from posthog import Posthog


logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://app.posthog.com"


class PostHogClient:
    """
    Thin wrapper over the PostHog SDK.

    Without an API key (argument or POSTHOG_API_KEY) every method is a no-op.
    """

    def __init__(self, api_key: Optional[str] = None, host: Optional[str] = None):

        api_key = api_key or os.getenv("POSTHOG_API_KEY")
        host = host or os.getenv("POSTHOG_HOST", DEFAULT_HOST)

        self._client: Optional[Posthog] = None

        if not api_key:
            logger.info("Analytics disabled, POSTHOG_API_KEY not set")
            return

        try:
            self._client = Posthog(
                project_api_key=api_key,
                host=host,
                timeout=5,
                flush_interval=1,
            )
        except Exception as e:
            logger.warning("Analytics client could not start", extra={"error": str(e)})
            return

        logger.info("Analytics enabled", extra={"host": host})

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def _send(self, method: str, distinct_id: str, **kwargs: Any):

        if self._client is None:
            return

        try:
            getattr(self._client, method)(distinct_id=distinct_id, **kwargs)
        except Exception as e:
            logger.warning(
                "Analytics call dropped",
                extra={"method": method, "error": str(e)},
            )

    def _capture(self, distinct_id: str, event: str, properties: Dict[str, Any]):
        self._send("capture", distinct_id, event=event, properties=properties)

    # ------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------

    def identify_request(self, distinct_id: str, properties: Optional[Dict[str, Any]] = None):
        self._send("identify", distinct_id, properties=properties or {})

    # ------------------------------------------------------------
    # Assessment flow
    # ------------------------------------------------------------

    def track_assessment(
        self,
        distinct_id: str,
        submission_id: str,
        decision: str,
        score: int,
        hard_blocker: Optional[str],
        latency: float,
    ):

        self._capture(
            distinct_id,
            "assessment_submitted",
            {
                "submission_id": submission_id,
                "decision": decision,
                "score": score,
                "hard_blocked": hard_blocker is not None,
                "hard_blocker": hard_blocker,
                "latency_seconds": round(latency, 3),
            },
        )

    def track_narrative(self, distinct_id: str, submission_id: str, fallback: bool, saved: bool):

        self._capture(
            distinct_id,
            "narrative_generated",
            {"submission_id": submission_id, "fallback": fallback, "saved": saved},
        )

    def track_scenario(self, distinct_id: str, success: bool):
        self._capture(distinct_id, "scenario_generated", {"success": success})

    def track_admin_login(self, distinct_id: str, success: bool):
        self._capture(distinct_id, "admin_login", {"success": success})

    # ------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------

    def track_error(self, distinct_id: str, error_type: str, error_message: str, endpoint: str):

        self._capture(
            distinct_id,
            "system_error",
            {
                "error_type": error_type,
                "error_message": error_message,
                "endpoint": endpoint,
            },
        )


posthog_client = PostHogClient()
