import json
import logging
import os
import threading
from typing import Dict, List, Optional

from archeval.config import METRICS_PATH, METRICS_LATENCY_WINDOW


logger = logging.getLogger(__name__)

_lock = threading.Lock()


def _empty_metrics() -> Dict:

    return {

        "total_requests": 0,
        "successful_requests": 0,
        "failed_requests": 0,

        "total_latency": 0.0,
        "avg_latency": 0.0,
        "latencies": [],

        # Assessment outcomes
        "assessments": 0,
        "decisions": {"SLM": 0, "LLM": 0},
        "hard_blocked": 0,
        "narrative_fallbacks": 0,

    }


class MetricsTracker:
    """
    Request and decision counters, persisted as JSON.

    path=None keeps everything in memory. Only the newest
    latency_window latencies are kept for the p95.
    """

    def __init__(
        self,
        path: Optional[str] = METRICS_PATH,
        latency_window: int = METRICS_LATENCY_WINDOW,
    ):

        self._path = path
        self._latency_window = latency_window
        self._metrics = _empty_metrics()

        if self._path:
            os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
            self._load()


    def _load(self):

        if not os.path.exists(self._path):
            return

        try:

            with open(self._path, "r") as f:
                data = json.load(f)

        except (OSError, ValueError) as e:

            logger.warning(
                "Metrics file unreadable, starting fresh",
                extra={"error": str(e)},
            )
            return

        # Older files may lack newer keys
        merged = _empty_metrics()
        merged.update(data)
        merged["latencies"] = merged["latencies"][-self._latency_window:]
        self._metrics = merged


    def _save(self):

        if not self._path:
            return

        try:

            with open(self._path, "w") as f:
                json.dump(self._metrics, f, indent=2)

        except OSError as e:

            logger.warning(
                "Metrics save failed",
                extra={"error": str(e)},
            )


    def record_success(self, latency: float):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["successful_requests"] += 1
            self._metrics["total_latency"] += latency

            # Failed requests carry no latency
            self._metrics["avg_latency"] = (
                self._metrics["total_latency"]
                / self._metrics["successful_requests"]
            )

            latencies = self._metrics["latencies"]
            latencies.append(latency)
            del latencies[:-self._latency_window]

            self._save()


    def record_failure(self):

        with _lock:

            self._metrics["total_requests"] += 1
            self._metrics["failed_requests"] += 1

            self._save()


    def record_decision(self, decision_name: str, hard_blocked: bool):

        with _lock:

            self._metrics["assessments"] += 1

            decisions = self._metrics["decisions"]
            decisions[decision_name] = decisions.get(decision_name, 0) + 1

            if hard_blocked:
                self._metrics["hard_blocked"] += 1

            self._save()


    def record_narrative_fallback(self):

        with _lock:

            self._metrics["narrative_fallbacks"] += 1

            self._save()


    def get_metrics(self) -> Dict:

        with _lock:

            metrics = dict(self._metrics)
            metrics["decisions"] = dict(self._metrics["decisions"])
            metrics.pop("latencies", None)
            metrics["p95_latency"] = self._percentile(95)

        return metrics


    def get_latency_percentile(self, percentile: float) -> float:

        with _lock:
            return self._percentile(percentile)


    def _percentile(self, percentile: float) -> float:

        latencies: List[float] = self._metrics.get("latencies", [])

        if not latencies:
            return 0.0

        sorted_latencies = sorted(latencies)

        index = int(len(sorted_latencies) * percentile / 100)

        index = min(index, len(sorted_latencies) - 1)

        return sorted_latencies[index]


    def reset(self):

        with _lock:

            self._metrics = _empty_metrics()

            self._save()


metrics_tracker = MetricsTracker()
