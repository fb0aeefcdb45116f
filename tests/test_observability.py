# tests/test_observability.py
import json
import logging
from unittest.mock import Mock

import pytest

from archeval.observability.logger import (
    JSONFormatter,
    RequestIdFilter,
    reset_request_id,
    set_request_id,
)
from archeval.observability.metrics import MetricsTracker
from archeval.observability import posthog_client as posthog_module
from archeval.observability.posthog_client import PostHogClient


class TestMetricsTracker:

    def test_in_memory_counters(self):
        tracker = MetricsTracker(path=None)

        tracker.record_success(0.2)
        tracker.record_success(0.4)
        tracker.record_failure()
        tracker.record_decision("SLM", hard_blocked=True)
        tracker.record_decision("LLM", hard_blocked=False)
        tracker.record_narrative_fallback()

        metrics = tracker.get_metrics()

        assert metrics["total_requests"] == 3
        assert metrics["successful_requests"] == 2
        assert metrics["failed_requests"] == 1
        assert metrics["avg_latency"] == pytest.approx(0.3)
        assert metrics["decisions"] == {"SLM": 1, "LLM": 1}
        assert metrics["hard_blocked"] == 1
        assert metrics["narrative_fallbacks"] == 1
        assert metrics["p95_latency"] == 0.4

    def test_average_ignores_failures_and_order(self):
        failures_first = MetricsTracker(path=None)
        failures_first.record_failure()
        failures_first.record_success(0.2)
        failures_first.record_success(0.4)

        failures_last = MetricsTracker(path=None)
        failures_last.record_success(0.2)
        failures_last.record_success(0.4)
        failures_last.record_failure()

        assert failures_first.get_metrics()["avg_latency"] == pytest.approx(0.3)
        assert failures_last.get_metrics()["avg_latency"] == pytest.approx(0.3)

    def test_latency_samples_bounded(self, tmp_path):
        path = str(tmp_path / "metrics.json")
        tracker = MetricsTracker(path=path, latency_window=5)

        for i in range(12):
            tracker.record_success(float(i))

        with open(path) as f:
            saved = json.load(f)

        assert saved["latencies"] == [7.0, 8.0, 9.0, 10.0, 11.0]
        assert saved["successful_requests"] == 12
        assert tracker.get_metrics()["avg_latency"] == pytest.approx(5.5)

    def test_oversized_file_trimmed_on_load(self, tmp_path):
        path = tmp_path / "metrics.json"
        path.write_text(json.dumps({"latencies": [0.1] * 50}))

        tracker = MetricsTracker(path=str(path), latency_window=10)
        tracker.record_success(0.5)

        assert len(json.loads(path.read_text())["latencies"]) == 10

    def test_persisted_between_instances(self, tmp_path):
        path = str(tmp_path / "metrics.json")

        first = MetricsTracker(path=path)
        first.record_decision("LLM", hard_blocked=False)

        second = MetricsTracker(path=path)

        assert second.get_metrics()["decisions"]["LLM"] == 1

    def test_corrupt_file_starts_fresh(self, tmp_path):
        path = tmp_path / "metrics.json"
        path.write_text("{not json")

        tracker = MetricsTracker(path=str(path))

        assert tracker.get_metrics()["assessments"] == 0

    def test_percentile_empty(self):
        assert MetricsTracker(path=None).get_latency_percentile(95) == 0.0

    def test_reset(self):
        tracker = MetricsTracker(path=None)
        tracker.record_decision("SLM", hard_blocked=False)

        tracker.reset()

        assert tracker.get_metrics()["assessments"] == 0


class TestJSONFormatter:

    def test_extra_fields_included(self):
        record = logging.LogRecord(
            name="archeval.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Submission saved",
            args=(),
            exc_info=None,
        )
        record.submission_id = "sub_1"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Submission saved"
        assert payload["level"] == "INFO"
        assert payload["submission_id"] == "sub_1"

    def test_request_id_from_context(self):
        record = logging.LogRecord("archeval.test", logging.INFO, __file__, 1, "narrative", (), None)

        token = set_request_id("req-42")
        try:
            RequestIdFilter().filter(record)
        finally:
            reset_request_id(token)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["request_id"] == "req-42"
        assert payload["service"] == "archeval"

    def test_explicit_request_id_kept(self):
        record = logging.LogRecord("archeval.test", logging.INFO, __file__, 1, "x", (), None)
        record.request_id = "explicit"

        token = set_request_id("ambient")
        try:
            RequestIdFilter().filter(record)
        finally:
            reset_request_id(token)

        assert record.request_id == "explicit"

    def test_clashing_extra_is_prefixed(self):
        record = logging.LogRecord("archeval.test", logging.INFO, __file__, 1, "x", (), None)
        record.level = "custom"

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["extra_level"] == "custom"


class TestPostHogClient:

    def test_disabled_without_key(self, monkeypatch):
        monkeypatch.delenv("POSTHOG_API_KEY", raising=False)
        client = PostHogClient()

        assert client.enabled is False
        # No-ops, no exceptions
        client.track_assessment(
            distinct_id="r1",
            submission_id="sub_1",
            decision="SLM",
            score=156,
            hard_blocker=None,
            latency=0.01,
        )
        client.track_error("r1", "ValueError", "bad", "/evaluate")

    def test_events_sent_when_enabled(self, monkeypatch):
        sdk = Mock()
        monkeypatch.setattr(posthog_module, "Posthog", Mock(return_value=sdk))

        client = PostHogClient(api_key="phc_test")
        client.track_scenario("r2", success=True)

        assert client.enabled is True
        sdk.capture.assert_called_once_with(
            distinct_id="r2",
            event="scenario_generated",
            properties={"success": True},
        )

    def test_sdk_errors_dropped(self, monkeypatch):
        sdk = Mock()
        sdk.capture.side_effect = ConnectionError("offline")
        monkeypatch.setattr(posthog_module, "Posthog", Mock(return_value=sdk))

        client = PostHogClient(api_key="phc_test")

        client.track_admin_login("r3", success=False)
