# tests/test_store.py
import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from archeval.engine.questions import MAX_POSSIBLE_SCORE, ModelChoice
from archeval.models import AssessmentAnswers
from archeval.storage import submission_store as store_module
from archeval.storage.mock_data import mock_submissions
from archeval.storage.submission_store import (
    SubmissionStore,
    row_to_submission,
    submission_to_row,
)
from archeval.workflow.assessment import create_submission


def fake_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def store():
    return SubmissionStore("https://demo.supabase.co/", "anon-key")


@pytest.fixture
def submission(make_answers):
    answers = AssessmentAnswers(**make_answers(g3_dataResidency=True))
    return create_submission(
        answers,
        now=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        id_factory=lambda: "sub_abc",
    )


class TestUnconfiguredStore:
    """Missing configuration is a silent no-op."""

    def test_not_configured(self):
        assert SubmissionStore(None, None).configured is False
        assert SubmissionStore("https://demo.supabase.co", None).configured is False

    def test_save_returns_false_without_network(self, submission, monkeypatch):
        post = Mock()
        monkeypatch.setattr(store_module.requests, "post", post)

        assert SubmissionStore(None, None).save(submission) is False
        post.assert_not_called()

    def test_fetch_returns_empty(self, monkeypatch):
        get = Mock()
        monkeypatch.setattr(store_module.requests, "get", get)

        assert SubmissionStore(None, None).fetch_all() == []
        get.assert_not_called()


class TestSave:

    def test_posts_snake_case_row(self, store, submission, monkeypatch):
        post = Mock(return_value=fake_response(201))
        monkeypatch.setattr(store_module.requests, "post", post)

        assert store.save(submission) is True

        args, kwargs = post.call_args
        assert args[0] == "https://demo.supabase.co/rest/v1/submissions"
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"

        row = kwargs["json"][0]
        assert row["id"] == "sub_abc"
        assert row["user_name"] == "Test User"
        assert row["created_at"].startswith("2026-03-01T12:00:00")
        assert row["decision"] == ModelChoice.SLM.value
        assert row["hard_blocker"] == "Internal-only data and inference requirement"
        assert row["data"]["g5_externalApi"] == "risk_mitigation"

    def test_http_error_returns_false(self, store, submission, monkeypatch):
        monkeypatch.setattr(store_module.requests, "post", Mock(return_value=fake_response(500)))

        assert store.save(submission) is False

    def test_network_error_returns_false(self, store, submission, monkeypatch):
        monkeypatch.setattr(
            store_module.requests, "post", Mock(side_effect=requests.ConnectionError("down"))
        )

        assert store.save(submission) is False


class TestFetch:

    def test_maps_rows_newest_first(self, store, submission, monkeypatch):
        older = submission_to_row(submission)
        newer = dict(older, id="sub_new", created_at="2026-04-01T08:00:00+00:00")
        get = Mock(return_value=fake_response(200, [older, newer]))
        monkeypatch.setattr(store_module.requests, "get", get)

        results = store.fetch_all()

        assert [s.id for s in results] == ["sub_new", "sub_abc"]
        assert results[1].data.g3_dataResidency is True
        assert results[1].max_score == MAX_POSSIBLE_SCORE
        assert get.call_args.kwargs["params"]["order"] == "created_at.desc"

    def test_accepts_camel_case_and_json_string_data(self, submission):
        row = {
            "id": 42,
            "user": "Legacy User",
            "timestamp": "2025-01-01T00:00:00",
            "data": json.dumps(submission.data.model_dump(mode="json")),
            "score": "187.0",
            "decision": ModelChoice.LLM.value,
            "aiExplanation": "Old text",
            "hardBlocker": "Time-to-market constraint favors managed LLMs",
        }

        result = row_to_submission(row)

        assert result.id == "42"
        assert result.user == "Legacy User"
        assert result.score == 187
        assert result.ai_explanation == "Old text"
        assert result.hard_blocker == "Time-to-market constraint favors managed LLMs"
        assert result.timestamp.tzinfo is not None

    def test_skips_malformed_rows(self, store, submission, monkeypatch):
        good = submission_to_row(submission)
        bad = {"id": "broken", "data": "{not json", "decision": "SLM?"}
        monkeypatch.setattr(
            store_module.requests, "get", Mock(return_value=fake_response(200, [bad, good, "junk"]))
        )

        assert [s.id for s in store.fetch_all()] == ["sub_abc"]

    def test_error_returns_empty(self, store, monkeypatch):
        monkeypatch.setattr(store_module.requests, "get", Mock(return_value=fake_response(401)))

        assert store.fetch_all() == []


class TestMockData:

    def test_mock_submissions_are_engine_consistent(self):
        submissions = mock_submissions()

        assert [s.id for s in submissions] == ["2", "1"]

        case_summarizer, field_medic = submissions

        assert field_medic.decision == ModelChoice.SLM
        assert field_medic.hard_blocker == "On-device or edge deployment requirement"
        assert field_medic.score == 241

        assert case_summarizer.decision == ModelChoice.LLM
        assert case_summarizer.hard_blocker == "Organization refuses infrastructure ownership"
        assert case_summarizer.score == 92
