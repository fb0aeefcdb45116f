# tests/conftest.py
import pytest
import sys
import os

# Add repo root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Never talk to real providers or stores from tests
for _var in (
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "POSTHOG_API_KEY",
    "ARCHEVAL_ADMIN_PASSWORD",
):
    os.environ.pop(_var, None)

from fastapi.testclient import TestClient

from archeval.main import app
from archeval.engine.questions import GATEKEEPER_QUESTIONS, SCORED_QUESTIONS
from archeval.storage.submission_store import SubmissionStore


class FakeLLM:
    """
    Stand-in for MultiModelLLMClient.

    reply: text returned by generate()
    error: exception raised by generate() instead
    """

    def __init__(self, reply="", available=True, error=None):
        self.reply = reply
        self.available = available
        self.error = error
        self.calls = []

    def generate(self, prompt, **kwargs):
        self.calls.append({"prompt": prompt, **kwargs})
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingStore:
    """In-memory SubmissionStore double."""

    def __init__(self, succeed=True, history=None):
        self.succeed = succeed
        self.history = history or []
        self.saved = []

    @property
    def configured(self):
        return True

    def save(self, submission):
        self.saved.append(submission)
        return self.succeed

    def fetch_all(self):
        return list(self.history)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def make_answers():
    """
    Build a complete answer set as a plain dict.

    Defaults: every gatekeeper False, every Likert answer 3 (neutral).
    """
    def _make(**overrides):
        answers = {
            "userName": "Test User",
            "email": "test@example.com",
            "companyName": "Acme",
            "projectName": "Support Bot",
            "projectDescription": "Answers customer support tickets for a retail company.",
            "g5_externalApi": "risk_mitigation",
        }
        for q in GATEKEEPER_QUESTIONS:
            answers[q.id] = False
        for q in SCORED_QUESTIONS:
            answers[q.id] = 3
        answers.update(overrides)
        return answers

    return _make


@pytest.fixture
def extreme_answers(make_answers):
    """
    favor="SLM": non-reverse 5, reverse 1 (maximum score)
    favor="LLM": non-reverse 1, reverse 5 (minimum score)
    """
    def _make(favor, **overrides):
        high, low = (5, 1) if favor == "SLM" else (1, 5)
        values = {q.id: (low if q.reverse else high) for q in SCORED_QUESTIONS}
        values.update(overrides)
        return make_answers(**values)

    return _make


@pytest.fixture(autouse=True)
def reset_app_state(monkeypatch):
    """
    Reset module-level state between tests.

    Routes get an unavailable LLM and an unconfigured store unless
    a test swaps them.
    """
    from archeval.api import routes
    from archeval.observability.metrics import metrics_tracker

    monkeypatch.setattr(routes, "llm_client", FakeLLM(available=False))
    monkeypatch.setattr(routes, "submission_store", SubmissionStore(None, None))

    routes.submission_registry.clear()
    metrics_tracker.reset()

    yield

    routes.submission_registry.clear()
