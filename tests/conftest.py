import os
import tempfile

import pytest
import requests

# Point the app at a throwaway database before anything imports storefront
_TMP = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db")
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["SYNC_LOCK_DIR"] = os.path.join(_TMP, "locks")
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_PUBLIC_KEY"] = ""
os.environ["PAYMENT_DEMO_DELAY_MS"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from storefront.db import SessionLocal, init_db  # noqa: E402
from storefront.main import app  # noqa: E402


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, text=""):
        self.status_code = status_code
        self._json = json_body
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Replays scripted outcomes (FakeResponse or exception) in call order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def fresh_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": os.environ["ADMIN_TOKEN"]}


@pytest.fixture
def timeout_error():
    return requests.Timeout("read timed out")
