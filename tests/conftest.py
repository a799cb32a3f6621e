from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from stores import ProblemStore, ResultStore


class TickingClock:
    """Each call is one second after the previous one."""

    def __init__(self):
        self.now = datetime(2025, 10, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def db():
    return mongomock.MongoClient()["quizAppDB"]


@pytest.fixture
def problems(db):
    return ProblemStore(db["problem"], clock=TickingClock())


@pytest.fixture
def results(db):
    return ResultStore(db["result"], clock=TickingClock())


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_problem():
    return {"mainCategory": "Oct-2025", "subCategory": "Q20", "problem": "The cat sat on the mat."}


@pytest.fixture
def sample_result():
    return {
        "user": "alice",
        "mainCategory": "Oct-2025",
        "subCategory": "Q20",
        "score": 80,
        "wrongSentenceCount": 1,
        "totalCount": 5,
        "attemptedCount": 5,
        "status": "completed",
    }
