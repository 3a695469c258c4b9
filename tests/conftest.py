from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import Base, get_db, make_engine
from dependencies import get_ai_client
from main import app
from storage import Storage


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def storage(session_factory):
    db = session_factory()
    yield Storage(db)
    db.close()


@pytest.fixture
def ai_client():
    """Replace with a FakeGroq inside a test to enable /api/ai-chat."""
    return None


@pytest.fixture
def client(session_factory, ai_client):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: ai_client
    # no `with`: the startup seeding is not wanted here
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeGroq:
    def __init__(self, reply=None, error=None):
        self.completions = FakeCompletions(reply=reply, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


def valid_report(**overrides):
    report = {
        "patientInitials": "RK",
        "ageAtEvent": "54",
        "gender": "M",
        "reactionStartDate": "2026-09-02",
        "reactionDescription": "Generalised urticaria two hours after the first dose",
        "seriousness": ["hospitalization"],
        "outcome": "recovering",
        "suspectedMedicationName": "Amoxicillin",
        "suspectedMedications": [
            {"name": "Amoxicillin", "doseUsed": "500 mg", "routeUsed": "oral", "frequency": "TID"},
        ],
        "reporterName": "Dr. A. Mehta",
        "reporterEmail": "a.mehta@cityhospital.in",
        "reporterOccupation": "physician",
        "reportDate": "2026-09-03",
    }
    report.update(overrides)
    return report
