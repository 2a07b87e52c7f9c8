import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "test"
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aidoctor import database
from aidoctor.gemini import get_analyzer
from main import app

SAMPLE_ANALYSIS = """Possible condition: a common viral infection such as the flu.

MEDICINES:
- Paracetamol (Acetaminophen): Pain reliever and fever reducer. Approximate Cost: $5.00
- Ibuprofen (Advil): Anti-inflammatory for body aches. Approximate Cost: $7.50
- Cough Syrup (Dextromethorphan): Eases dry cough. Approximate Cost: $1,200.00

3. Important notes and warnings: rest and stay hydrated.
4. When to consult a real doctor: if fever lasts more than three days."""


class FakeAnalyzer:
    def __init__(self, text=SAMPLE_ANALYSIS, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def analyze(self, symptoms):
        self.calls.append(symptoms)
        if self.error:
            raise self.error
        return self.text

    def check_models(self, model_names=None):
        return [{"model": "fake-model", "status": "success", "response": "test"}]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def client(engine, analyzer):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[database.get_db] = override_get_db
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, role, email=None, password="secret123"):
    email = email or f"{role}@clinic.org"
    r = client.post(
        "/auth/signup",
        json={"email": email, "password": password, "role": role, "full_name": f"Test {role}"},
    )
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def patient_headers(client):
    return register(client, "patient")


@pytest.fixture
def doctor_headers(client):
    return register(client, "doctor")


@pytest.fixture
def fundraiser_headers(client):
    return register(client, "fundraiser")


@pytest.fixture
def consultation(client, patient_headers):
    r = client.post(
        "/consultations/",
        json={"symptoms": "fever and headache"},
        headers=patient_headers,
    )
    assert r.status_code == 201, r.text
    return r.json()

