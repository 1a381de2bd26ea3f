"""Shared fixtures.

Configuration is read at import time, so the environment is prepared before
any application module is imported.
"""

import os
import tempfile
from pathlib import Path

import pytest

_TMP_DIR = Path(tempfile.mkdtemp(prefix="aprender-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["DATA_DIR"] = str(_TMP_DIR)
os.environ["LOG_DIR"] = str(_TMP_DIR / "logs")
os.environ["IDENTITY_PROVIDER"] = "local"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from app import app  # noqa: E402
from core.database import SessionLocal, engine  # noqa: E402
from models.base import Base  # noqa: E402
from utils import user_manager as user_manager_module  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database(monkeypatch):
    """Recreate every table so each test starts from an empty database."""
    monkeypatch.setattr(user_manager_module, "BCRYPT_ROUNDS", 4)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_and_login(client, nome, cpf, user_type, data_nascimento="2000-01-01"):
    """Register a user through the API and log in with the returned credentials."""
    resp = client.post(
        "/api/register",
        json={
            "nomeCompleto": nome,
            "cpf": cpf,
            "userType": user_type,
            "dataNascimento": data_nascimento,
        },
    )
    assert resp.status_code == 201, resp.text
    registered = resp.json()
    resp = client.post(
        "/api/login",
        json={"email": registered["email"], "password": registered["password"]},
    )
    assert resp.status_code == 200, resp.text
    login = resp.json()
    return {
        "user_id": login["userId"],
        "email": registered["email"],
        "token": login["token"],
        "headers": auth_headers(login["token"]),
    }


@pytest.fixture
def teacher(client):
    return register_and_login(client, "Mestre Bimba", "11111111111", "professor")


@pytest.fixture
def other_teacher(client):
    return register_and_login(client, "Mestre Pastinha", "22222222222", "professor")


@pytest.fixture
def student(client):
    return register_and_login(client, "Ana Souza", "33333333333", "aluno")


@pytest.fixture
def other_student(client):
    return register_and_login(client, "Bruno Lima", "44444444444", "aluno")


@pytest.fixture
def linked(client, teacher, student):
    """Link ``student`` to ``teacher`` and return the relation id."""
    resp = client.post(
        "/api/teacher-code", json={"teacherId": teacher["user_id"]}, headers=teacher["headers"]
    )
    assert resp.status_code == 200, resp.text
    resp = client.post(
        "/api/link-student",
        json={"teacherCode": resp.json()["linkCode"], "studentId": student["user_id"]},
        headers=student["headers"],
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["relationId"]


def question_payload(**overrides):
    payload = {
        "theme": "História",
        "question": "Quem fundou a Capoeira Regional?",
        "options": ["Mestre Bimba", "Mestre Pastinha", "Mestre João Grande"],
        "correctOptionIndex": 0,
        "feedback": {
            "title": "Capoeira Regional",
            "text": "Mestre Bimba criou a Luta Regional Baiana em 1928.",
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_question(client):
    def _make(owner, **overrides):
        resp = client.post(
            "/api/questions", json=question_payload(**overrides), headers=owner["headers"]
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["id"]

    return _make
