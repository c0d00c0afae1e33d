"""
Pytest configuration and fixtures
"""
import copy
import os

import pytest

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["OPENROUTER_API_KEY"] = ""

from shadeapi import database
from shadeapi.services.analysis_service import AnalysisService, get_analysis_service

from fakes import FakeDatabase, FakeModelClient, MODEL_REPLY, VALID_IMAGE, VALID_JPEG


@pytest.fixture
def analysis_payload():
    return {
        "dentistName": "Dr. Lee",
        "dentistMobileNumber": "+1234567890",
        "toothImage1": VALID_IMAGE,
        "toothImage2": VALID_JPEG,
    }


@pytest.fixture
def model_reply():
    return copy.deepcopy(MODEL_REPLY)


@pytest.fixture
def fake_model_client():
    return FakeModelClient()


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDatabase()
    monkeypatch.setattr(database.db_instance, "db", db)
    return db


@pytest.fixture
def app():
    from shadeapi.main import app as fastapi_app
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app, fake_db, fake_model_client):
    """Test client with the database and the model client replaced by fakes"""
    from fastapi.testclient import TestClient

    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(fake_model_client)
    # Not entered as a context manager, so the lifespan (real Mongo) never runs
    return TestClient(app)
