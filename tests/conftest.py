"""Pytest fixtures: every test gets a fresh in-memory catalog database."""

import pytest
from fastapi.testclient import TestClient

from app import database
from app.main import app


@pytest.fixture
def fresh_db():
    database.configure("sqlite://")
    yield
    database.configure(None)


@pytest.fixture
def client(fresh_db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(fresh_db):
    session = next(database.get_db())
    try:
        yield session
    finally:
        session.close()
