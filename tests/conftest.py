# tests/conftest.py
import asyncio
import sys
import uuid
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from schooldesk.backend.main import app
from schooldesk.backend.api.auth import get_current_user
from schooldesk.backend.api.utilities.limiter import limiter
from schooldesk.backend.models.db_models import User, Student, StudentContact

# This is the crucial fix for Windows asyncio issues with pytest.
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Route tests hit the same endpoints many times from one address.
limiter.enabled = False


def make_pool(connection):
    """A stand-in asyncpg pool whose acquire() yields `connection`."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = connection
    pool.acquire.return_value.__aexit__.return_value = False
    return pool


def make_connection():
    """A stand-in asyncpg connection; transaction() works as an async context manager."""
    connection = AsyncMock()
    connection.transaction = MagicMock()
    return connection


@pytest.fixture
def connection():
    return make_connection()


@pytest.fixture
def pool(connection):
    return make_pool(connection)


@pytest.fixture
def admin_user() -> User:
    return User(id=uuid.uuid4(), name="Ada Admin", role="admin", email="admin@school.test",
                password="secret1", status="active")


@pytest.fixture
def teacher_user() -> User:
    return User(id=uuid.uuid4(), name="Tom Teacher", role="teacher", email="tom@school.test",
                password="secret2", status="active")


@pytest.fixture
def class_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def sample_student(class_id) -> Student:
    return Student(
        id=uuid.uuid4(),
        student_number="S-001",
        first_name="Lina",
        last_name="Okafor",
        class_id=class_id,
        dob=date(2012, 3, 14),
        gender="Female",
        address="12 Main Road",
        allergies=None,
        medical_notes=None,
        parent_contact=StudentContact(full_name="Grace Okafor", relationship="Mother", phone="555-0101"),
        guardian_contact=None,
        status="active",
    )


@pytest.fixture
def client():
    """A TestClient without the lifespan, so no database or Redis is dialled."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in():
    """Returns a function that makes `user` the caller of every following request."""
    def _sign_in(user: User):
        app.dependency_overrides[get_current_user] = lambda: user
    return _sign_in
