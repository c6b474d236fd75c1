"""
Shared fixtures: in-memory storage, a store wired to it, a resolver, and an
API client whose app state points at that store.
"""
import jwt
import pytest
from fastapi.testclient import TestClient

from app.core import config
from app.core.storage import MemoryStorage
from app.features.assignments.persistence import AssignmentPersistence
from app.features.assignments.schemas import AssignmentPermissions
from app.features.assignments.store import AssignmentStore
from app.features.permissions.resolver import PermissionResolver
from app.main import app


TEST_KEY = "test_project_assignments"
SIGNING_KEY = "unit-test-signing-key-with-enough-bytes"


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail."""

    def set_item(self, key, value):
        raise OSError("disk full")


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def persistence(storage):
    return AssignmentPersistence(storage, key=TEST_KEY)


@pytest.fixture
def store(persistence):
    return AssignmentStore(persistence)


@pytest.fixture
def resolver(store):
    return PermissionResolver(store)


@pytest.fixture
def edit_only():
    return AssignmentPermissions(can_edit=True, can_delete=False)


def make_token(email, role="Staff", department="General", name="", **claims):
    payload = {"email": email, "name": name or email.split("@")[0], "role": role, "department": department}
    payload.update(claims)
    return jwt.encode(payload, SIGNING_KEY, algorithm="HS256")


def auth_headers(email, role="Staff", department="General", **claims):
    return {"Authorization": f"Bearer {make_token(email, role, department, **claims)}"}


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", SIGNING_KEY)
    monkeypatch.setattr(config, "ALLOW_UNSIGNED_TOKENS", False)
    app.state.assignment_store = store
    app.state.permission_resolver = PermissionResolver(store)
    # Not entered as a context manager so the startup hook (real database) does not run
    yield TestClient(app)
    del app.state.assignment_store
    del app.state.permission_resolver


@pytest.fixture
def auth():
    """Build Authorization headers: auth("a@x.edu", role="Admin")."""
    return auth_headers
