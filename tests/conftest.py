# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from typing import Any

import mongomock
import pytest
from flask_jwt_extended import create_access_token

from taskboard.app import create_app
from taskboard.models.user_model import Caller, Role
from taskboard.services.dashboard import DashboardAggregator
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService
from taskboard.stores.task_store import TaskStore
from taskboard.stores.user_store import UserStore

from .factories import task_doc, user_doc


@pytest.fixture()
def db():
    """
    Fresh in-memory MongoDB per test.

    Services run against mongomock rather than hand-written fakes so the
    real query and aggregation documents get exercised.
    """
    return mongomock.MongoClient()["taskboard_test"]


@pytest.fixture()
def stores(db) -> SimpleNamespace:
    return SimpleNamespace(tasks=TaskStore(db.tasks), users=UserStore(db.users))


@pytest.fixture()
def task_service(stores) -> TaskService:
    return TaskService(stores.tasks, stores.users)


@pytest.fixture()
def user_service(stores) -> UserService:
    return UserService(stores.users, stores.tasks)


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture()
def dashboard(stores, fixed_now) -> DashboardAggregator:
    return DashboardAggregator(stores.tasks, now=lambda: fixed_now)


@pytest.fixture()
def add_user(db):
    def _add(name: str = "Alice", role: Role = Role.MEMBER, **extra: Any) -> dict[str, Any]:
        doc = user_doc(name, role, **extra)
        db.users.insert_one(doc)
        return doc

    return _add


@pytest.fixture()
def add_task(db):
    def _add(**overrides: Any) -> dict[str, Any]:
        doc = task_doc(**overrides)
        db.tasks.insert_one(doc)
        return doc

    return _add


@pytest.fixture()
def admin(add_user) -> Caller:
    return Caller(id=add_user("Admin", Role.ADMIN)["_id"], role=Role.ADMIN)


@pytest.fixture()
def member(add_user) -> Caller:
    return Caller(id=add_user("Bob")["_id"], role=Role.MEMBER)


# ---- HTTP layer ----


@pytest.fixture()
def app():
    return create_app(
        {
            "TESTING": True,
            "MONGO_CLIENT": mongomock.MongoClient(),
            "MONGO_DB_NAME": "taskboard_http",
            "JWT_SECRET_KEY": "test-jwt-secret-with-enough-length-for-hs256",
            "ADMIN_INVITE_TOKEN": "let-me-in",
        }
    )


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def app_db(app):
    return app.extensions["mongo_client"][app.config["MONGO_DB_NAME"]]


@pytest.fixture()
def http_user(app_db):
    def _add(name: str = "Alice", role: Role = Role.MEMBER) -> dict[str, Any]:
        doc = user_doc(name, role)
        app_db.users.insert_one(doc)
        return doc

    return _add


@pytest.fixture()
def http_task(app_db):
    def _add(**overrides: Any) -> dict[str, Any]:
        doc = task_doc(**overrides)
        app_db.tasks.insert_one(doc)
        return doc

    return _add


@pytest.fixture()
def auth_headers(app):
    def _headers(user: dict[str, Any]) -> dict[str, str]:
        with app.app_context():
            token = create_access_token(identity=str(user["_id"]))
        return {"Authorization": f"Bearer {token}"}

    return _headers
