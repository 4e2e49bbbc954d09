"""
Shared fixtures for the API test suite.

Every test gets a fresh in-memory SQLite database and a notification
dispatcher whose notifier only records what it was asked to deliver.
"""

import os
import threading
from datetime import datetime, timedelta, timezone

# Settings are read at import time; point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from taskpulse.database import Base, get_db
from taskpulse.models import Department, Project, Role, Task, User
from taskpulse.services.notifier import NotificationDispatcher, Notifier, get_dispatcher
from taskpulse.utils.security import create_access_token, hash_password

PASSWORD = "secret123"
# one hash shared by every test user
PASSWORD_HASH = hash_password(PASSWORD)


class RecordingNotifier(Notifier):
    """Keeps every delivery in memory; optionally fails for chosen users"""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self._lock = threading.Lock()

    def notify(self, recipient, kind, data):
        if recipient.user_id in self.fail_for:
            raise RuntimeError(f"mailbox of {recipient.email} is unavailable")
        with self._lock:
            self.sent.append((recipient.user_id, kind, dict(data)))

    def recipients(self, kind=None):
        return [user_id for user_id, sent_kind, _ in self.sent if kind is None or sent_kind == kind]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Session for arranging and inspecting data outside of requests"""
    session = session_factory(expire_on_commit=False)
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    dispatcher = NotificationDispatcher(notifier, maxsize=100)
    dispatcher.start()
    yield dispatcher
    dispatcher.stop()


@pytest.fixture
def client(session_factory, dispatcher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    # not used as a context manager, so startup hooks never touch the real engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def delivered(dispatcher, notifier):
    """Wait for the worker to drain the queue, then return the recorded deliveries"""
    def _delivered(kind=None):
        dispatcher.join()
        return notifier.recipients(kind)
    return _delivered


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(data={'sub': user.id})}"}
    return _auth_headers


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=Role.EMPLOYEE, name=None, department=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"user{n}@example.com",
            password_hash=PASSWORD_HASH,
            display_name=name or f"{role.value.title()} {n}",
            role=role,
            matricule=f"M-{n:04d}",
            phone_number=f"+1-555-{n:04d}",
            department_id=department.id if department else None,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_department(db):
    counter = {"n": 0}

    def _make_department(manager=None, employees=(), name=None):
        counter["n"] += 1
        department = Department(
            name=name or f"Department {counter['n']}",
            type="engineering",
            description="Builds things",
            manager_id=manager.id if manager else None,
        )
        department.employees = list(employees)
        db.add(department)
        db.commit()
        return department

    return _make_department


@pytest.fixture
def make_project(db):
    def _make_project(manager, department, team=(), name="Apollo"):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        project = Project(
            name=name,
            description="Launch the thing",
            start_date=start,
            end_date=start + timedelta(days=90),
            manager_id=manager.id,
            department_id=department.id,
        )
        project.team = list(team)
        db.add(project)
        db.commit()
        return project

    return _make_project


@pytest.fixture
def make_task(db):
    def _make_task(creator, assignee, project=None, title="Write report", dependencies=()):
        task = Task(
            title=title,
            description="Quarterly numbers",
            due_date=datetime(2026, 3, 1, tzinfo=timezone.utc),
            assigned_to_id=assignee.id,
            created_by_id=creator.id,
            project_id=project.id if project else None,
            attachments=[],
        )
        task.dependencies = list(dependencies)
        db.add(task)
        db.commit()
        return task

    return _make_task
