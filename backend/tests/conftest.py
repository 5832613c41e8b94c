import os

os.environ.setdefault("PM_DATABASE_URL", "sqlite://")
os.environ.setdefault("PM_BCRYPT_ROUNDS", "4")
os.environ.setdefault("PM_JWT_SECRET", "test-secret-key-with-enough-entropy-0123456789")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from pm_system.core.security import create_access_token, hash_password  # noqa: E402
from pm_system.db.session import get_session  # noqa: E402
from pm_system.main import app  # noqa: E402
from pm_system.models import Client, Project, User  # noqa: E402

TEST_PASSWORD = "Password123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def api(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(username: str, *, role: str = "Employee", is_active: bool = True) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(TEST_PASSWORD, rounds=4),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_client(session):
    def _make(email: str, *, company_name: str = "Acme Inc", is_active: bool = True, **fields) -> Client:
        client = Client(
            name=fields.pop("name", company_name.split()[0]),
            company_name=company_name,
            email=email,
            is_active=is_active,
            **fields,
        )
        session.add(client)
        session.commit()
        session.refresh(client)
        return client

    return _make


@pytest.fixture
def make_project(session):
    def _make(client: Client, lead: User, *, name: str = "Site Revamp", **fields) -> Project:
        project = Project(
            name=name,
            client_id=client.id,
            team_lead_id=lead.id,
            team_lead_name=lead.username,
            start_date=fields.pop("start_date", datetime(2024, 1, 1)),
            **fields,
        )
        session.add(project)
        session.commit()
        session.refresh(project)
        return project

    return _make


def _auth_headers(user: User) -> dict[str, str]:
    token, _ = create_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return _auth_headers


@pytest.fixture
def manager(make_user) -> User:
    return make_user("manager1", role="Manager")


@pytest.fixture
def manager_headers(manager) -> dict[str, str]:
    return _auth_headers(manager)
