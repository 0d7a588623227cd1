"""Pytest configuration and fixtures."""

import os

# Configure the app before it is imported: SQLite locally, no Redis relay
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["REALTIME_RELAY_ENABLED"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from cartmate.database import Base, get_db  # noqa: E402
from cartmate.main import app  # noqa: E402
from cartmate.models.grocery_list import GroceryList, ListShare  # noqa: E402
from cartmate.models.user import User  # noqa: E402
from cartmate.services.auth import create_access_token  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id, email and token."""

    def __init__(self, *args, user_id=None, email: str = "", token: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.token = token


# Use test database - PostgreSQL in Docker, SQLite locally
if "postgresql" in os.environ["DATABASE_URL"]:
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"].replace("/cartmate", "/cartmate_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    session.query(User).update({User.default_list_id: None})
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, email: str, name: str, provider: str = "google") -> AuthHeaders:
    """Create a user directly and return auth headers for it."""
    user = User(
        email=email,
        name=name,
        external_provider=provider,
        external_user_id=f"{provider}-{email}",
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    token = create_access_token(user.id, user.email, user.name)
    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=user.id, email=user.email, token=token
    )


@pytest.fixture
def auth_headers(db):
    """Create the primary test user (list owner) and return auth headers."""
    return make_user(db, "owner@example.com", "Owner")


@pytest.fixture
def other_headers(db):
    """Create a second user and return auth headers."""
    return make_user(db, "friend@example.com", "Friend")


@pytest.fixture
def grocery_list(db, auth_headers):
    """A list owned by the primary test user."""
    new_list = GroceryList(name="Weekly Shop", owner_id=auth_headers.user_id)
    db.add(new_list)
    db.commit()
    db.refresh(new_list)
    return new_list


@pytest.fixture
def shared_list(db, grocery_list, other_headers):
    """The primary user's list, shared with the second user as an editor."""
    share = ListShare(list_id=grocery_list.id, user_id=other_headers.user_id, can_edit=True)
    db.add(share)
    db.commit()
    return grocery_list


@pytest.fixture
def user_factory(db):
    """Create additional users on demand."""

    def factory(email: str, name: str, provider: str = "google") -> AuthHeaders:
        return make_user(db, email, name, provider)

    return factory
