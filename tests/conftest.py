"""Pytest configuration and global fixtures for TicketDesk tests.

Every test runs against its own SQLite file under ``tmp_path`` with rate
limiting disabled and no LLM or antivirus configured.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from src.auth import create_user_token, hash_password
from src.auth.rate_limit import general_rate_limit, login_rate_limit, upload_rate_limit
from src.c1_database_session import get_db, get_db_manager, reset_db_manager
from src.c1_user_models import User
from src.core.config import reload_settings
from tests.fixtures.mock_llm_provider import MockChatProvider

SUPER_ADMIN_EMAIL = "root@example.com"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Isolated settings and database for each test."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'ticketdesk-test.db'}")
    monkeypatch.setenv("JWT_SECRET", "test-secret-key")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("SUPER_ADMIN_EMAILS", SUPER_ADMIN_EMAIL)
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
    for name in (
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
        "LLM_PROVIDER",
        "CLAMAV_HOST",
        "GITHUB_CLIENT_ID",
        "RATE_LIMIT_TRUST_FORWARDED_FOR",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = reload_settings()
    reset_db_manager()
    get_db_manager().create_tables()

    yield settings

    for limiter in (general_rate_limit, login_rate_limit, upload_rate_limit):
        limiter.reset()
    reset_db_manager()


@pytest.fixture
def client(test_settings):
    """TestClient bound to a freshly built app."""
    from src.api import create_app

    return TestClient(create_app())


@pytest.fixture
def make_user(test_settings):
    """Factory that stores a user and returns its id, e-mail and auth headers.

    Usage:
        def test_something(make_user):
            alice = make_user("alice@example.com")
            client.get("/api/auth/me", headers=alice.headers)
    """

    def _make_user(
        email: str,
        role: str = "user",
        password: str = DEFAULT_PASSWORD,
        name: str = None,
        can_edit_kanban: bool = False,
        oauth_only: bool = False,
    ):
        with get_db() as db:
            user = User(
                email=email,
                password_hash=None if oauth_only else hash_password(password),
                name=name or email.split("@")[0].title(),
                role=role,
                can_edit_kanban=can_edit_kanban,
            )
            db.add(user)
            db.flush()
            token = create_user_token(user)
            return SimpleNamespace(
                id=user.id,
                email=user.email,
                name=user.name,
                password=password,
                headers={"Authorization": f"Bearer {token}"},
            )

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role="admin", name="Admin")


@pytest.fixture
def regular_user(make_user):
    return make_user("user@example.com", name="Regular User")


@pytest.fixture
def mock_chat_provider():
    """Provide a fresh mock chat provider for each test."""
    provider = MockChatProvider()
    yield provider
    provider.reset()
