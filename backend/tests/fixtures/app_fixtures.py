"""Flask application fixtures: app bound to the per-test database, JWT headers."""

import pytest

from gym_office.core.security import create_user_token
from gym_office.main import create_app


@pytest.fixture
def app(session_factory):
    app = create_app(
        {
            "TESTING": True,
            "SESSION_FACTORY": session_factory,
            "RATE_LIMIT_ENABLED": False,
            "METRICS_ENABLED": False,
            "LOG_TO_FILE": False,
        }
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Return Authorization headers for a user id and role."""

    def _headers(user_id: int, role: str = "client") -> dict:
        return {"Authorization": f"Bearer {create_user_token(user_id, role)}"}

    return _headers
