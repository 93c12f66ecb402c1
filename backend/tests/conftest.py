"""
Central pytest configuration for the gym office test-suite.

Environment variables are set before any application module is imported so
module-level configuration (policies, currency, secrets) sees test values.
"""

import os
import sys
from pathlib import Path

# backend/ on sys.path so `gym_office` and `tests` import without installation
backend_root = Path(__file__).parent.parent
sys.path.insert(0, str(backend_root))

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["METRICS_ENABLED"] = "0"
os.environ["LOG_TO_FILE"] = "0"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ.pop("SENTRY_DSN", None)
os.environ.pop("ON_MISSING_PLAN", None)
os.environ.pop("RENTAL_STATUS_POLICY", None)
os.environ.pop("DEFAULT_INVOICE_CURRENCY", None)

from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)
from tests.fixtures.app_fixtures import *  # noqa: E402,F401,F403
from tests.fixtures.database_fixtures import *  # noqa: E402,F401,F403
from tests.fixtures.domain_fixtures import *  # noqa: E402,F401,F403
