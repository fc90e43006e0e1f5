"""
Test configuration and fixtures for the Buds Auth API.

The credential store runs in memory and mail runs in demo mode, so no Redis
server or SMTP relay is needed.
"""

import os
import tempfile
from typing import Generator

os.environ["FORCE_IN_MEMORY_STORE"] = "true"
os.environ["MAIL_DEMO_MODE"] = "true"
os.environ["ENVIRONMENT"] = "local"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "buds_auth_test_logs"))

import pytest
from fastapi.testclient import TestClient

from app.features.auth.services.credential_store import CredentialStore
from app.features.auth.services.mail_sender import LoggingMailSender
from app.features.auth.services.two_factor import TwoFactorService
from app.platform.cache.memory import InMemoryKeyValueBackend
from app.platform.config import Settings


class FakeClock:
    """Manually advanced stand-in for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend(clock) -> InMemoryKeyValueBackend:
    return InMemoryKeyValueBackend(clock=clock)


@pytest.fixture
def store(backend, clock) -> CredentialStore:
    return CredentialStore(backend, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        FORCE_IN_MEMORY_STORE=True,
        MAIL_DEMO_MODE=True,
        OTP_TTL_SECONDS=600,
        OTP_MAX_ATTEMPTS=5,
    )


@pytest.fixture
def service(store, test_settings) -> TwoFactorService:
    return TwoFactorService(store, LoggingMailSender(), test_settings)


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Fresh TestClient per test; entering it runs the lifespan, so every test
    gets an empty credential store and rate limiter.
    """
    with TestClient(test_app) as test_client:
        yield test_client
