"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import asyncio
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from llmcheck.database.models import Base
from llmcheck.database.session import enable_sqlite_foreign_keys
from llmcheck.integrations.base import ProviderError, ProviderResult
from llmcheck.visibility import ALL_MODELS, ModelId, ScanConfig, VisibilityScanner


# ============================================================================
# Fake Providers
# ============================================================================

class FakeAdapter:
    """
    Stand-in for a chat model adapter.

    Answers come from a prompt -> text map (or a default answer). Prompts
    listed in ``fail_on`` return a failed ProviderResult; prompts in
    ``raise_on`` raise; ``delay`` sleeps before answering.
    """

    def __init__(
        self,
        model_id: ModelId,
        answers: Optional[Dict[str, str]] = None,
        default: str = "Here are some popular options: Foo, Bar and Baz.",
        fail_on: Optional[List[str]] = None,
        raise_on: Optional[List[str]] = None,
        delay: float = 0.0,
    ):
        self.model_id = model_id
        self.answers = answers or {}
        self.default = default
        self.fail_on = set(fail_on or [])
        self.raise_on = set(raise_on or [])
        self.delay = delay
        self.calls: List[str] = []

    @property
    def is_configured(self) -> bool:
        return True

    async def query(self, prompt: str) -> ProviderResult:
        self.calls.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if prompt in self.raise_on:
            raise RuntimeError(f"{self.model_id.value} exploded")
        if prompt in self.fail_on:
            return ProviderResult.failure(
                ProviderError("API error: 500", provider=self.model_id.value, status_code=500)
            )
        return ProviderResult.success(self.answers.get(prompt, self.default))


class FakeJudge:
    """Sentiment judge returning a fixed value."""

    def __init__(self, value: float = 0.0, fail: bool = False):
        self.value = value
        self.fail = fail
        self.calls = []

    async def judge(self, text: str, brand_name: str) -> float:
        self.calls.append((text, brand_name))
        if self.fail:
            raise RuntimeError("judge unavailable")
        return self.value


@pytest.fixture
def fake_adapters() -> Dict[ModelId, FakeAdapter]:
    """One fake adapter per model, none mentioning any site."""
    return {model: FakeAdapter(model) for model in ALL_MODELS}


@pytest.fixture
def make_scanner():
    """Factory building a scanner around fake adapters."""
    def _create(adapters, judge=None, query_timeout: float = 5.0) -> VisibilityScanner:
        return VisibilityScanner(
            adapters,
            config=ScanConfig(query_timeout=query_timeout),
            judge=judge,
        )
    return _create


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Session bound to the in-memory database."""
    SessionLocal = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    yield session
    session.close()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that touch several layers at once"
    )
