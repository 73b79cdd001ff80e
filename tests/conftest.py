"""
Pytest configuration and shared fixtures
"""

import os

# Must be set before any app module reads the configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = "test-key"
for name in ("AUTH_PASSWORD", "SLACK_BOT_TOKEN", "AI_SERVICE_URL"):
    os.environ.pop(name, None)

from datetime import datetime, timedelta

import pytest

from app.database import Base, SessionLocal, engine
from app.models.domains import Domain


@pytest.fixture(autouse=True)
def database():
    """Fresh in-memory schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_domain():
    """Inserts a domain row and returns its id"""
    base_time = datetime(2024, 1, 1, 12, 0, 0)

    def _add(name, status="queued", user_query=None, age_minutes=0, **fields):
        session = SessionLocal()
        try:
            domain = Domain(
                domain=name,
                status=status,
                user_query=user_query,
                created_at=base_time - timedelta(minutes=age_minutes),
                updated_at=base_time,
                **fields,
            )
            session.add(domain)
            session.commit()
            return domain.id
        finally:
            session.close()

    return _add


@pytest.fixture
def load_domain():
    """Reads a domain row with a new session so committed state is visible"""
    def _load(domain_id):
        session = SessionLocal()
        try:
            return session.get(Domain, domain_id)
        finally:
            session.close()

    return _load


class FakeFetcher:
    def __init__(self, pages=None, errors=None):
        self.pages = pages or {}
        self.errors = errors or {}
        self.calls = []

    async def fetch(self, domain):
        self.calls.append(domain)
        if domain in self.errors:
            raise self.errors[domain]
        return self.pages.get(domain, f"<html><body><p>{domain} home page</p></body></html>")


class FakeSummarizer:
    def __init__(self, answer="A company that makes things.", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def describe_company(self, snippet, domain, user_query=None):
        self.calls.append({"snippet": snippet, "domain": domain, "user_query": user_query})
        if self.error is not None:
            raise self.error
        return self.answer


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def send_domain_status(self, domain, status, message):
        self.messages.append((domain, status, message))


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def fake_summarizer():
    return FakeSummarizer()


@pytest.fixture
def notifier():
    return RecordingNotifier()
