"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.simplefin import _get_simplefin_client, get_sync_service
from database import Base, get_db
from main import app
from services.simplefin_sync_service import SimplefinSyncService
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    simplefin_account,
    simplefin_item,
    simplefin_item_with_institution,
    synced_simplefin_item,
)
from tests.fixtures.mocks import MockSimplefinProvider, sample_accounts_payload


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mock_provider")
def mock_provider_fixture():
    """Create a mock SimpleFIN provider returning the sample payload."""
    return MockSimplefinProvider(payload=sample_accounts_payload())


@pytest.fixture(name="client")
def client_fixture(db, mock_provider):
    """Create a test client with the test database and mock provider."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_sync_service():
        return SimplefinSyncService(provider=mock_provider)

    def override_get_simplefin_client():
        return mock_provider

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sync_service] = override_get_sync_service
    app.dependency_overrides[_get_simplefin_client] = override_get_simplefin_client
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
