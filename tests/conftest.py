"""
Test configuration and shared fixtures for the construction reports test suite.
Provides in-memory databases, a test client and sample data store rows.
"""

import os

# Keep the application's own engines in memory; tests bind their own below.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_STORE_URL", "sqlite://")

from datetime import date
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.app import create_app
from app.core import database
from app.core.database import Base, DSBase, get_db, get_ds_db
from app.datastore.models import Client, Expense, Payee, Project
from app.datastore.seed import seed_sample_data


# ===== DATABASE SETUP =====

@pytest.fixture(scope="session")
def config_engine():
    """Create in-memory SQLite engine for config database"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Import all config models to register them
    from app.logging.models import Log  # noqa: F401
    from app.reporting.models import ColumnPreferenceRecord, ReportExecutionLog, SavedReport  # noqa: F401
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="session")
def ds_engine():
    """Create in-memory SQLite engine for the data store"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DSBase.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def config_db_session(config_engine):
    """Create a database session for config database"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=config_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        # Clean up all data after each test
        Base.metadata.drop_all(bind=config_engine)
        Base.metadata.create_all(bind=config_engine)


@pytest.fixture(scope="function")
def ds_db_session(ds_engine):
    """Create a database session for the data store"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ds_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        DSBase.metadata.drop_all(bind=ds_engine)
        DSBase.metadata.create_all(bind=ds_engine)


@pytest.fixture
def client(config_engine, config_db_session, ds_db_session, monkeypatch):
    """Create FastAPI test client with database overrides"""
    app = create_app()

    # Request logs are written through SessionLocal outside of dependency injection
    monkeypatch.setattr(
        database, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=config_engine)
    )

    def override_get_db():
        yield config_db_session

    def override_get_ds_db():
        yield ds_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ds_db] = override_get_ds_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ===== SAMPLE DATA FIXTURES =====

@pytest.fixture
def sample_data(ds_db_session) -> Dict[str, int]:
    """Seed the demo data set"""
    return seed_sample_data(ds_db_session)


@pytest.fixture
def dated_expenses(ds_db_session) -> List[Expense]:
    """Three expenses dated around January 2024 on one project"""
    client = Client(client_name="Test Client")
    project = Project(project_number="P-9001", project_name="Test Project", client=client, status="in_progress")
    payee = Payee(payee_name="Test Vendor")
    expenses = [
        Expense(project=project, payee=payee, category="materials", amount=100.0,
                expense_date=date(2024, 1, 5), approval_status="approved"),
        Expense(project=project, payee=payee, category="materials", amount=200.0,
                expense_date=date(2024, 2, 1), approval_status="approved"),
        Expense(project=project, payee=payee, category="materials", amount=None,
                expense_date=date(2023, 12, 31), approval_status="pending"),
    ]
    ds_db_session.add_all(expenses)
    ds_db_session.commit()
    return expenses


# ===== UTILITY FIXTURES =====

@pytest.fixture
def api_headers() -> Dict[str, str]:
    """Standard API headers for testing"""
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-User-Id": "user-1",
    }


@pytest.fixture
def other_user_headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-User-Id": "user-2",
    }
