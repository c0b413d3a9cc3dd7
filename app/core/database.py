# app/core/database.py
"""Database configuration with separate config and data store engines."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import DATABASE_URL, DATA_STORE_URL, SEED_SAMPLE_DATA, SQL_ECHO

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


# ===== CONFIG DATABASE =====
# Stores saved report templates, column preferences and logs
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# ===== DATA STORE =====
# Stores projects, expenses, quotes, estimates and related entities
ds_engine = create_engine(DATA_STORE_URL, echo=SQL_ECHO, connect_args=_connect_args(DATA_STORE_URL))
DSSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ds_engine)
DSBase = declarative_base()


# ===== SESSION GENERATORS =====


def get_db():
    """Get config database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_ds_db():
    """Get data store session."""
    db = DSSessionLocal()
    try:
        yield db
    finally:
        db.close()


# ===== TABLE CREATION =====


def create_all_tables():
    """Create tables in both databases."""
    # Import models to ensure they're registered with Base classes
    from app.reporting.models import SavedReport  # noqa: F401
    from app.logging.models import Log  # noqa: F401
    from app.datastore.models import Project  # noqa: F401

    logger.info("Creating config database tables")
    Base.metadata.create_all(bind=engine)

    logger.info("Creating data store tables")
    DSBase.metadata.create_all(bind=ds_engine)


def init_db():
    """Initialize both databases."""
    create_all_tables()

    if SEED_SAMPLE_DATA:
        from app.datastore.seed import seed_sample_data

        with DSSessionLocal() as session:
            seed_sample_data(session)
