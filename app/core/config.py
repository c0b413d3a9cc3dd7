# app/core/config.py
"""Environment-driven settings for the reports service."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

# ===== DATABASES =====
# Config database: saved templates, column preferences, execution and request logs
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reports_config.db")

# Data store: construction business entities queried by reports
DATA_STORE_URL = os.getenv("DATA_STORE_URL", "sqlite:///./reports_datastore.db")

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Load demo rows into an empty data store on startup
SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"

# ===== APPLICATION =====
APPLICATION_ID = os.getenv("APPLICATION_ID", "Unknown")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ===== REPORT ENGINE =====
REPORT_DEFAULT_LIMIT = int(os.getenv("REPORT_DEFAULT_LIMIT", "100"))
REPORT_MAX_LIMIT = int(os.getenv("REPORT_MAX_LIMIT", "1000"))


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
