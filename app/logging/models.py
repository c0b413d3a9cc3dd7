"""Database models for the logging module."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String

from app.core.database import Base


class Log(Base):
    """SQLAlchemy model for API request and response logs."""

    __tablename__ = "log"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=datetime.now, index=True)
    method = Column(String, nullable=False)
    path = Column(String, nullable=False)
    status_code = Column(Integer, nullable=False)
    client_ip = Column(String, nullable=True)
    request_headers = Column(String, nullable=True)
    request_body = Column(String, nullable=True)
    response_body = Column(String, nullable=True)
    processing_time = Column(Float, nullable=True)  # milliseconds
    user_agent = Column(String, nullable=True)
    user_id = Column(String, nullable=True)  # X-User-Id of the caller
    username = Column(String, nullable=True)  # OS user running the service
    hostname = Column(String, nullable=True)
    application_id = Column(String, nullable=True)
