# app/core/dependencies.py
"""Shared FastAPI dependencies: database sessions and the requesting user."""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.database import get_db, get_ds_db

# Core database dependencies
SessionDep = Annotated[Session, Depends(get_db)]
DSSessionDep = Annotated[Session, Depends(get_ds_db)]


def get_current_user(x_user_id: Annotated[Optional[str], Header()] = None) -> Optional[str]:
    """Opaque id of the requesting user, supplied by the upstream auth layer."""
    return x_user_id or None


CurrentUserDep = Annotated[Optional[str], Depends(get_current_user)]
