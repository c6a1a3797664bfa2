"""
Dependency injection for API endpoints.
"""
from typing import Generator

from fastapi import Request

from app.core.database import SessionLocal
from app.core.middleware import get_client_address


def get_db() -> Generator:
    """
    Database dependency that ensures proper session cleanup.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_client_ip(request: Request) -> str:
    """Submitter origin used for the per-origin submission limit."""
    return get_client_address(request)
