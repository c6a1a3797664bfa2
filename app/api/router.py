"""
Router registration for the high score API.
"""
from fastapi import FastAPI

from app.api import scores


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(scores.router, prefix="/api", tags=["scores"])
