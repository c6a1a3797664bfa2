from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_serializer


class ScoreCreate(BaseModel):
    # Loosely typed so that ScoreValidator owns the ordering of the rules
    name: Any = Field(None, description="Display name, 1-50 characters")
    time: Any = Field(None, description="Elapsed seconds, 0-3600")
    moves: Any = Field(None, description="Move count, at least 2^N - 1")
    date: Any = Field(None, description="ISO-8601 timestamp of the win")


class ScoreCreated(BaseModel):
    id: int


class ScoreResponse(BaseModel):
    id: int
    name: str
    time: float
    moves: int
    date: datetime

    @field_serializer("date")
    def serialize_date(self, value: datetime) -> str:
        """Stored dates are naive UTC; emit them with an explicit Z."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    class Config:
        from_attributes = True


class ScoresCleared(BaseModel):
    message: str
    deleted: int
