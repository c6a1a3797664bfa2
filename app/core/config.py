from typing import List

from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./scores.db"
    )
    DEBUG: bool = os.getenv("DEBUG", "False") == "True"

    # Puzzle
    NUM_DISKS: int = 6

    # Leaderboard
    MAX_SCORES: int = 100
    LEADERBOARD_SIZE: int = 10
    MAX_NAME_LENGTH: int = 50
    MAX_TIME_SECONDS: int = 3600
    DATE_SKEW_SECONDS: int = 60

    # Abuse protection
    SUBMISSIONS_PER_HOUR: int = 5
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    MAX_BODY_BYTES: int = 1024
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Unauthenticated bulk delete, off unless explicitly enabled
    ENABLE_SCORE_CLEAR: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
