import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ScoreValidationError, SubmissionLimitExceeded
from app.core.game_config import get_min_moves
from app.models.score import Score, utcnow


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid time or move count
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string to a naive UTC datetime, or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class ScoreValidator:
    """Validates score submissions. Rules run in order; the first failure wins."""

    def __init__(self, num_disks: Optional[int] = None):
        self.num_disks = num_disks or settings.NUM_DISKS

    @property
    def min_moves(self) -> int:
        return get_min_moves(self.num_disks)

    def validate_score(self, db: Session, payload: dict, ip_address: Optional[str]) -> dict:
        """Validate a submission and return its normalized fields."""
        name = self.validate_name(payload.get("name"))
        time = self.validate_time(payload.get("time"))
        moves = self.validate_moves(payload.get("moves"))
        date = self.validate_date(payload.get("date"))
        self.check_submission_limit(db, ip_address)

        return {
            "name": name,
            "time": time,
            "moves": moves,
            "date": date,
            "ip_address": ip_address,
        }

    def validate_name(self, name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ScoreValidationError("Invalid name")
        name = name.strip()
        if len(name) > settings.MAX_NAME_LENGTH:
            raise ScoreValidationError("Name too long")
        return name

    def validate_time(self, time: Any) -> float:
        if not _is_number(time) or not math.isfinite(time):
            raise ScoreValidationError("Invalid time")
        if time < 0 or time > settings.MAX_TIME_SECONDS:
            raise ScoreValidationError("Invalid time")
        return float(time)

    def validate_moves(self, moves: Any) -> int:
        if not _is_number(moves) or not math.isfinite(moves) or moves < 0:
            raise ScoreValidationError("Invalid moves")
        if moves != int(moves):
            raise ScoreValidationError("Invalid moves")
        if moves < self.min_moves:
            raise ScoreValidationError("Invalid number of moves")
        return int(moves)

    def validate_date(self, date: Any) -> datetime:
        parsed = parse_iso_datetime(date)
        if parsed is None:
            raise ScoreValidationError("Invalid date")
        latest_allowed = utcnow() + timedelta(seconds=settings.DATE_SKEW_SECONDS)
        if parsed > latest_allowed:
            raise ScoreValidationError("Invalid date")
        return parsed

    def check_submission_limit(self, db: Session, ip_address: Optional[str]) -> None:
        """Reject an origin that already inserted too many scores this hour."""
        if not ip_address:
            return
        window_start = utcnow() - timedelta(hours=1)
        recent = db.query(func.count(Score.id)).filter(
            Score.ip_address == ip_address,
            Score.created_at > window_start
        ).scalar() or 0

        if recent >= settings.SUBMISSIONS_PER_HOUR:
            raise SubmissionLimitExceeded("Too many submissions from this IP")
