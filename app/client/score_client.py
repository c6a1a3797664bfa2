"""
HTTP client that submits finished games to the score service and
fetches the leaderboard.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from app.core.game_config import DEFAULT_NUM_DISKS, get_min_moves

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Error loading scores"
SAVE_ERROR_MESSAGE = "Error saving score. Please try again."


@dataclass
class LeaderboardResult:
    entries: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SubmissionResult:
    """
    Outcome of a score submission.

    Attributes:
        score_id: Identifier assigned by the service on success
        error: User-visible message when the score was not saved
        leaderboard: Refreshed leaderboard, fetched only after a successful save
    """
    score_id: Optional[int] = None
    error: Optional[str] = None
    leaderboard: Optional[LeaderboardResult] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def format_time(seconds: float) -> str:
    """Render seconds as m:ss."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def render_leaderboard(entries: List[Dict[str, Any]]) -> str:
    if not entries:
        return "No scores yet"
    lines = []
    for rank, entry in enumerate(entries, 1):
        lines.append(
            f"{rank:>2}. {entry['name']:<20} {format_time(entry['time']):>6}  {entry['moves']} moves"
        )
    return "\n".join(lines)


class ScoreClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[Any] = None,
        timeout: float = 5.0,
        num_disks: int = DEFAULT_NUM_DISKS
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.num_disks = num_disks

    @property
    def scores_url(self) -> str:
        return f"{self.base_url}/api/scores"

    @property
    def minimum_moves(self) -> int:
        return get_min_moves(self.num_disks)

    def submit_score(
        self,
        name: str,
        time: int,
        moves: int,
        date: Optional[datetime] = None
    ) -> SubmissionResult:
        """Post one finished game. Never raises for transport or server errors."""
        if not name or not name.strip():
            return SubmissionResult(error="Please enter a name")

        # Same gate as the server, checked before any request is made
        if moves < self.minimum_moves:
            return SubmissionResult(
                error=(
                    f"Invalid number of moves! The minimum possible moves for "
                    f"{self.num_disks} disks is {self.minimum_moves}"
                )
            )

        payload = {
            "name": name.strip(),
            "time": time,
            "moves": moves,
            "date": (date or datetime.now(timezone.utc)).isoformat(),
        }

        try:
            response = self.session.post(self.scores_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error saving score: {e}")
            return SubmissionResult(error=SAVE_ERROR_MESSAGE)

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.warning(f"Score rejected with status {response.status_code}: {message}")
            return SubmissionResult(error=f"Error saving score: {message}")

        try:
            score_id = response.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected response when saving score: {e}")
            return SubmissionResult(error=SAVE_ERROR_MESSAGE)

        return SubmissionResult(score_id=score_id, leaderboard=self.fetch_leaderboard())

    def fetch_leaderboard(self) -> LeaderboardResult:
        """Get the top scores, or an inline error message if that fails."""
        try:
            response = self.session.get(self.scores_url, timeout=self.timeout)
            if not 200 <= response.status_code < 300:
                raise ValueError(f"status {response.status_code}")
            entries = response.json()
            if not isinstance(entries, list):
                raise ValueError("expected a list of scores")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error loading high scores: {e}")
            return LeaderboardResult(error=LOAD_ERROR_MESSAGE)

        return LeaderboardResult(entries=entries)

    def _error_message(self, response) -> str:
        try:
            body = response.json()
        except ValueError:
            return "unknown error"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return "unknown error"
