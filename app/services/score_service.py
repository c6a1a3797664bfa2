import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.score import Score
from app.services.validators import ScoreValidator

logger = logging.getLogger(__name__)


class ScoreService:
    def __init__(self, validator: Optional[ScoreValidator] = None):
        self.validator = validator or ScoreValidator()

    def get_top_scores(self, db: Session, limit: Optional[int] = None) -> List[Score]:
        """Best scores first: fewest moves, then fastest time."""
        limit = limit or settings.LEADERBOARD_SIZE
        return db.query(Score).order_by(
            Score.moves.asc(),
            Score.time.asc(),
            Score.id.asc()
        ).limit(limit).all()

    def count_scores(self, db: Session) -> int:
        return db.query(func.count(Score.id)).scalar() or 0

    def submit_score(self, db: Session, payload: dict, ip_address: Optional[str]) -> Score:
        """Validate a submission, make room if the store is full and insert it.

        Eviction and insert are committed together; on any failure both are
        rolled back.
        """
        fields = self.validator.validate_score(db, payload, ip_address)

        try:
            evicted = self._evict_for_insert(db)
            score = Score(**fields)
            db.add(score)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(score)
        if evicted:
            logger.info(f"Evicted {evicted} score(s) to stay within {settings.MAX_SCORES} rows")
        logger.info(f"Stored score {score.id} for '{score.name}' ({score.moves} moves, {score.time}s)")
        return score

    def clear_scores(self, db: Session) -> int:
        """Delete every stored score and return how many were removed."""
        try:
            deleted = db.query(Score).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Cleared {deleted} score(s)")
        return deleted

    def get_store_stats(self, db: Session) -> dict:
        """Record count plus the best and worst stored scores."""
        best = self.get_top_scores(db, limit=1)
        worst = self._worst_scores(db, 1)
        return {
            "total_scores": self.count_scores(db),
            "capacity": settings.MAX_SCORES,
            "best": best[0] if best else None,
            "worst": worst[0] if worst else None,
        }

    def _worst_scores(self, db: Session, count: int) -> List[Score]:
        return db.query(Score).order_by(
            Score.moves.desc(),
            Score.time.desc(),
            Score.id.desc()
        ).limit(count).all()

    def _evict_for_insert(self, db: Session) -> int:
        """Delete the worst rows so that one more insert stays within capacity."""
        overflow = self.count_scores(db) - settings.MAX_SCORES + 1
        if overflow <= 0:
            return 0

        for score in self._worst_scores(db, overflow):
            logger.debug(f"Evicting score {score.id} ({score.moves} moves, {score.time}s)")
            db.delete(score)
        db.flush()
        return overflow


score_service_obj = ScoreService()
