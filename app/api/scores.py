"""
High score API endpoints.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_client_ip
from app.core.config import settings
from app.core.exceptions import ScoreClearDisabled
from app.schemas import score as score_schemas
from app.services.score_service import score_service_obj

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/scores",
    tags=["scores"],
    responses={400: {"description": "Invalid score"}}
)


@router.get("", response_model=List[score_schemas.ScoreResponse])
def get_scores(db: Session = Depends(get_db)):
    """
    Get the leaderboard.

    Returns up to 10 scores ranked by fewest moves, ties broken by
    fastest time. Submitter addresses are never included.
    """
    try:
        return score_service_obj.get_top_scores(db)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load scores: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("", response_model=score_schemas.ScoreCreated)
def submit_score(
        score: score_schemas.ScoreCreate,
        db: Session = Depends(get_db),
        client_ip: str = Depends(get_client_ip)
):
    """
    Submit a completed game.

    Validates, in order:
    - name: 1-50 characters after trimming
    - time: 0-3600 seconds
    - moves: at least the optimal solution length (2^N - 1)
    - date: ISO-8601, not in the future
    - at most 5 submissions per hour from one address

    When the leaderboard is full the worst score is evicted.
    """
    try:
        created = score_service_obj.submit_score(db, score.model_dump(), client_ip)
    except SQLAlchemyError as e:
        logger.error(f"Failed to store score: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"id": created.id}


@router.delete("", response_model=score_schemas.ScoresCleared)
def clear_scores(db: Session = Depends(get_db)):
    """
    Delete every stored score.

    Only available when ENABLE_SCORE_CLEAR is set.
    """
    if not settings.ENABLE_SCORE_CLEAR:
        raise ScoreClearDisabled("Clearing scores is disabled")
    try:
        deleted = score_service_obj.clear_scores(db)
    except SQLAlchemyError as e:
        logger.error(f"Failed to clear scores: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"message": "All scores cleared", "deleted": deleted}
