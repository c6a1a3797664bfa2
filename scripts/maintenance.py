#!/usr/bin/env python3
"""
Operator commands for the high score store.

Usage:
    python scripts/maintenance.py clear-scores
    python scripts/maintenance.py stats
"""

import sys
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.orm import sessionmaker
from app.core.database import engine
from app.core.startup import initialize_database
from app.services.score_service import score_service_obj

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def clear_scores(session_factory=SessionLocal):
    """Delete every stored score."""
    with session_factory() as db:
        try:
            deleted = score_service_obj.clear_scores(db)
            logger.info(f"Removed {deleted} score(s)")
            return True
        except Exception as e:
            logger.error(f"Clearing scores failed: {e}")
            return False


def show_stats(session_factory=SessionLocal):
    """Log the record count and the best and worst stored scores."""
    with session_factory() as db:
        try:
            stats = score_service_obj.get_store_stats(db)
        except Exception as e:
            logger.error(f"Failed to read score statistics: {e}")
            return False

    logger.info("=== SCORE STORE ===")
    logger.info(f"  Scores stored: {stats['total_scores']} / {stats['capacity']}")
    for label in ("best", "worst"):
        score = stats[label]
        if score is not None:
            logger.info(f"  {label.capitalize()}: {score.name} - {score.moves} moves, {score.time}s")
    return True


COMMANDS = {
    "clear-scores": clear_scores,
    "stats": show_stats,
}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1 or argv[0] not in COMMANDS:
        print(__doc__)
        print(f"Available commands: {', '.join(COMMANDS)}")
        return 1

    initialize_database()
    return 0 if COMMANDS[argv[0]]() else 1


if __name__ == "__main__":
    sys.exit(main())
