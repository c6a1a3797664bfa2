from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, Index

from app.core.database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Score(Base):
    __tablename__ = "scores"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    time = Column(Float, nullable=False)  # seconds
    moves = Column(Integer, nullable=False)
    date = Column(DateTime, nullable=False)  # client submission timestamp, UTC
    ip_address = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_scores_ranking', 'moves', 'time'),
        Index('idx_scores_origin_window', 'ip_address', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<Score id={self.id} name={self.name!r} moves={self.moves} time={self.time}>"
