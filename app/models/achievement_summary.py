# app/models/achievement_summary.py
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class AchievementSummary(Base):
    """Aggregate statistics derived from a user's certificates."""

    __tablename__ = "achievement_summaries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    total_certificates = Column(Integer, nullable=False, default=0)
    specializations = Column(JSON, nullable=False, default=list)
    total_learning_hours = Column(Integer, nullable=False, default=0)
    achievement_level = Column(String(20), nullable=False, default="Beginner")

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<AchievementSummary(user_id={self.user_id}, total={self.total_certificates}, level={self.achievement_level})>"
