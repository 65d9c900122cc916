from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Float, DateTime, Index
from datetime import datetime
from typing import Optional
from progression.database import Base

SCORE_FIELDS = (
    "overall_performance",
    "engagement",
    "objection_handling",
    "information_gathering",
    "program_explanation",
    "closing_skills",
    "overall_effectiveness",
)


class CharacterInteraction(Base):
    """Одна завершённая сессия. Только добавление, удаляется лишь сбросом"""
    __tablename__ = 'character_interactions'
    __table_args__ = (
        Index('ix_interaction_member_character_date', 'member_id', 'character_name', 'session_date'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String, nullable=False)
    team_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    character_name: Mapped[str] = mapped_column(String, nullable=False)
    overall_performance: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    engagement: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    objection_handling: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    information_gathering: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    program_explanation: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    closing_skills: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    overall_effectiveness: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    session_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
