from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, JSON, UniqueConstraint
from datetime import datetime
from progression.database import Base


class ChallengeCompletion(Base):
    """
    Пишется один раз, когда скользящее среднее впервые достигает цели.

    Снимки хранят метрики и цели на тот момент; последующие (возможно,
    более низкие) значения эту строку не меняют.
    """
    __tablename__ = 'challenge_completions'
    __table_args__ = (
        UniqueConstraint('member_id', 'character_name', name='uix_completion_member_character'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    character_name: Mapped[str] = mapped_column(String, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    metrics_snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
    goals_snapshot: Mapped[dict] = mapped_column(JSON, nullable=False)
