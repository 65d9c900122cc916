from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime
from datetime import datetime
from progression.database import Base


class TeamSettings(Base):
    __tablename__ = 'team_settings'

    team_id: Mapped[str] = mapped_column(String, primary_key=True)
    past_calls_count: Mapped[int] = mapped_column(Integer, nullable=False)  # window size N
    overall_performance_goal: Mapped[int] = mapped_column(Integer, nullable=False)  # threshold T
    last_updated: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
