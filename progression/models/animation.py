from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from datetime import datetime
from progression.database import Base


class UnlockAnimationShown(Base):
    __tablename__ = 'unlock_animations_shown'
    __table_args__ = (
        UniqueConstraint('member_id', 'character_name', name='uix_animation_member_character'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    character_name: Mapped[str] = mapped_column(String, nullable=False)
    shown_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
