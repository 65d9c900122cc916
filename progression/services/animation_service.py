import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.config import get_settings
from progression.database import dialect_insert
from progression.errors import require_pair
from progression.models.animation import UnlockAnimationShown
from progression.services import unlock_service

settings = get_settings()
logger = logging.getLogger(__name__)


async def is_animation_shown(db: AsyncSession, member_id: str, character_name: str) -> bool:
    member_id, character_name = require_pair(member_id, character_name)

    result = await db.execute(
        select(UnlockAnimationShown.id).where(
            UnlockAnimationShown.member_id == member_id,
            UnlockAnimationShown.character_name == character_name
        )
    )
    return result.first() is not None


async def is_unlocked(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    team_id: Optional[str] = None,
    chain: Optional[List[str]] = None
) -> bool:
    chain = list(chain or settings.CHARACTER_CHAIN)
    member_id, character_name = require_pair(member_id, character_name, chain)

    state = await unlock_service.evaluate_chain(db, member_id, team_id, chain)
    return any(c.name == character_name and c.unlocked for c in state.characters)


async def should_show_unlock_animation(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    team_id: Optional[str] = None,
    chain: Optional[List[str]] = None
) -> bool:
    """
    Показать анимацию, если она ещё не отмечена и персонаж открыт

    Два поллера, прочитавшие статус до отметки, оба получат True;
    повторный показ отсекает клиент.
    """
    if await is_animation_shown(db, member_id, character_name):
        return False
    return await is_unlocked(db, member_id, character_name, team_id, chain)


async def mark_animation_shown(db: AsyncSession, member_id: str, character_name: str) -> None:
    """Отметить анимацию как показанную (повторный вызов сохраняет первый shown_at)"""
    member_id, character_name = require_pair(member_id, character_name)

    stmt = (
        dialect_insert(db, UnlockAnimationShown)
        .values(member_id=member_id, character_name=character_name, shown_at=datetime.utcnow())
        .on_conflict_do_nothing(index_elements=["member_id", "character_name"])
    )
    result = await db.execute(stmt)
    await db.commit()

    if result.rowcount:
        logger.info("Unlock animation shown: member=%s character=%s", member_id, character_name)
