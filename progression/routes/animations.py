from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from progression.database import get_db
from progression.config import get_settings
from progression.errors import require_pair
from progression.schemas.animation import AnimationStatus, AnimationMarked
from progression.schemas.progress import PairRequest
from progression.services import animation_service

router = APIRouter(prefix="/api/unlock-animations", tags=["animations"])
settings = get_settings()


@router.get("", response_model=AnimationStatus)
async def animation_status(
    member_id: Optional[str] = Query(None, alias="memberId"),
    character_name: Optional[str] = Query(None, alias="characterName"),
    team_id: Optional[str] = Query(None, alias="teamId"),
    db: AsyncSession = Depends(get_db)
):
    """Показывали ли уже анимацию разблокировки"""
    member_id, character_name = require_pair(member_id, character_name, settings.CHARACTER_CHAIN)

    shown = await animation_service.is_animation_shown(db, member_id, character_name)
    unlocked = await animation_service.is_unlocked(db, member_id, character_name, team_id)
    return AnimationStatus(shown=shown, unlocked=unlocked, should_show=unlocked and not shown)


@router.post("", response_model=AnimationMarked)
async def animation_shown(payload: PairRequest, db: AsyncSession = Depends(get_db)):
    member_id, character_name = require_pair(
        payload.member_id, payload.character_name, settings.CHARACTER_CHAIN
    )

    await animation_service.mark_animation_shown(db, member_id, character_name)
    return AnimationMarked()
