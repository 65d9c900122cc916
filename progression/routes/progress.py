from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from progression.database import get_db
from progression.errors import require_id
from progression.schemas.progress import ChainState
from progression.services import unlock_service

router = APIRouter(prefix="/api/characters", tags=["progress"])


@router.get("", response_model=ChainState)
async def chain_progress(
    member_id: Optional[str] = Query(None, alias="memberId"),
    team_id: Optional[str] = Query(None, alias="teamId"),
    db: AsyncSession = Depends(get_db)
):
    """Состояние всей цепочки персонажей: открыт, пройден, средние баллы"""
    member_id = require_id(member_id, "memberId")
    return await unlock_service.evaluate_chain(db, member_id, team_id)
