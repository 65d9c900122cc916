from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from progression.database import get_db
from progression.config import get_settings
from progression.errors import require_pair
from progression.schemas.metrics import AggregateMetrics, InteractionCreate
from progression.services import goal_service, metrics_service

router = APIRouter(prefix="/api/character-performance", tags=["performance"])
settings = get_settings()


@router.get("", response_model=AggregateMetrics)
async def get_performance(
    member_id: Optional[str] = Query(None, alias="memberId"),
    character_name: Optional[str] = Query(None, alias="characterName"),
    team_id: Optional[str] = Query(None, alias="teamId"),
    db: AsyncSession = Depends(get_db)
):
    """Средние баллы за последние N звонков"""
    member_id, character_name = require_pair(member_id, character_name, settings.CHARACTER_CHAIN)

    goals = await goal_service.get_goals(db, team_id)
    return await metrics_service.aggregate(db, member_id, character_name, goals.window_size)


@router.post("", response_model=AggregateMetrics)
async def record_performance(
    payload: InteractionCreate,
    db: AsyncSession = Depends(get_db)
):
    """Записать завершённый звонок и вернуть обновлённые средние"""
    member_id, character_name = require_pair(
        payload.member_id, payload.character_name, settings.CHARACTER_CHAIN
    )

    await metrics_service.record_interaction(
        db, member_id, character_name, payload.metrics, team_id=payload.team_id
    )

    goals = await goal_service.get_goals(db, payload.team_id)
    return await metrics_service.aggregate(db, member_id, character_name, goals.window_size)
