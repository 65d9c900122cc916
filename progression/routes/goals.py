from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from progression.database import get_db
from progression.schemas.goals import GoalConfig, GoalUpdate
from progression.services import goal_service

router = APIRouter(prefix="/api/performance-goals", tags=["goals"])


@router.get("", response_model=GoalConfig)
async def get_goals(
    team_id: Optional[str] = Query(None, alias="teamId"),
    db: AsyncSession = Depends(get_db)
):
    """Цели команды (или значения по умолчанию)"""
    return await goal_service.get_goals(db, team_id)


@router.put("", response_model=GoalConfig)
async def update_goals(payload: GoalUpdate, db: AsyncSession = Depends(get_db)):
    return await goal_service.set_goals(
        db,
        payload.team_id,
        window_size=payload.past_calls_count,
        threshold=payload.overall_performance_goal
    )
