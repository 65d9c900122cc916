from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from progression.database import get_db
from progression.config import get_settings
from progression.errors import require_pair
from progression.schemas.completion import CompletionStatus
from progression.schemas.progress import MarkCompleteRequest
from progression.services import completion_service

router = APIRouter(prefix="/api", tags=["completion"])
settings = get_settings()


@router.get("/challenge-completion", response_model=CompletionStatus)
async def completion_status(
    member_id: Optional[str] = Query(None, alias="memberId"),
    character_name: Optional[str] = Query(None, alias="characterName"),
    db: AsyncSession = Depends(get_db)
):
    """Пройден ли персонаж, и с какими результатами"""
    member_id, character_name = require_pair(member_id, character_name, settings.CHARACTER_CHAIN)

    record = await completion_service.get_completion(db, member_id, character_name)
    return completion_service.to_status(record)


@router.post("/mark-challenge-complete", response_model=CompletionStatus)
async def mark_challenge_complete(
    payload: MarkCompleteRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Отметить персонажа пройденным, если цель достигнута.

    Safe to call on every poll: the server re-evaluates and never overwrites.
    """
    member_id, character_name = require_pair(
        payload.member_id, payload.character_name, settings.CHARACTER_CHAIN
    )

    record = await completion_service.mark_complete(db, member_id, character_name, payload.team_id)
    return completion_service.to_status(record)
