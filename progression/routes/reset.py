from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from progression.database import get_db
from progression.config import get_settings
from progression.errors import require_pair
from progression.schemas.progress import PairRequest, ResetResult
from progression.services import reset_service

router = APIRouter(prefix="/api/reset-challenge", tags=["reset"])
settings = get_settings()


@router.post("", response_model=ResetResult)
async def reset_challenge(payload: PairRequest, db: AsyncSession = Depends(get_db)):
    """Сбросить прогресс по персонажу: звонки, прохождение, анимацию"""
    member_id, character_name = require_pair(
        payload.member_id, payload.character_name, settings.CHARACTER_CHAIN
    )

    deleted = await reset_service.reset(db, member_id, character_name)
    return ResetResult(deleted=deleted)
