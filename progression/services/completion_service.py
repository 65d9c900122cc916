"""
Завершение челленджа: NotCompleted -> Completed, назад только через сброс.

Пара отмечается завершённой, как только скользящее среднее достигает цели.
Запись идёт через insert-if-absent по (member_id, character_name): при гонке
появляется ровно одна строка, и все вызывающие читают одну и ту же запись.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.database import dialect_insert
from progression.errors import InvariantViolation, require_pair
from progression.models.completion import ChallengeCompletion
from progression.schemas.completion import CompletionSnapshot, CompletionStatus
from progression.schemas.goals import GoalConfig
from progression.schemas.metrics import AggregateMetrics
from progression.services import goal_service, metrics_service
from progression.services.unlock_service import meets_goal

logger = logging.getLogger(__name__)


async def get_completion(
    db: AsyncSession,
    member_id: str,
    character_name: str
) -> Optional[ChallengeCompletion]:
    """Запись о завершении для пары или None, пока челлендж не пройден"""
    member_id, character_name = require_pair(member_id, character_name)

    result = await db.execute(
        select(ChallengeCompletion).where(
            ChallengeCompletion.member_id == member_id,
            ChallengeCompletion.character_name == character_name
        )
    )
    records = list(result.scalars().all())

    if len(records) > 1:
        logger.critical(
            "Found %d completion records for member=%s character=%s",
            len(records), member_id, character_name
        )
        raise InvariantViolation(
            f"Multiple completion records for {member_id}/{character_name}"
        )
    return records[0] if records else None


async def check_and_mark_completion(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    metrics: AggregateMetrics,
    goals: GoalConfig
) -> Optional[ChallengeCompletion]:
    """
    Отметить пару завершённой, если цель достигнута (не более одного раза)

    Существующая запись возвращается как есть, даже если метрики с тех пор
    упали ниже цели. Иначе вставляется запись с копиями метрик и целей;
    проигравший гонку вызов получает строку победителя.

    Returns:
        Запись о завершении или None, если цель ещё не достигнута.
    """
    member_id, character_name = require_pair(member_id, character_name)

    existing = await get_completion(db, member_id, character_name)
    if existing:
        return existing

    if not meets_goal(metrics, goals):
        return None

    stmt = (
        dialect_insert(db, ChallengeCompletion)
        .values(
            member_id=member_id,
            character_name=character_name,
            completed_at=datetime.utcnow(),
            metrics_snapshot=metrics.model_dump(),
            goals_snapshot=goals.model_dump(mode="json", by_alias=True, exclude={"last_updated"})
        )
        .on_conflict_do_nothing(index_elements=["member_id", "character_name"])
    )
    result = await db.execute(stmt)
    await db.commit()

    if result.rowcount:
        logger.info(
            "Challenge completed: member=%s character=%s overall=%s calls=%s",
            member_id, character_name, metrics.overall_performance, metrics.total_calls
        )
    else:
        logger.debug("Completion for member=%s character=%s already written", member_id, character_name)

    return await get_completion(db, member_id, character_name)


async def mark_complete(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    team_id: Optional[str] = None
) -> Optional[ChallengeCompletion]:
    """Сравнить текущие метрики пары с целями команды и зафиксировать завершение"""
    member_id, character_name = require_pair(member_id, character_name)

    existing = await get_completion(db, member_id, character_name)
    if existing:
        return existing

    goals = await goal_service.get_goals(db, team_id)
    metrics = await metrics_service.aggregate(db, member_id, character_name, goals.window_size)
    return await check_and_mark_completion(db, member_id, character_name, metrics, goals)


def to_status(record: Optional[ChallengeCompletion]) -> CompletionStatus:
    if record is None:
        return CompletionStatus(completed=False)
    return CompletionStatus(
        completed=True,
        snapshot=CompletionSnapshot(
            member_id=record.member_id,
            character_name=record.character_name,
            completed_at=record.completed_at,
            metrics=record.metrics_snapshot,
            goals=record.goals_snapshot
        )
    )
