"""
Журнал сессий и скользящие метрики.

Каждая завершённая тренировка добавляет одну строку CharacterInteraction.
Агрегат не хранится: он пересчитывается по последним N строкам при каждом
запросе и поэтому не расходится с журналом.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.errors import ValidationError, require_pair
from progression.models.interaction import CharacterInteraction, SCORE_FIELDS
from progression.schemas.metrics import AggregateMetrics, InteractionScores

logger = logging.getLogger(__name__)


def _round_half_up(total: Decimal, count: int) -> int:
    return int((total / count).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


async def record_interaction(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    scores: InteractionScores,
    team_id: Optional[str] = None,
    session_date: Optional[datetime] = None
) -> CharacterInteraction:
    """Добавить результат сессии в журнал"""
    member_id, character_name = require_pair(member_id, character_name)

    interaction = CharacterInteraction(
        member_id=member_id,
        team_id=team_id,
        character_name=character_name,
        session_date=session_date or datetime.utcnow(),
        **scores.model_dump()
    )
    db.add(interaction)
    await db.commit()
    await db.refresh(interaction)

    logger.info(
        "Recorded session for member=%s character=%s overall=%s",
        member_id, character_name, scores.overall_performance
    )
    return interaction


async def aggregate(
    db: AsyncSession,
    member_id: str,
    character_name: str,
    window_size: int
) -> AggregateMetrics:
    """
    Скользящее среднее по последним сессиям ученика с персонажем

    Args:
        db: Сессия БД
        member_id: ID ученика от хоста
        character_name: Персонаж из цепочки
        window_size: Сколько последних сессий усреднять

    Returns:
        AggregateMetrics, где каждая оценка округлена half-up отдельно, а
        total_calls равен числу найденных сессий. Без истории все поля нулевые.
    """
    member_id, character_name = require_pair(member_id, character_name)
    if window_size is None or window_size < 1:
        raise ValidationError("window_size must be a positive integer")

    columns = [getattr(CharacterInteraction, field) for field in SCORE_FIELDS]
    result = await db.execute(
        select(*columns)
        .where(
            CharacterInteraction.member_id == member_id,
            CharacterInteraction.character_name == character_name
        )
        .order_by(CharacterInteraction.session_date.desc(), CharacterInteraction.id.desc())
        .limit(window_size)
    )
    rows = result.all()

    if not rows:
        return AggregateMetrics()

    totals = {field: Decimal(0) for field in SCORE_FIELDS}
    for row in rows:
        for field, value in zip(SCORE_FIELDS, row):
            # str() keeps 84.5 as 84.5 instead of its binary expansion
            totals[field] += Decimal(str(value or 0))

    count = len(rows)
    return AggregateMetrics(
        total_calls=count,
        **{field: _round_half_up(total, count) for field, total in totals.items()}
    )
