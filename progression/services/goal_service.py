import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from progression.config import get_settings
from progression.database import dialect_insert
from progression.errors import require_id
from progression.models.team_settings import TeamSettings
from progression.schemas.goals import GoalConfig

settings = get_settings()
logger = logging.getLogger(__name__)


def default_goals(team_id: Optional[str] = None) -> GoalConfig:
    return GoalConfig(
        team_id=team_id,
        window_size=settings.DEFAULT_WINDOW_SIZE,
        threshold=settings.DEFAULT_MASTERY_THRESHOLD
    )


def _to_config(row: TeamSettings) -> GoalConfig:
    return GoalConfig(
        team_id=row.team_id,
        window_size=row.past_calls_count,
        threshold=row.overall_performance_goal,
        last_updated=row.last_updated
    )


async def get_goals(db: AsyncSession, team_id: Optional[str]) -> GoalConfig:
    """Цели команды (или значения по умолчанию, если команда их не сохраняла)"""
    if not team_id or not team_id.strip():
        return default_goals()

    # populate_existing: rows written by the upsert bypass the identity map
    result = await db.execute(
        select(TeamSettings)
        .where(TeamSettings.team_id == team_id.strip())
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()

    if not row:
        return default_goals(team_id.strip())
    return _to_config(row)


async def set_goals(
    db: AsyncSession,
    team_id: str,
    window_size: Optional[int] = None,
    threshold: Optional[int] = None
) -> GoalConfig:
    """
    Создать или обновить цели команды одним запросом

    Поля со значением None сохраняют текущее значение (при первой записи
    берётся значение по умолчанию). Параллельные записи для одной команды
    не перемешиваются: при upsert побеждает последняя.
    """
    team_id = require_id(team_id, "teamId")
    now = datetime.utcnow()

    stmt = dialect_insert(db, TeamSettings).values(
        team_id=team_id,
        past_calls_count=window_size if window_size is not None else settings.DEFAULT_WINDOW_SIZE,
        overall_performance_goal=threshold if threshold is not None else settings.DEFAULT_MASTERY_THRESHOLD,
        last_updated=now
    )
    updates = {"last_updated": now}
    if window_size is not None:
        updates["past_calls_count"] = stmt.excluded.past_calls_count
    if threshold is not None:
        updates["overall_performance_goal"] = stmt.excluded.overall_performance_goal
    stmt = stmt.on_conflict_do_update(index_elements=["team_id"], set_=updates)

    await db.execute(stmt)
    await db.commit()

    logger.info("Saved goals for team=%s window=%s threshold=%s", team_id, window_size, threshold)
    return await get_goals(db, team_id)
