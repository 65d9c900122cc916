"""
Открытие персонажей в упорядоченной цепочке.

Первый персонаж открыт всегда. Каждый следующий открывается, когда предыдущий
достиг цели: общая оценка не ниже порога на полном окне сессий. Отсутствующие
данные ничего не открывают.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from progression.config import get_settings
from progression.errors import require_id
from progression.models.completion import ChallengeCompletion
from progression.schemas.goals import GoalConfig
from progression.schemas.metrics import AggregateMetrics
from progression.schemas.progress import CharacterState, ChainState
from progression.services import goal_service, metrics_service

settings = get_settings()
logger = logging.getLogger(__name__)


def meets_goal(metrics: Optional[AggregateMetrics], goals: Optional[GoalConfig]) -> bool:
    """Условие освоения (включительно и по оценке, и по числу сессий)"""
    if metrics is None or goals is None:
        return False
    return (
        metrics.overall_performance >= goals.threshold and
        metrics.total_calls >= goals.window_size
    )


def compute_unlock_state(
    chain: Sequence[str],
    metrics_by_character: Mapping[str, Optional[AggregateMetrics]],
    goals: Optional[GoalConfig]
) -> Dict[str, bool]:
    """Один проход по цепочке: персонажа открывают метрики предыдущего"""
    state: Dict[str, bool] = {}
    previous = None
    for position, character in enumerate(chain):
        if position == 0:
            state[character] = True
        else:
            state[character] = meets_goal(metrics_by_character.get(previous), goals)
        previous = character
    return state


async def evaluate_chain(
    db: AsyncSession,
    member_id: str,
    team_id: Optional[str] = None,
    chain: Optional[List[str]] = None
) -> ChainState:
    """
    Текущее состояние всей цепочки для ученика

    Ошибка хранилища при чтении целей или одного персонажа делает эту часть
    закрытой, а не роняет всю оценку.
    """
    member_id = require_id(member_id, "memberId")
    chain = list(chain or settings.CHARACTER_CHAIN)

    goals: Optional[GoalConfig] = None
    try:
        goals = await goal_service.get_goals(db, team_id)
    except SQLAlchemyError:
        logger.warning("Goal lookup failed for team=%s, treating chain as locked", team_id, exc_info=True)
        await db.rollback()

    metrics_by_character: Dict[str, Optional[AggregateMetrics]] = {}
    for character in chain:
        metrics_by_character[character] = None
        if goals is None:
            continue
        try:
            metrics_by_character[character] = await metrics_service.aggregate(
                db, member_id, character, goals.window_size
            )
        except SQLAlchemyError:
            logger.warning(
                "Aggregate failed for member=%s character=%s, treating as not met",
                member_id, character, exc_info=True
            )
            await db.rollback()

    completed = set()
    try:
        result = await db.execute(
            select(ChallengeCompletion.character_name).where(
                ChallengeCompletion.member_id == member_id,
                ChallengeCompletion.character_name.in_(chain)
            )
        )
        completed = set(result.scalars().all())
    except SQLAlchemyError:
        logger.warning("Completion lookup failed for member=%s", member_id, exc_info=True)
        await db.rollback()

    unlocked = compute_unlock_state(chain, metrics_by_character, goals)

    return ChainState(
        member_id=member_id,
        team_id=team_id,
        goals=goals,
        characters=[
            CharacterState(
                name=character,
                position=position,
                unlocked=unlocked[character],
                completed=character in completed,
                metrics=metrics_by_character[character],
                loading=metrics_by_character[character] is None
            )
            for position, character in enumerate(chain)
        ]
    )
