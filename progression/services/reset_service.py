import logging
from typing import Dict

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from progression.errors import require_pair
from progression.models.animation import UnlockAnimationShown
from progression.models.completion import ChallengeCompletion
from progression.models.interaction import CharacterInteraction

logger = logging.getLogger(__name__)


async def reset(db: AsyncSession, member_id: str, character_name: str) -> Dict[str, int]:
    """
    Вернуть пару ученик/персонаж в исходное состояние

    Журнал сессий, запись о завершении и запись об анимации удаляются в одной
    транзакции: либо всё, либо ничего. Повторный сброс ничего не меняет.

    Returns:
        dict: число удалённых строк по таблицам
    """
    member_id, character_name = require_pair(member_id, character_name)

    deleted = {}
    try:
        for key, model in (
            ("interactions", CharacterInteraction),
            ("completion", ChallengeCompletion),
            ("animation", UnlockAnimationShown),
        ):
            result = await db.execute(
                delete(model).where(
                    model.member_id == member_id,
                    model.character_name == character_name
                )
            )
            deleted[key] = result.rowcount or 0
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Reset rolled back for member=%s character=%s", member_id, character_name)
        raise

    logger.info("Reset member=%s character=%s deleted=%s", member_id, character_name, deleted)
    return deleted
