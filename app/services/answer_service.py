import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import AnswerAttempt, Exercise, ExerciseOption

logger = logging.getLogger("answer_service")

MULTIPLE_CHOICE = "multiple_choice"
# id вариантов хранятся в INTEGER (int4)
MAX_OPTION_ID = 2 ** 31 - 1


async def get_exercise(session: AsyncSession, exercise_id: int) -> Exercise | None:
    result = await session.execute(select(Exercise).filter(Exercise.id == exercise_id))
    return result.scalars().first()


async def get_option(session: AsyncSession, option_id: int) -> ExerciseOption | None:
    result = await session.execute(select(ExerciseOption).filter(ExerciseOption.id == option_id))
    return result.scalars().first()


def _parse_option_id(answer) -> Optional[int]:
    if isinstance(answer, bool):
        return None
    if isinstance(answer, int):
        option_id = answer
    else:
        try:
            option_id = int(str(answer).strip())
        except (TypeError, ValueError):
            return None
    if not 0 < option_id <= MAX_OPTION_ID:
        return None
    return option_id


async def grade(exercise: Exercise, answer, session: AsyncSession) -> bool:
    """Проверяет ответ. Автоматически оцениваются только multiple_choice,
    остальные типы всегда засчитываются как неверные."""
    if exercise.question_type != MULTIPLE_CHOICE:
        return False

    option_id = _parse_option_id(answer)
    if option_id is None:
        return False

    option = await get_option(session, option_id)
    return bool(option and option.exercise_id == exercise.id and option.is_correct)


async def submit_answer(
    user_id: int, exercise_id: int, answer: Union[int, str, None], session: AsyncSession
) -> Dict[str, Any]:
    exercise = await get_exercise(session, exercise_id)
    if not exercise:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")

    is_correct = await grade(exercise, answer, session)

    session.add(AnswerAttempt(
        user_id=user_id,
        exercise_id=exercise_id,
        answer=None if answer is None else str(answer),
        correct=is_correct,
        attempted_at=datetime.utcnow(),
    ))
    await session.commit()

    logger.info(f"User {user_id} answered exercise {exercise_id}: correct={is_correct}")
    return {"correct": is_correct}
