from typing import Any, Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import AnswerAttempt, Exercise, LessonProgress


async def compute_stats(user_id: int, session: AsyncSession) -> Dict[str, Any]:
    lessons_completed = await session.scalar(
        select(func.count())
        .select_from(LessonProgress)
        .filter(LessonProgress.user_id == user_id, LessonProgress.completed.is_(True))
    )

    exercises_attempted = await session.scalar(
        select(func.count())
        .select_from(AnswerAttempt)
        .filter(AnswerAttempt.user_id == user_id)
    )

    correct_answers = await session.scalar(
        select(func.count())
        .select_from(AnswerAttempt)
        .filter(AnswerAttempt.user_id == user_id, AnswerAttempt.correct.is_(True))
    )

    # Очки за каждую верную попытку, повторные тоже считаются
    points_earned = await session.scalar(
        select(func.coalesce(func.sum(Exercise.points), 0))
        .select_from(AnswerAttempt)
        .join(Exercise, Exercise.id == AnswerAttempt.exercise_id)
        .filter(AnswerAttempt.user_id == user_id, AnswerAttempt.correct.is_(True))
    )

    exercises_attempted = exercises_attempted or 0
    correct_answers = correct_answers or 0
    if exercises_attempted > 0:
        accuracy = f"{correct_answers / exercises_attempted * 100:.1f}"
    else:
        accuracy = 0

    return {
        "lessonsCompleted": lessons_completed or 0,
        "exercisesAttempted": exercises_attempted,
        "correctAnswers": correct_answers,
        "accuracy": accuracy,
        "pointsEarned": int(points_earned or 0),
    }
