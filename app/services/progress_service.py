import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import select, and_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Lesson, LessonProgress

logger = logging.getLogger("progress_service")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_insert(session: AsyncSession):
    dialect = session.bind.dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"Upsert is not supported for dialect '{dialect}'")


async def mark_completed(user_id: int, lesson_id: int, session: AsyncSession) -> None:
    """Отмечает урок пройденным одним INSERT ... ON CONFLICT DO UPDATE."""
    now = datetime.utcnow()
    insert = _upsert_insert(session)
    stmt = insert(LessonProgress).values(
        user_id=user_id,
        lesson_id=lesson_id,
        completed=True,
        completion_date=now,
        watch_duration_seconds=0,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "lesson_id"],
        set_={"completed": True, "completion_date": now},
    )
    await session.execute(stmt)
    await session.commit()
    logger.info(f"User {user_id} completed lesson {lesson_id}")


async def get_course_progress(user_id: int, course_id: int, session: AsyncSession) -> List[Dict[str, Any]]:
    # LEFT JOIN: уроки без записи прогресса считаются непройденными
    result = await session.execute(
        select(Lesson.id, LessonProgress.completed, LessonProgress.completion_date)
        .outerjoin(
            LessonProgress,
            and_(LessonProgress.lesson_id == Lesson.id, LessonProgress.user_id == user_id),
        )
        .filter(Lesson.course_id == course_id)
        .order_by(Lesson.order_index, Lesson.id)
    )
    return [
        {
            "lessonId": lesson_id,
            "completed": bool(completed),
            "completionDate": completion_date,
        }
        for lesson_id, completed, completion_date in result.all()
    ]
