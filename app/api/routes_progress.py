import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_async_session
from app.models.progress import AnswerSubmit, AnswerResult, CompletionResult, CourseProgress
from app.services import answer_service, progress_service

logger = logging.getLogger("routes_progress")

router = APIRouter(tags=["Progress"])


@router.get("/progress/{user_id}/course/{course_id}", response_model=CourseProgress)
async def get_course_progress(user_id: int, course_id: int,
                              session: AsyncSession = Depends(get_async_session)):
    try:
        progress = await progress_service.get_course_progress(user_id, course_id, session)
        return {"progress": progress}
    except Exception:
        logger.exception(f"Error fetching progress for user {user_id} course {course_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch progress")


@router.post("/progress/{user_id}/lesson/{lesson_id}/complete", response_model=CompletionResult)
async def complete_lesson(user_id: int, lesson_id: int,
                          session: AsyncSession = Depends(get_async_session)):
    try:
        await progress_service.mark_completed(user_id, lesson_id, session)
        return {"success": True}
    except Exception:
        logger.exception(f"Error updating progress for user {user_id} lesson {lesson_id}")
        raise HTTPException(status_code=500, detail="Failed to update progress")


@router.post("/answers", response_model=AnswerResult)
async def submit_answer(data: AnswerSubmit, session: AsyncSession = Depends(get_async_session)):
    try:
        return await answer_service.submit_answer(data.userId, data.exerciseId, data.answer, session)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"Error submitting answer for exercise {data.exerciseId}")
        raise HTTPException(status_code=500, detail="Failed to submit answer")
