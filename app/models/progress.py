from pydantic import BaseModel
from typing import List, Optional, Union
from datetime import datetime


class LessonProgressItem(BaseModel):
    lessonId: int
    completed: bool
    completionDate: Optional[datetime] = None


class CourseProgress(BaseModel):
    progress: List[LessonProgressItem]


class CompletionResult(BaseModel):
    success: bool


class AnswerSubmit(BaseModel):
    userId: int
    exerciseId: int
    answer: Optional[Union[int, str]] = None


class AnswerResult(BaseModel):
    correct: bool
