from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Boolean, Text, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now())

    progress = relationship("LessonProgress", back_populates="user")
    answers = relationship("AnswerAttempt", back_populates="user")


# Каталог курсов принадлежит другому сервису, здесь только чтение
class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, default=0)

    lessons = relationship("Lesson", back_populates="course")


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(Text, nullable=True)
    duration_seconds = Column(Integer, default=0)
    order_index = Column(Integer, default=0)

    course = relationship("Course", back_populates="lessons")
    exercises = relationship("Exercise", back_populates="lesson")


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False)  # multiple_choice, short_answer, essay
    points = Column(Integer, default=0)
    order_index = Column(Integer, default=0)

    lesson = relationship("Lesson", back_populates="exercises")
    options = relationship("ExerciseOption", back_populates="exercise")


class ExerciseOption(Base):
    __tablename__ = "exercise_options"

    id = Column(Integer, primary_key=True, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, default=0)

    exercise = relationship("Exercise", back_populates="options")


class LessonProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_user_progress_user_lesson"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    completion_date = Column(DateTime, nullable=True)
    watch_duration_seconds = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="progress")


# Каждая попытка хранится отдельно, без уникальности
class AnswerAttempt(Base):
    __tablename__ = "user_answers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), nullable=False)
    answer = Column(Text, nullable=True)
    correct = Column(Boolean, nullable=False, default=False)
    attempted_at = Column(DateTime, nullable=False, default=func.now())

    user = relationship("User", back_populates="answers")
