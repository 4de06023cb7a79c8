"""
Pytest configuration and shared fixtures.

Tests run against an in-memory SQLite database (aiosqlite, StaticPool) that
replaces PostgreSQL through a dependency override on the FastAPI app.
"""
import os

# До импорта app: конфиг читается при импорте
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CREATE_TABLES"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import main  # noqa: E402
from app.db.database import get_async_session, init_models  # noqa: E402
from app.db.models import Course, Lesson, Exercise, ExerciseOption  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(anyio_backend):
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def _override_session():
        async with session_factory() as s:
            yield s

    main.app.dependency_overrides[get_async_session] = _override_session
    async with httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test") as c:
        yield c
    main.app.dependency_overrides.clear()


async def seed_catalog(session: AsyncSession) -> dict:
    """One course with three lessons and a mix of exercise types.

    Lesson order_index deliberately differs from insertion order.
    """
    course = Course(title="Algebra", slug="algebra", order_index=1)
    other_course = Course(title="Geometry", slug="geometry", order_index=2)
    session.add_all([course, other_course])
    await session.flush()

    intro = Lesson(course_id=course.id, title="Intro", slug="intro", order_index=1)
    advanced = Lesson(course_id=course.id, title="Advanced", slug="advanced", order_index=3)
    basics = Lesson(course_id=course.id, title="Basics", slug="basics", order_index=2)
    foreign = Lesson(course_id=other_course.id, title="Angles", slug="angles", order_index=1)
    session.add_all([intro, advanced, basics, foreign])
    await session.flush()

    mc_a = Exercise(lesson_id=intro.id, question="2 + 2?", question_type="multiple_choice", points=10)
    mc_b = Exercise(lesson_id=intro.id, question="3 + 3?", question_type="multiple_choice", points=10)
    mc_c = Exercise(lesson_id=basics.id, question="x + 1 = 2?", question_type="multiple_choice", points=5)
    short = Exercise(lesson_id=basics.id, question="Define a ring", question_type="short_answer", points=7)
    essay = Exercise(lesson_id=advanced.id, question="Why algebra?", question_type="essay", points=20)
    session.add_all([mc_a, mc_b, mc_c, short, essay])
    await session.flush()

    a_right = ExerciseOption(exercise_id=mc_a.id, text="4", is_correct=True)
    a_wrong = ExerciseOption(exercise_id=mc_a.id, text="5", is_correct=False)
    b_right = ExerciseOption(exercise_id=mc_b.id, text="6", is_correct=True)
    b_wrong = ExerciseOption(exercise_id=mc_b.id, text="7", is_correct=False)
    c_right = ExerciseOption(exercise_id=mc_c.id, text="1", is_correct=True)
    session.add_all([a_right, a_wrong, b_right, b_wrong, c_right])
    await session.commit()

    return {
        "course_id": course.id,
        "other_course_id": other_course.id,
        "lessons": [intro.id, basics.id, advanced.id],  # в порядке order_index
        "foreign_lesson": foreign.id,
        "mc_a": mc_a.id,
        "mc_b": mc_b.id,
        "mc_c": mc_c.id,
        "short": short.id,
        "essay": essay.id,
        "a_right": a_right.id,
        "a_wrong": a_wrong.id,
        "b_right": b_right.id,
        "b_wrong": b_wrong.id,
        "c_right": c_right.id,
    }


@pytest.fixture
async def catalog(session_factory):
    async with session_factory() as s:
        return await seed_catalog(s)


async def signup(client: httpx.AsyncClient, username="alice", email="alice@example.com", password="secret123"):
    r = await client.post("/api/auth/signup", json={"username": username, "email": email, "password": password})
    return r


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
