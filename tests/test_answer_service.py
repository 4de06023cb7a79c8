"""
AnswerGrader: grading rules and append-only attempts.
"""
import pytest
from fastapi import HTTPException
from sqlalchemy import select

from app.db.models import AnswerAttempt
from app.services import answer_service


pytestmark = pytest.mark.anyio


async def _attempts(session, user_id):
    result = await session.execute(
        select(AnswerAttempt.exercise_id, AnswerAttempt.answer, AnswerAttempt.correct)
        .filter(AnswerAttempt.user_id == user_id)
        .order_by(AnswerAttempt.id)
    )
    return result.all()


async def test_correct_option_is_graded_correct(session, catalog):
    result = await answer_service.submit_answer(1, catalog["mc_a"], catalog["a_right"], session)
    assert result == {"correct": True}


async def test_option_id_as_string_is_accepted(session, catalog):
    result = await answer_service.submit_answer(1, catalog["mc_a"], str(catalog["a_right"]), session)
    assert result == {"correct": True}


async def test_wrong_option_is_graded_incorrect(session, catalog):
    result = await answer_service.submit_answer(1, catalog["mc_a"], catalog["a_wrong"], session)
    assert result == {"correct": False}


async def test_correct_option_of_another_exercise_is_incorrect(session, catalog):
    result = await answer_service.submit_answer(1, catalog["mc_a"], catalog["b_right"], session)
    assert result == {"correct": False}


@pytest.mark.parametrize("answer", ["4", "not a number", None, 999999, ""])
async def test_unknown_or_unparsable_answers_are_incorrect(session, catalog, answer):
    result = await answer_service.submit_answer(1, catalog["mc_a"], answer, session)
    assert result == {"correct": False}


@pytest.mark.parametrize("key", ["short", "essay"])
async def test_ungraded_types_are_always_incorrect(session, catalog, key):
    # даже если ответ совпадает с id верного варианта
    result = await answer_service.submit_answer(1, catalog[key], catalog["a_right"], session)
    assert result == {"correct": False}


async def test_every_submission_is_recorded(session, catalog):
    await answer_service.submit_answer(1, catalog["mc_a"], catalog["a_wrong"], session)
    await answer_service.submit_answer(1, catalog["mc_a"], catalog["a_right"], session)
    await answer_service.submit_answer(1, catalog["essay"], "Because", session)

    assert await _attempts(session, 1) == [
        (catalog["mc_a"], str(catalog["a_wrong"]), False),
        (catalog["mc_a"], str(catalog["a_right"]), True),
        (catalog["essay"], "Because", False),
    ]


async def test_missing_exercise_is_404_and_not_recorded(session, catalog):
    with pytest.raises(HTTPException) as exc:
        await answer_service.submit_answer(1, 9999, "1", session)
    assert exc.value.status_code == 404
    assert await _attempts(session, 1) == []
