import uuid

import pytest

from teamtemp.core.errors import InvalidAnswer, InvalidState, NotFound
from teamtemp.schemas.respond import AnswerIn
from teamtemp.services.composer import close_round, compose_round
from teamtemp.services.submissions import record_submission
from teamtemp.services.teams import update_settings


@pytest.fixture
def open_round(store, team, clock):
    return compose_round(store, team.id, now=clock())


def _answers(store, round_, value=2):
    return [AnswerIn(round_question_id=rq.id, value=value) for rq in store.list_round_questions(round_.id)]


def test_record_submission(store, open_round):
    sub = record_submission(store, open_round.id, _answers(store, open_round), "  Good sprint  ")

    assert sub.round_id == open_round.id
    assert store.count_submissions(open_round.id) == 1
    (ft,) = store.list_free_texts(open_round.id)
    assert ft.text == "Good sprint"
    values = store.answer_values(open_round.id)
    assert all(v == [2] for v in values.values())


def test_blank_free_text_is_not_stored(store, open_round):
    record_submission(store, open_round.id, _answers(store, open_round), "   ")
    assert store.list_free_texts(open_round.id) == []


def test_free_text_dropped_when_disabled(store, team, open_round):
    update_settings(store, team.id, allow_free_text=False)
    record_submission(store, open_round.id, _answers(store, open_round), "Something")

    assert store.count_submissions(open_round.id) == 1
    assert store.list_free_texts(open_round.id) == []


def test_unknown_round(store):
    with pytest.raises(NotFound):
        record_submission(store, uuid.uuid4(), [AnswerIn(round_question_id=uuid.uuid4(), value=1)])


def test_closed_round_rejects(store, open_round, clock):
    close_round(store, open_round.id, now=clock())
    with pytest.raises(InvalidState):
        record_submission(store, open_round.id, _answers(store, open_round))
    assert store.count_submissions(open_round.id) == 0


def test_empty_answers(store, open_round):
    with pytest.raises(InvalidAnswer):
        record_submission(store, open_round.id, [])


def test_foreign_question_rejected(store, open_round):
    with pytest.raises(InvalidAnswer, match="not part of this round"):
        record_submission(store, open_round.id, [AnswerIn(round_question_id=uuid.uuid4(), value=2)])


def test_duplicate_question_rejected(store, open_round):
    rq = store.list_round_questions(open_round.id)[0]
    answers = [AnswerIn(round_question_id=rq.id, value=1), AnswerIn(round_question_id=rq.id, value=3)]
    with pytest.raises(InvalidAnswer, match="answered twice"):
        record_submission(store, open_round.id, answers)
    assert store.count_submissions(open_round.id) == 0


@pytest.mark.parametrize("value", [0, 4, -1])
def test_value_outside_round_scale(store, open_round, value):
    with pytest.raises(InvalidAnswer):
        record_submission(store, open_round.id, _answers(store, open_round, value))


def test_value_checked_against_round_scale_not_team(store, team, open_round):
    update_settings(store, team.id, scale_max=5)

    with pytest.raises(InvalidAnswer):
        record_submission(store, open_round.id, _answers(store, open_round, 5))
    record_submission(store, open_round.id, _answers(store, open_round, 3))
    assert store.count_submissions(open_round.id) == 1
