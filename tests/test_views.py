import uuid

import pytest

from teamtemp.core.errors import NotFound
from teamtemp.services.check_in import CHECK_IN_QUESTIONS, check_in_question
from teamtemp.services.teams import create_team, update_settings
from teamtemp.services.views import (
    build_admin_load,
    build_analytics,
    build_dashboard,
    build_retro,
    list_comments,
)


def test_dashboard_without_rounds(store, team):
    out = build_dashboard(store, team)
    assert out.has_enough_data is False
    assert out.question_cards == []
    assert out.last_round_id is None
    assert out.min_responses == 4


def test_dashboard_hides_rounds_below_floor(store, team, run_round):
    small = run_round(store, team.id, [2, 3])
    out = build_dashboard(store, team)

    assert out.has_enough_data is False
    assert out.question_cards == []
    assert out.last_round_id == small.id


def test_dashboard_cards_and_movers(store, team, run_round):
    first = run_round(store, team.id, [2] * 4)
    second = run_round(store, team.id, [{1: 3, 2: 1, 3: 2, 4: 2, 5: 2}] * 4)
    out = build_dashboard(store, team)

    assert out.has_enough_data is True
    assert out.last_round_id == second.id

    fixed_cards = [c for c in out.question_cards if not c.is_rotating]
    assert len(fixed_cards) == 4
    card = fixed_cards[0]
    assert [p.round_id for p in card.data_points] == [first.id, second.id]
    assert card.data_points[-1].distribution == [0, 0, 4]
    assert card.data_points[-1].norm_avg == 1.0
    assert card.scale_labels == ["Disagree", "Partly", "Agree"]

    assert [d.delta for d in out.increases] == [0.5]
    assert [d.delta for d in out.decreases] == [-0.5]


def test_dashboard_mixed_signals_flag(store, team, run_round):
    run_round(store, team.id, [1, 1, 3, 3])
    card = build_dashboard(store, team).question_cards[0]
    assert card.mixed_signals is True


def test_retro_below_floor(store, team, run_round):
    r = run_round(store, team.id, [2, 2])
    out = build_retro(store, team, r.id)

    assert out.enough_responses is False
    assert out.response_count == 2
    assert out.round_scores == []
    assert out.check_in_question is None


def test_retro_payload(store, team, run_round):
    first = run_round(store, team.id, [3] * 4)
    update_settings(store, team.id, scale_max=5)
    second = run_round(store, team.id, [2] * 4, free_texts=["Too many meetings"])

    out = build_retro(store, team, second.id)
    assert out.enough_responses is True
    assert out.previous_round_id == first.id
    assert out.scale_changed is True
    assert out.scale_max == 5
    assert out.check_in_question == check_in_question(second.id)
    assert [f.text for f in out.free_texts] == ["Too many meetings"]
    assert out.questions_to_ask and out.experiments

    fixed_scores = out.round_scores[:4]
    # 3/3 -> 1.0, 2/5 -> 0.25
    assert all(s.delta == -0.75 for s in fixed_scores)
    assert len(out.drops) == 3
    assert out.celebration is None


def test_retro_first_round_has_no_previous(store, team, run_round):
    r = run_round(store, team.id, [3] * 4)
    out = build_retro(store, team, r.id)

    assert out.previous_round_id is None
    assert out.scale_changed is False
    assert all(s.delta is None for s in out.round_scores)
    assert out.celebration is not None


def test_retro_other_team_round(store, team, run_round):
    other = create_team(store, "Other")
    r = run_round(store, other.id, [2] * 4)
    with pytest.raises(NotFound):
        build_retro(store, team, r.id)
    with pytest.raises(NotFound):
        build_retro(store, team, uuid.uuid4())


def test_check_in_question_is_deterministic():
    rid = uuid.uuid4()
    assert check_in_question(rid) == check_in_question(str(rid))
    assert check_in_question(rid) in CHECK_IN_QUESTIONS


def test_analytics(store, team, run_round):
    run_round(store, team.id, [1, 3])
    run_round(store, team.id, [2, 2])
    out = build_analytics(store, team)

    assert out.current_scale_max == 3
    fixed = out.questions[0]
    assert [r.avg for r in fixed.rounds] == [2.0, 2.0]
    assert fixed.rounds[0].distribution == [1, 0, 1]
    assert fixed.rounds[0].norm_spread == 1.0


def test_admin_load(store, team, run_round):
    closed = run_round(store, team.id, [2] * 3)
    run_round(store, team.id, [], close=False)
    out = build_admin_load(store, team)

    assert out.team.slug == team.slug
    assert out.settings.scale_max == 3
    assert len(out.fixed_items) == 4
    assert len(out.rotating_items) == 6
    assert out.fixed_items[0].question.text
    assert [r.status for r in out.rounds] == ["open", "closed"]
    assert out.rounds[1].id == closed.id
    assert out.rounds[1].response_count == 3
    assert len(out.rounds[1].summary) == 5
    assert out.rounds[0].summary == []


def test_list_comments_newest_first(store, team, run_round):
    run_round(store, team.id, [2, 2], free_texts=["old one", "old two"])
    run_round(store, team.id, [2], free_texts=["new"])
    run_round(store, team.id, [2], close=False, free_texts=["still open"])

    assert [c.text for c in list_comments(store, team)] == ["new", "old two", "old one"]
