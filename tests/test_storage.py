import json
import threading

import pytest

from teamtemp.api.deps.storage import get_store
from teamtemp.core.config import settings
from teamtemp.core.errors import InvalidState
from teamtemp.schemas.respond import AnswerIn
from teamtemp.services.aggregation import get_round_aggregates, get_team_aggregates
from teamtemp.services.composer import close_round, compose_round
from teamtemp.services.questions import add_question, question_set_items
from teamtemp.services.submissions import record_submission
from teamtemp.services.teams import create_team, get_settings, update_settings
from teamtemp.storage.memory import JsonFileStorage, MemoryStorage


def _cycle(store, run_round):
    team = create_team(store, "Storage Team", "ops@example.com")
    first = run_round(store, team.id, [1, 1, 1, 3, 3, 3], free_texts=["hello"])
    second = run_round(store, team.id, [{1: 2, 2: 3}, {1: 3, 2: 3}, {1: 2}])
    return team, first, second


def test_memory_store_returns_copies():
    store = MemoryStorage()
    team = create_team(store, "Copy Team")
    fetched = store.get_team(team.id)
    fetched.name = "Mutated"
    assert store.get_team(team.id).name == "Copy Team"


def test_json_store_persists_between_instances(tmp_path, run_round):
    path = tmp_path / "data" / "db.json"
    team, first, second = _cycle(JsonFileStorage(path), run_round)

    reopened = JsonFileStorage(path)
    assert reopened.get_team_by_slug("storage-team").id == team.id
    assert [r.id for r in reopened.list_rounds(team.id)] == [second.id, first.id]
    assert reopened.count_submissions(first.id) == 6
    assert [ft.text for ft in reopened.list_free_texts(first.id)] == ["hello"]
    assert get_round_aggregates(reopened, first.id)[0].avg == 2.0


def test_json_store_file_layout(tmp_path):
    path = tmp_path / "db.json"
    store = JsonFileStorage(path)
    create_team(store, "Layout Team")

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert set(raw) >= {"teams", "team_settings", "question_bank", "rounds", "answers", "free_text"}
    assert len(raw["question_bank"]) == 10
    assert list(tmp_path.glob("*.tmp")) == []


def test_json_store_missing_file_is_empty(tmp_path):
    store = JsonFileStorage(tmp_path / "nothing.json")
    assert store.list_teams() == []
    assert not (tmp_path / "nothing.json").exists()


def test_sql_store_full_cycle(sql_store, run_round):
    team, first, second = _cycle(sql_store, run_round)

    assert sql_store.get_team_by_admin_token(team.admin_token).id == team.id
    assert sql_store.get_team_by_email("OPS@example.com").id == team.id
    assert [r.id for r in sql_store.list_rounds(team.id, status="closed")] == [second.id, first.id]
    assert [r.id for r in sql_store.list_rounds(team.id, created_before=second.created_at)] == [first.id]
    assert sql_store.count_submissions(second.id) == 3
    assert [ft.text for ft in sql_store.list_free_texts(first.id)] == ["hello"]

    aggs = get_round_aggregates(sql_store, second.id)
    assert [(a.avg, a.count) for a in aggs] == [(2.33, 3), (3.0, 2)]
    assert {a.round_id for a in get_team_aggregates(sql_store, team.id)} == {first.id, second.id}


def test_sql_store_matches_memory_store(sql_store, store, run_round):
    _, _, mem_second = _cycle(store, run_round)
    _, _, sql_second = _cycle(sql_store, run_round)

    def shape(s, round_id):
        return [(a.question_text, a.avg, a.spread, a.count) for a in get_round_aggregates(s, round_id)]

    assert shape(store, mem_second.id) == shape(sql_store, sql_second.id)


def test_sql_store_updates(sql_store, clock):
    team = create_team(sql_store, "Sql Team")
    update_settings(sql_store, team.id, scale_max=4, allow_free_text=False)
    settings = get_settings(sql_store, team.id)
    assert (settings.scale_max, settings.allow_free_text) == (4, False)

    q = add_question(sql_store, team.id, "New question", kind="rotating_pool")
    items = question_set_items(sql_store, team.id)
    assert items[-1][1].id == q.id
    assert sql_store.delete_question_set_item(items[-1][0].id) is True
    assert sql_store.delete_question_set_item(items[-1][0].id) is False

    round_ = compose_round(sql_store, team.id, now=clock())
    assert round_.scale_max == 4
    close_round(sql_store, round_.id, now=clock())
    with pytest.raises(InvalidState):
        close_round(sql_store, round_.id, now=clock())
    assert sql_store.get_round(round_.id).status == "closed"


def test_json_store_instances_share_lock_per_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    relative = JsonFileStorage("db.json")
    absolute = JsonFileStorage(tmp_path / "db.json")

    assert relative._lock is absolute._lock
    assert JsonFileStorage(tmp_path / "other.json")._lock is not absolute._lock


def test_json_store_concurrent_submissions_are_all_kept(tmp_path, monkeypatch, clock):
    path = tmp_path / "db.json"
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "json")
    monkeypatch.setattr(settings, "JSON_STORE_PATH", str(path))

    setup = next(get_store())
    team = create_team(setup, "Busy Team")
    round_ = compose_round(setup, team.id, now=clock())
    rq_ids = [rq.id for rq in setup.list_round_questions(round_.id)]

    workers = 40
    barrier = threading.Barrier(workers)
    errors = []

    def submit(i):
        # un store por request, como get_store en la API
        store = next(get_store())
        answers = [AnswerIn(round_question_id=rq_id, value=1 + i % 3) for rq_id in rq_ids]
        barrier.wait()
        try:
            record_submission(store, round_.id, answers, f"note {i}")
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=submit, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    reopened = JsonFileStorage(path)
    assert reopened.count_submissions(round_.id) == workers
    assert len(reopened.list_free_texts(round_.id)) == workers
    assert all(len(v) == workers for v in reopened.answer_values(round_.id).values())
    assert list(tmp_path.glob("*.tmp")) == []
