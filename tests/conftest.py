from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teamtemp.api.deps.storage import get_store
from teamtemp.db.base import Base
from teamtemp.main import app
from teamtemp.schemas.respond import AnswerIn
from teamtemp.services.composer import close_round, compose_round
from teamtemp.services.submissions import record_submission
from teamtemp.services.teams import create_team
from teamtemp.storage.memory import MemoryStorage
from teamtemp.storage.sql import SqlStorage


class Clock:
    """Reloj determinista: cada llamada avanza una hora."""

    def __init__(self, start=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(hours=1)
        return self.current


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store():
    return MemoryStorage()


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield SqlStorage(db)
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def team(store, clock):
    return create_team(store, "Platform Team", "lead@example.com", now=clock())


@pytest.fixture
def run_round(clock):
    """
    Compone una ronda, registra los envíos y la cierra.

    `submissions`: lista de envíos; cada envío es un valor (el mismo para
    todas las preguntas) o un dict position -> valor.
    """

    def _run(store, team_id, submissions, *, close=True, free_texts=()):
        round_ = compose_round(store, team_id, now=clock())
        rqs = store.list_round_questions(round_.id)
        texts = list(free_texts)
        for sub in submissions:
            if isinstance(sub, dict):
                answers = [AnswerIn(round_question_id=rq.id, value=sub[rq.position]) for rq in rqs if rq.position in sub]
            else:
                answers = [AnswerIn(round_question_id=rq.id, value=sub) for rq in rqs]
            record_submission(store, round_.id, answers, texts.pop(0) if texts else None, now=clock())
        if close:
            round_ = close_round(store, round_.id, now=clock())
        return round_

    return _run


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
