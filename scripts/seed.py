#!/usr/bin/env python3
"""
Datos demo: un equipo con 10 rondas cerradas y una abierta
(token "demo-round-open"). Usa el backend de STORAGE_BACKEND.

    python scripts/seed.py
"""
import random
from datetime import timedelta

from teamtemp.core.config import settings
from teamtemp.core.logging import get_logger, setup_logging
from teamtemp.schemas.records import utcnow
from teamtemp.schemas.respond import AnswerIn
from teamtemp.services.composer import close_round, compose_round
from teamtemp.services.submissions import record_submission
from teamtemp.services.teams import admin_link, create_team
from teamtemp.storage.base import StorageAccessor

logger = get_logger("teamtemp.seed")

DEMO_ROUNDS = 10
DEMO_OPEN_TOKEN = "demo-round-open"
COMMENTS = [
    "Sprint felt rushed at the end.",
    "Good pairing sessions this week.",
    "Too many meetings on Tuesday.",
    "",
]


def seed(store: StorageAccessor, rng: random.Random) -> None:
    start = utcnow() - timedelta(weeks=2 * (DEMO_ROUNDS + 1))
    team = create_team(store, "Demo Team", "demo@example.com", now=start)

    for n in range(DEMO_ROUNDS):
        ts = start + timedelta(weeks=2 * n, hours=1)
        round_ = compose_round(store, team.id, now=ts)
        rqs = store.list_round_questions(round_.id)
        for i in range(rng.randint(4, 8)):
            answers = [AnswerIn(round_question_id=rq.id, value=rng.randint(1, round_.scale_max)) for rq in rqs]
            record_submission(store, round_.id, answers, rng.choice(COMMENTS), now=ts + timedelta(minutes=i))
        close_round(store, round_.id, now=ts + timedelta(days=3))

    open_round = compose_round(store, team.id)
    store.save_round(open_round.model_copy(update={"token": DEMO_OPEN_TOKEN}))

    print("[INFO] team slug:", team.slug)
    print("[INFO] admin link:", admin_link(team))
    print("[INFO] open round token:", DEMO_OPEN_TOKEN)


def main():
    setup_logging(settings.DEBUG)
    rng = random.Random(42)

    if settings.STORAGE_BACKEND == "json":
        from teamtemp.storage.memory import JsonFileStorage

        seed(JsonFileStorage(settings.JSON_STORE_PATH), rng)
        return

    from teamtemp.db.session import get_sessionmaker
    from teamtemp.storage.sql import SqlStorage

    db = get_sessionmaker()()
    try:
        seed(SqlStorage(db), rng)
    finally:
        db.close()


if __name__ == "__main__":
    main()
