# teamtemp/storage/memory.py
"""
Backends sin base de datos:

- MemoryStorage: tablas en memoria (tests, scripts).
- JsonFileStorage: mismo modelo persistido en un único archivo JSON, releído en
  cada operación (equivalente al data/db.json de desarrollo local).
"""
from __future__ import annotations

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Sequence
from uuid import UUID

from teamtemp.core.logging import get_logger
from teamtemp.schemas.records import (
    Answer,
    FreeText,
    Question,
    QuestionSet,
    QuestionSetItem,
    Record,
    Round,
    RoundQuestion,
    RoundStatus,
    Submission,
    Team,
    TeamSettings,
)
from teamtemp.storage.base import StorageAccessor

logger = get_logger(__name__)

# nombre de tabla -> tipo de registro (mismos nombres que el esquema SQL)
TABLES: dict[str, type[Record]] = {
    "teams": Team,
    "team_settings": TeamSettings,
    "question_bank": Question,
    "question_set": QuestionSet,
    "question_set_item": QuestionSetItem,
    "rounds": Round,
    "round_questions": RoundQuestion,
    "submissions": Submission,
    "answers": Answer,
    "free_text": FreeText,
}

Tables = dict[str, list]

# Un lock por archivo, compartido por todas las instancias del proceso
_LOCKS: dict[Path, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _path_lock(path: Path) -> threading.Lock:
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(path, threading.Lock())


def empty_tables() -> Tables:
    return {name: [] for name in TABLES}


def _newest_first(rows: list, key) -> list:
    # con created_at empatado, lo último insertado va primero
    return sorted(reversed(rows), key=key, reverse=True)


class MemoryStorage(StorageAccessor):

    def __init__(self, tables: Optional[Tables] = None):
        self._tables = tables if tables is not None else empty_tables()

    # --- hooks que JsonFileStorage reemplaza ---

    def _read(self) -> Tables:
        return self._tables

    @contextmanager
    def _write(self) -> Iterator[Tables]:
        yield self._tables

    # Copias al entrar y salir: nadie comparte instancias con el almacén
    @staticmethod
    def _out(rec):
        return rec.model_copy() if rec is not None else None

    @staticmethod
    def _find(rows: list, **match):
        for r in rows:
            if all(getattr(r, k) == v for k, v in match.items()):
                return r
        return None

    def _replace(self, table: str, rec: Record, key: str = "id") -> None:
        with self._write() as db:
            rows = db[table]
            for i, r in enumerate(rows):
                if getattr(r, key) == getattr(rec, key):
                    rows[i] = rec.model_copy()
                    return
            rows.append(rec.model_copy())

    # ---------------- teams ----------------

    def get_team(self, team_id: UUID) -> Optional[Team]:
        return self._out(self._find(self._read()["teams"], id=team_id))

    def get_team_by_slug(self, slug: str) -> Optional[Team]:
        return self._out(self._find(self._read()["teams"], slug=slug))

    def get_team_by_admin_token(self, token: str) -> Optional[Team]:
        return self._out(self._find(self._read()["teams"], admin_token=token))

    def get_team_by_email(self, email: str) -> Optional[Team]:
        email = email.strip().lower()
        for t in self._read()["teams"]:
            if t.admin_email and t.admin_email.lower() == email:
                return self._out(t)
        return None

    def list_teams(self) -> list[Team]:
        teams = _newest_first(self._read()["teams"], key=lambda t: t.created_at)
        return [self._out(t) for t in teams]

    def add_team(
        self,
        team: Team,
        settings: TeamSettings,
        question_set: QuestionSet,
        questions: Sequence[Question],
        items: Sequence[QuestionSetItem],
    ) -> None:
        with self._write() as db:
            db["teams"].append(team.model_copy())
            db["team_settings"].append(settings.model_copy())
            db["question_set"].append(question_set.model_copy())
            db["question_bank"].extend(q.model_copy() for q in questions)
            db["question_set_item"].extend(i.model_copy() for i in items)

    # ---------------- settings ----------------

    def get_settings(self, team_id: UUID) -> Optional[TeamSettings]:
        return self._out(self._find(self._read()["team_settings"], team_id=team_id))

    def save_settings(self, settings: TeamSettings) -> None:
        self._replace("team_settings", settings, key="team_id")

    # ---------------- questions ----------------

    def get_question(self, question_id: UUID) -> Optional[Question]:
        return self._out(self._find(self._read()["question_bank"], id=question_id))

    def list_questions(self, team_id: UUID, active_only: bool = True) -> list[Question]:
        rows = [
            q for q in self._read()["question_bank"]
            if q.team_id == team_id and (q.is_active or not active_only)
        ]
        return [self._out(q) for q in sorted(rows, key=lambda q: q.created_at)]

    def add_question(self, question: Question) -> None:
        with self._write() as db:
            db["question_bank"].append(question.model_copy())

    def save_question(self, question: Question) -> None:
        self._replace("question_bank", question)

    # ---------------- question sets ----------------

    def get_default_question_set(self, team_id: UUID) -> Optional[QuestionSet]:
        return self._out(self._find(self._read()["question_set"], team_id=team_id, is_default=True))

    def list_question_set_items(self, question_set_id: UUID) -> list[QuestionSetItem]:
        rows = [i for i in self._read()["question_set_item"] if i.question_set_id == question_set_id]
        return [self._out(i) for i in sorted(rows, key=lambda i: i.position)]

    def get_question_set_item(self, item_id: UUID) -> Optional[QuestionSetItem]:
        return self._out(self._find(self._read()["question_set_item"], id=item_id))

    def add_question_set_item(self, item: QuestionSetItem) -> None:
        with self._write() as db:
            db["question_set_item"].append(item.model_copy())

    def save_question_set_item(self, item: QuestionSetItem) -> None:
        self._replace("question_set_item", item)

    def delete_question_set_item(self, item_id: UUID) -> bool:
        with self._write() as db:
            before = len(db["question_set_item"])
            db["question_set_item"] = [i for i in db["question_set_item"] if i.id != item_id]
            return len(db["question_set_item"]) < before

    # ---------------- rounds ----------------

    def get_round(self, round_id: UUID) -> Optional[Round]:
        return self._out(self._find(self._read()["rounds"], id=round_id))

    def get_round_by_token(self, token: str) -> Optional[Round]:
        return self._out(self._find(self._read()["rounds"], token=token))

    def list_rounds(
        self,
        team_id: UUID,
        *,
        status: Optional[RoundStatus] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Round]:
        rows = [
            r for r in self._read()["rounds"]
            if r.team_id == team_id
            and (status is None or r.status == status)
            and (created_before is None or r.created_at < created_before)
        ]
        rows = _newest_first(rows, key=lambda r: r.created_at)
        if limit is not None:
            rows = rows[:limit]
        return [self._out(r) for r in rows]

    def add_round(self, round_: Round, round_questions: Sequence[RoundQuestion]) -> None:
        with self._write() as db:
            db["rounds"].append(round_.model_copy())
            db["round_questions"].extend(rq.model_copy() for rq in round_questions)

    def save_round(self, round_: Round) -> None:
        self._replace("rounds", round_)

    def list_round_questions(self, round_id: UUID) -> list[RoundQuestion]:
        rows = [rq for rq in self._read()["round_questions"] if rq.round_id == round_id]
        return [self._out(rq) for rq in sorted(rows, key=lambda rq: rq.position)]

    # ---------------- submissions ----------------

    def add_submission(
        self,
        submission: Submission,
        answers: Sequence[Answer],
        free_text: Optional[FreeText] = None,
    ) -> None:
        with self._write() as db:
            db["submissions"].append(submission.model_copy())
            db["answers"].extend(a.model_copy() for a in answers)
            if free_text is not None:
                db["free_text"].append(free_text.model_copy())

    def count_submissions(self, round_id: UUID) -> int:
        return sum(1 for s in self._read()["submissions"] if s.round_id == round_id)

    def answer_values(self, round_id: UUID) -> dict[UUID, list[int]]:
        db = self._read()
        rq_ids = {rq.id for rq in db["round_questions"] if rq.round_id == round_id}
        out: dict[UUID, list[int]] = {}
        for a in db["answers"]:
            if a.round_question_id in rq_ids:
                out.setdefault(a.round_question_id, []).append(a.value)
        return out

    def list_free_texts(self, round_id: UUID) -> list[FreeText]:
        db = self._read()
        sub_ids = {s.id for s in db["submissions"] if s.round_id == round_id}
        return [self._out(ft) for ft in db["free_text"] if ft.submission_id in sub_ids]


class JsonFileStorage(MemoryStorage):
    """
    Todo el estado en un archivo JSON. Cada lectura parsea el archivo y cada
    escritura lo reemplaza de forma atómica (tmp + os.replace).
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path).resolve()
        self._lock = _path_lock(self.path)

    def _load(self) -> Tables:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return empty_tables()
        tables = empty_tables()
        for name, model in TABLES.items():
            tables[name] = [model.model_validate(row) for row in raw.get(name, [])]
        return tables

    def _dump(self, tables: Tables) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            name: [r.model_dump(mode="json") for r in rows]
            for name, rows in tables.items()
        }
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def _read(self) -> Tables:
        return self._load()

    @contextmanager
    def _write(self) -> Iterator[Tables]:
        # lectura-modificación-escritura serializada dentro del proceso
        with self._lock:
            tables = self._load()
            yield tables
            self._dump(tables)
        logger.debug("json store written", extra={"extra_data": {"path": str(self.path)}})
