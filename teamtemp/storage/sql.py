# teamtemp/storage/sql.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamtemp.models import question as qm
from teamtemp.models import rounds as rm
from teamtemp.models import submission as sm
from teamtemp.models import team as tm
from teamtemp.schemas.records import (
    Answer,
    FreeText,
    Question,
    QuestionSet,
    QuestionSetItem,
    Round,
    RoundQuestion,
    RoundStatus,
    Submission,
    Team,
    TeamSettings,
)
from teamtemp.storage.base import StorageAccessor


class SqlStorage(StorageAccessor):
    """
    Backend SQLAlchemy. Cada método hace commit de su propia unidad;
    las escrituras compuestas (ronda + preguntas, submission + respuestas)
    van en una sola transacción.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, *rows) -> None:
        self.db.add_all(rows)
        self.db.commit()

    def _merge(self, row) -> None:
        self.db.merge(row)
        self.db.commit()

    # ---------------- teams ----------------

    def _one_team(self, *criteria) -> Optional[Team]:
        row = self.db.query(tm.Team).filter(*criteria).first()
        return Team.model_validate(row) if row else None

    def get_team(self, team_id: UUID) -> Optional[Team]:
        return self._one_team(tm.Team.id == team_id)

    def get_team_by_slug(self, slug: str) -> Optional[Team]:
        return self._one_team(tm.Team.slug == slug)

    def get_team_by_admin_token(self, token: str) -> Optional[Team]:
        return self._one_team(tm.Team.admin_token == token)

    def get_team_by_email(self, email: str) -> Optional[Team]:
        return self._one_team(func.lower(tm.Team.admin_email) == email.strip().lower())

    def list_teams(self) -> list[Team]:
        rows = self.db.query(tm.Team).order_by(tm.Team.created_at.desc()).all()
        return [Team.model_validate(r) for r in rows]

    def add_team(
        self,
        team: Team,
        settings: TeamSettings,
        question_set: QuestionSet,
        questions: Sequence[Question],
        items: Sequence[QuestionSetItem],
    ) -> None:
        # flush por etapas: las FKs exigen el orden padre -> hijo
        self.db.add(tm.Team(**team.model_dump()))
        self.db.flush()
        self.db.add(tm.TeamSettings(**settings.model_dump()))
        self.db.add(qm.QuestionSet(**question_set.model_dump()))
        self.db.add_all(qm.Question(**q.model_dump()) for q in questions)
        self.db.flush()
        self.db.add_all(qm.QuestionSetItem(**i.model_dump()) for i in items)
        self.db.commit()

    # ---------------- settings ----------------

    def get_settings(self, team_id: UUID) -> Optional[TeamSettings]:
        row = self.db.get(tm.TeamSettings, team_id)
        return TeamSettings.model_validate(row) if row else None

    def save_settings(self, settings: TeamSettings) -> None:
        self._merge(tm.TeamSettings(**settings.model_dump()))

    # ---------------- questions ----------------

    def get_question(self, question_id: UUID) -> Optional[Question]:
        row = self.db.get(qm.Question, question_id)
        return Question.model_validate(row) if row else None

    def list_questions(self, team_id: UUID, active_only: bool = True) -> list[Question]:
        q = self.db.query(qm.Question).filter(qm.Question.team_id == team_id)
        if active_only:
            q = q.filter(qm.Question.is_active.is_(True))
        return [Question.model_validate(r) for r in q.order_by(qm.Question.created_at).all()]

    def add_question(self, question: Question) -> None:
        self._commit(qm.Question(**question.model_dump()))

    def save_question(self, question: Question) -> None:
        self._merge(qm.Question(**question.model_dump()))

    # ---------------- question sets ----------------

    def get_default_question_set(self, team_id: UUID) -> Optional[QuestionSet]:
        row = (
            self.db.query(qm.QuestionSet)
            .filter(qm.QuestionSet.team_id == team_id, qm.QuestionSet.is_default.is_(True))
            .first()
        )
        return QuestionSet.model_validate(row) if row else None

    def list_question_set_items(self, question_set_id: UUID) -> list[QuestionSetItem]:
        rows = (
            self.db.query(qm.QuestionSetItem)
            .filter(qm.QuestionSetItem.question_set_id == question_set_id)
            .order_by(qm.QuestionSetItem.position)
            .all()
        )
        return [QuestionSetItem.model_validate(r) for r in rows]

    def get_question_set_item(self, item_id: UUID) -> Optional[QuestionSetItem]:
        row = self.db.get(qm.QuestionSetItem, item_id)
        return QuestionSetItem.model_validate(row) if row else None

    def add_question_set_item(self, item: QuestionSetItem) -> None:
        self._commit(qm.QuestionSetItem(**item.model_dump()))

    def save_question_set_item(self, item: QuestionSetItem) -> None:
        self._merge(qm.QuestionSetItem(**item.model_dump()))

    def delete_question_set_item(self, item_id: UUID) -> bool:
        deleted = (
            self.db.query(qm.QuestionSetItem)
            .filter(qm.QuestionSetItem.id == item_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return bool(deleted)

    # ---------------- rounds ----------------

    def get_round(self, round_id: UUID) -> Optional[Round]:
        row = self.db.get(rm.Round, round_id)
        return Round.model_validate(row) if row else None

    def get_round_by_token(self, token: str) -> Optional[Round]:
        row = self.db.query(rm.Round).filter(rm.Round.token == token).first()
        return Round.model_validate(row) if row else None

    def list_rounds(
        self,
        team_id: UUID,
        *,
        status: Optional[RoundStatus] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Round]:
        q = self.db.query(rm.Round).filter(rm.Round.team_id == team_id)
        if status is not None:
            q = q.filter(rm.Round.status == status)
        if created_before is not None:
            q = q.filter(rm.Round.created_at < created_before)
        q = q.order_by(rm.Round.created_at.desc())
        if limit is not None:
            q = q.limit(limit)
        return [Round.model_validate(r) for r in q.all()]

    def add_round(self, round_: Round, round_questions: Sequence[RoundQuestion]) -> None:
        self.db.add(rm.Round(**round_.model_dump()))
        self.db.flush()
        self._commit(*(rm.RoundQuestion(**rq.model_dump()) for rq in round_questions))

    def save_round(self, round_: Round) -> None:
        self._merge(rm.Round(**round_.model_dump()))

    def list_round_questions(self, round_id: UUID) -> list[RoundQuestion]:
        rows = (
            self.db.query(rm.RoundQuestion)
            .filter(rm.RoundQuestion.round_id == round_id)
            .order_by(rm.RoundQuestion.position)
            .all()
        )
        return [RoundQuestion.model_validate(r) for r in rows]

    # ---------------- submissions ----------------

    def add_submission(
        self,
        submission: Submission,
        answers: Sequence[Answer],
        free_text: Optional[FreeText] = None,
    ) -> None:
        self.db.add(sm.Submission(**submission.model_dump()))
        self.db.flush()
        rows = [sm.Answer(**a.model_dump()) for a in answers]
        if free_text is not None:
            rows.append(sm.FreeText(**free_text.model_dump()))
        self._commit(*rows)

    def count_submissions(self, round_id: UUID) -> int:
        return int(
            self.db.query(func.count(sm.Submission.id))
            .filter(sm.Submission.round_id == round_id)
            .scalar()
            or 0
        )

    def answer_values(self, round_id: UUID) -> dict[UUID, list[int]]:
        rows = (
            self.db.query(sm.Answer.round_question_id, sm.Answer.value)
            .join(rm.RoundQuestion, rm.RoundQuestion.id == sm.Answer.round_question_id)
            .filter(rm.RoundQuestion.round_id == round_id)
            .all()
        )
        out: dict[UUID, list[int]] = {}
        for rq_id, value in rows:
            out.setdefault(rq_id, []).append(int(value))
        return out

    def list_free_texts(self, round_id: UUID) -> list[FreeText]:
        rows = (
            self.db.query(sm.FreeText)
            .join(sm.Submission, sm.Submission.id == sm.FreeText.submission_id)
            .filter(sm.Submission.round_id == round_id)
            .order_by(sm.FreeText.created_at)
            .all()
        )
        return [FreeText.model_validate(r) for r in rows]
