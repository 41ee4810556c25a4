# teamtemp/storage/base.py
"""
Puerto de almacenamiento. El núcleo solo conoce estas operaciones:
búsquedas puntuales (id/token/slug), escaneos filtrados por FK e
inserciones/actualizaciones. Cada método es atómico a nivel de una
escritura; no hay transacciones entre llamadas.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

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


class StorageAccessor(ABC):

    # ---------------- teams ----------------

    @abstractmethod
    def get_team(self, team_id: UUID) -> Optional[Team]: ...

    @abstractmethod
    def get_team_by_slug(self, slug: str) -> Optional[Team]: ...

    @abstractmethod
    def get_team_by_admin_token(self, token: str) -> Optional[Team]: ...

    @abstractmethod
    def get_team_by_email(self, email: str) -> Optional[Team]: ...

    @abstractmethod
    def list_teams(self) -> list[Team]:
        """Todos los equipos, más recientes primero."""

    @abstractmethod
    def add_team(
        self,
        team: Team,
        settings: TeamSettings,
        question_set: QuestionSet,
        questions: Sequence[Question],
        items: Sequence[QuestionSetItem],
    ) -> None:
        """Alta de equipo con su configuración y banco inicial, en una sola unidad."""

    # ---------------- settings ----------------

    @abstractmethod
    def get_settings(self, team_id: UUID) -> Optional[TeamSettings]: ...

    @abstractmethod
    def save_settings(self, settings: TeamSettings) -> None: ...

    # ---------------- questions ----------------

    @abstractmethod
    def get_question(self, question_id: UUID) -> Optional[Question]: ...

    @abstractmethod
    def list_questions(self, team_id: UUID, active_only: bool = True) -> list[Question]:
        """Banco de preguntas del equipo, por created_at ascendente."""

    @abstractmethod
    def add_question(self, question: Question) -> None: ...

    @abstractmethod
    def save_question(self, question: Question) -> None: ...

    # ---------------- question sets ----------------

    @abstractmethod
    def get_default_question_set(self, team_id: UUID) -> Optional[QuestionSet]: ...

    @abstractmethod
    def list_question_set_items(self, question_set_id: UUID) -> list[QuestionSetItem]:
        """Items del set ordenados por position."""

    @abstractmethod
    def get_question_set_item(self, item_id: UUID) -> Optional[QuestionSetItem]: ...

    @abstractmethod
    def add_question_set_item(self, item: QuestionSetItem) -> None: ...

    @abstractmethod
    def save_question_set_item(self, item: QuestionSetItem) -> None: ...

    @abstractmethod
    def delete_question_set_item(self, item_id: UUID) -> bool: ...

    # ---------------- rounds ----------------

    @abstractmethod
    def get_round(self, round_id: UUID) -> Optional[Round]: ...

    @abstractmethod
    def get_round_by_token(self, token: str) -> Optional[Round]: ...

    @abstractmethod
    def list_rounds(
        self,
        team_id: UUID,
        *,
        status: Optional[RoundStatus] = None,
        created_before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Round]:
        """Rondas del equipo, más recientes primero (created_at descendente)."""

    @abstractmethod
    def add_round(self, round_: Round, round_questions: Sequence[RoundQuestion]) -> None:
        """Guarda la ronda y sus preguntas juntas."""

    @abstractmethod
    def save_round(self, round_: Round) -> None: ...

    @abstractmethod
    def list_round_questions(self, round_id: UUID) -> list[RoundQuestion]:
        """Preguntas de la ronda ordenadas por position."""

    # ---------------- submissions ----------------

    @abstractmethod
    def add_submission(
        self,
        submission: Submission,
        answers: Sequence[Answer],
        free_text: Optional[FreeText] = None,
    ) -> None:
        """Submission + respuestas + texto libre como una sola escritura."""

    @abstractmethod
    def count_submissions(self, round_id: UUID) -> int: ...

    @abstractmethod
    def answer_values(self, round_id: UUID) -> dict[UUID, list[int]]:
        """Valores crudos de la ronda agrupados por round_question_id."""

    @abstractmethod
    def list_free_texts(self, round_id: UUID) -> list[FreeText]: ...
