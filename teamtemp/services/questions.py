# teamtemp/services/questions.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from teamtemp.core.errors import InvalidAnswer, NotFound
from teamtemp.core.logging import get_logger
from teamtemp.schemas.records import ItemKind, Question, QuestionSetItem
from teamtemp.storage.base import StorageAccessor

logger = get_logger(__name__)

ITEM_KINDS = ("fixed", "rotating_pool")
MAX_CATEGORY_LEN = 40  # question_bank.category es String(40)


def question_set_items(store: StorageAccessor, team_id: UUID) -> list[tuple[QuestionSetItem, Optional[Question]]]:
    """Items del set por defecto con su pregunta, en orden de position."""
    qset = store.get_default_question_set(team_id)
    if not qset:
        return []
    return [(i, store.get_question(i.question_id)) for i in store.list_question_set_items(qset.id)]


def _own_item(store: StorageAccessor, team_id: UUID, item_id: UUID) -> QuestionSetItem:
    qset = store.get_default_question_set(team_id)
    item = store.get_question_set_item(item_id)
    if not qset or not item or item.question_set_id != qset.id:
        raise NotFound("Question set item not found")
    return item


def add_question(
    store: StorageAccessor,
    team_id: UUID,
    text: str,
    category: str = "general",
    kind: ItemKind = "fixed",
) -> Question:
    """Agrega la pregunta al banco y al final del set por defecto (si existe)."""
    text = text.strip()
    if not text:
        raise InvalidAnswer("Question text is required")
    if len(category or "") > MAX_CATEGORY_LEN:
        raise InvalidAnswer(f"category must be at most {MAX_CATEGORY_LEN} characters")
    if kind not in ITEM_KINDS:
        raise InvalidAnswer(f"kind must be one of {', '.join(ITEM_KINDS)}")

    question = Question(team_id=team_id, text=text, category=(category or "").strip() or "general")
    store.add_question(question)

    qset = store.get_default_question_set(team_id)
    if qset:
        # max + 1; dos altas simultáneas pueden repetir posición
        max_pos = max((i.position for i in store.list_question_set_items(qset.id)), default=0)
        store.add_question_set_item(QuestionSetItem(
            question_set_id=qset.id, question_id=question.id, position=max_pos + 1, kind=kind,
        ))

    logger.info("question added", extra={"extra_data": {"team_id": team_id, "question_id": question.id, "kind": kind}})
    return question


def remove_from_set(store: StorageAccessor, team_id: UUID, item_id: UUID) -> None:
    _own_item(store, team_id, item_id)
    store.delete_question_set_item(item_id)
    logger.info("question removed from set", extra={"extra_data": {"team_id": team_id, "item_id": item_id}})


def set_item_kind(store: StorageAccessor, team_id: UUID, item_id: UUID, kind: ItemKind) -> QuestionSetItem:
    if kind not in ITEM_KINDS:
        raise InvalidAnswer(f"kind must be one of {', '.join(ITEM_KINDS)}")
    item = _own_item(store, team_id, item_id).model_copy(update={"kind": kind})
    store.save_question_set_item(item)
    return item


def deactivate_question(store: StorageAccessor, team_id: UUID, question_id: UUID) -> Question:
    """Baja lógica: las rondas pasadas siguen apuntando a la pregunta."""
    q = store.get_question(question_id)
    if not q or q.team_id != team_id:
        raise NotFound("Question not found")
    q = q.model_copy(update={"is_active": False})
    store.save_question(q)
    logger.info("question deactivated", extra={"extra_data": {"team_id": team_id, "question_id": question_id}})
    return q
