# teamtemp/services/aggregation.py
"""
Agregados por (ronda, pregunta): promedio, dispersión (desviación estándar
poblacional), conteo y distribución. Una pregunta sin respuestas en una ronda
no produce registro: mejor "sin datos" que un 0/0 engañoso.
"""
from __future__ import annotations

import math
import statistics
from typing import Optional, Sequence
from uuid import UUID

from teamtemp.schemas.insights import QuestionAggregate
from teamtemp.schemas.records import Round
from teamtemp.storage.base import StorageAccessor


def round2(x: float) -> float:
    # mitad hacia arriba, no redondeo bancario
    return math.floor(x * 100 + 0.5) / 100


def calc_stats(values: Sequence[int]) -> Optional[tuple[float, float]]:
    """(avg, spread) redondeados a 2 decimales; None si no hay valores."""
    if not values:
        return None
    avg = statistics.fmean(values)
    spread = statistics.pstdev(values)
    return round2(avg), round2(spread)


def distribution(values: Sequence[int], scale_max: int) -> list[int]:
    """Conteo por opción 1..scale_max (índice 0 = valor 1)."""
    counts = [0] * max(scale_max, 0)
    for v in values:
        if 1 <= v <= scale_max:
            counts[v - 1] += 1
    return counts


def aggregate_round(store: StorageAccessor, round_: Round) -> list[QuestionAggregate]:
    """Agregados de una ronda en el orden de position de sus preguntas."""
    values_by_rq = store.answer_values(round_.id)
    results: list[QuestionAggregate] = []

    for rq in store.list_round_questions(round_.id):
        values = values_by_rq.get(rq.id) or []
        stats = calc_stats(values)
        if stats is None:
            continue
        avg, spread = stats

        text = rq.question_text
        if not text:
            # filas anteriores a la copia del texto en round_questions
            q = store.get_question(rq.question_id)
            text = q.text if q else ""

        results.append(QuestionAggregate(
            question_id=rq.question_id,
            question_text=text,
            round_id=round_.id,
            round_created_at=round_.created_at,
            scale_max=round_.scale_max,
            avg=avg,
            spread=spread,
            count=len(values),
            values=list(values),
        ))
    return results


def get_round_aggregates(store: StorageAccessor, round_id: UUID) -> list[QuestionAggregate]:
    round_ = store.get_round(round_id)
    if not round_:
        return []
    return aggregate_round(store, round_)


def get_team_aggregates(store: StorageAccessor, team_id: UUID, limit_rounds: int = 8) -> list[QuestionAggregate]:
    """
    Agregados de las últimas `limit_rounds` rondas cerradas del equipo,
    ronda más reciente primero. Cada registro lleva el scale_max de SU ronda.
    """
    results: list[QuestionAggregate] = []
    for round_ in store.list_rounds(team_id, status="closed", limit=limit_rounds):
        results.extend(aggregate_round(store, round_))
    return results


def get_previous_closed_round(store: StorageAccessor, round_id: UUID) -> Optional[UUID]:
    """Última ronda cerrada del mismo equipo creada antes que `round_id`."""
    round_ = store.get_round(round_id)
    if not round_:
        return None
    earlier = store.list_rounds(
        round_.team_id, status="closed", created_before=round_.created_at, limit=1
    )
    return earlier[0].id if earlier else None
