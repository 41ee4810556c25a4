# teamtemp/services/trends.py
"""
Señales comparativas sobre series de agregados.

Toda comparación entre rondas usa valores normalizados: si el equipo pasó
de escala 3 a 5, un promedio crudo que "sube" puede ser en realidad una caída.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Optional, Sequence
from uuid import UUID

from teamtemp.schemas.insights import (
    Celebration,
    Drop,
    QuestionAggregate,
    QuestionDelta,
    Signal,
    SpreadItem,
    TopMovers,
    TrendReport,
)
from teamtemp.services.aggregation import round2
from teamtemp.services.normalizer import normalize_avg, normalize_spread

CELEBRATION_MIN_DELTA = 0.05
DROP_MAX_DELTA = -0.05
HIGH_SCORE_MIN = 0.83
RETRO_SPREAD_MIN = 0.3
MIXED_SIGNALS_MIN = 0.35

TOP_MOVERS = 2
LOWEST_SIGNALS = 2


def norm_avg(a: QuestionAggregate) -> float:
    return normalize_avg(a.avg, a.scale_max)


def norm_spread(a: QuestionAggregate) -> float:
    return normalize_spread(a.spread, a.scale_max)


def is_mixed_signals(a: QuestionAggregate) -> bool:
    return norm_spread(a) >= MIXED_SIGNALS_MIN


# ---------------- series ----------------

def chronological(aggregates: Iterable[QuestionAggregate]) -> list[QuestionAggregate]:
    return sorted(aggregates, key=lambda a: a.round_created_at)


def series_by_question(aggregates: Iterable[QuestionAggregate]) -> "OrderedDict[UUID, list[QuestionAggregate]]":
    """question_id -> puntos en orden cronológico (primera aparición manda el orden)."""
    out: OrderedDict[UUID, list[QuestionAggregate]] = OrderedDict()
    for a in chronological(aggregates):
        out.setdefault(a.question_id, []).append(a)
    return out


def split_rounds(aggregates: Iterable[QuestionAggregate]) -> list[list[QuestionAggregate]]:
    """Agrupa por ronda, rondas en orden cronológico."""
    rounds: OrderedDict[UUID, list[QuestionAggregate]] = OrderedDict()
    for a in chronological(aggregates):
        rounds.setdefault(a.round_id, []).append(a)
    return list(rounds.values())


# ---------------- deltas ----------------

def consecutive_delta(previous: QuestionAggregate, latest: QuestionAggregate) -> float:
    return round2(norm_avg(latest) - norm_avg(previous))


def question_deltas(aggregates: Iterable[QuestionAggregate]) -> list[QuestionDelta]:
    """Delta último vs. anterior por pregunta (≥2 puntos); los 0 se omiten."""
    deltas: list[QuestionDelta] = []
    for points in series_by_question(aggregates).values():
        if len(points) < 2:
            continue
        delta = consecutive_delta(points[-2], points[-1])
        if delta == 0:
            continue
        deltas.append(QuestionDelta(
            question_id=points[-1].question_id,
            question_text=points[-1].question_text,
            delta=delta,
            direction="up" if delta > 0 else "down",
        ))
    return deltas


def top_movers(deltas: Sequence[QuestionDelta], limit: int = TOP_MOVERS) -> TopMovers:
    ups = sorted((d for d in deltas if d.direction == "up"), key=lambda d: d.delta, reverse=True)
    downs = sorted((d for d in deltas if d.direction == "down"), key=lambda d: d.delta)
    return TopMovers(increases=ups[:limit], decreases=downs[:limit])


def round_vs_previous(
    current: Sequence[QuestionAggregate],
    previous: Sequence[QuestionAggregate],
) -> list[tuple[QuestionAggregate, float]]:
    """(agregado actual, delta normalizado sin redondear) para preguntas en ambas rondas."""
    prev_by_q = {p.question_id: p for p in previous}
    out = []
    for a in current:
        p = prev_by_q.get(a.question_id)
        if p is not None:
            out.append((a, norm_avg(a) - norm_avg(p)))
    return out


# ---------------- retro picks ----------------

def pick_celebration(
    current: Sequence[QuestionAggregate],
    previous: Sequence[QuestionAggregate] = (),
) -> Optional[Celebration]:
    """
    Una sola cosa para celebrar: la mayor mejora (> 0.05) frente a la ronda
    anterior; si no hay, el promedio normalizado más alto si llega a 0.83.
    """
    improvements = [(a, d) for a, d in round_vs_previous(current, previous) if d > CELEBRATION_MIN_DELTA]
    if improvements:
        best, d = max(improvements, key=lambda t: t[1])
        return Celebration(
            question_id=best.question_id,
            question_text=best.question_text,
            reason=f"Moved up +{d * 100:.0f}% since last round",
        )

    ranked = sorted(current, key=norm_avg, reverse=True)
    if ranked and norm_avg(ranked[0]) >= HIGH_SCORE_MIN:
        top = ranked[0]
        return Celebration(
            question_id=top.question_id,
            question_text=top.question_text,
            reason=f"Scored {top.avg:.1f}/{top.scale_max}, that's strong",
        )
    return None


def find_drops(
    current: Sequence[QuestionAggregate],
    previous: Sequence[QuestionAggregate] = (),
) -> list[Drop]:
    drops = [
        Drop(question_id=a.question_id, question_text=a.question_text, norm_delta=d)
        for a, d in round_vs_previous(current, previous)
        if d < DROP_MAX_DELTA
    ]
    return sorted(drops, key=lambda x: x.norm_delta)


def lowest_average(current: Sequence[QuestionAggregate], limit: int = LOWEST_SIGNALS) -> list[QuestionAggregate]:
    return sorted(current, key=norm_avg)[:limit]


def high_spread(
    current: Sequence[QuestionAggregate],
    threshold: float = RETRO_SPREAD_MIN,
    exclude: Iterable[UUID] = (),
) -> list[SpreadItem]:
    skip = set(exclude)
    items = [
        SpreadItem(question_id=a.question_id, question_text=a.question_text, norm_spread=norm_spread(a))
        for a in current
        if a.question_id not in skip and norm_spread(a) > threshold
    ]
    return sorted(items, key=lambda s: s.norm_spread, reverse=True)


def signals_worth_discussing(current: Sequence[QuestionAggregate]) -> list[Signal]:
    lowest = lowest_average(current)
    signals = [
        Signal(
            question_id=a.question_id,
            question_text=a.question_text,
            reason=f"Avg {a.avg:.1f}/{a.scale_max}, seems like this could use attention",
        )
        for a in lowest
    ]
    taken = {a.question_id for a in lowest}
    for a in sorted(current, key=norm_spread, reverse=True):
        if a.question_id not in taken:
            signals.append(Signal(
                question_id=a.question_id,
                question_text=a.question_text,
                reason="High spread, people seem to experience this differently",
            ))
            break
    return signals


def derive_trend(series: Iterable[QuestionAggregate]) -> TrendReport:
    """
    `series`: agregados de una o más rondas. La ronda más reciente es la
    actual y la inmediatamente anterior es la de comparación. Sin ronda
    anterior no hay deltas ni caídas, y la celebración solo sale por puntaje.
    """
    aggregates = chronological(series)
    rounds = split_rounds(aggregates)
    if not rounds:
        return TrendReport()

    current = rounds[-1]
    previous = rounds[-2] if len(rounds) > 1 else []
    lowest_ids = [a.question_id for a in lowest_average(current)]

    return TrendReport(
        deltas=question_deltas(aggregates) if previous else [],
        celebration=pick_celebration(current, previous),
        drops=find_drops(current, previous),
        high_spread=high_spread(current, exclude=lowest_ids),
        signals_worth_discussing=signals_worth_discussing(current),
    )
