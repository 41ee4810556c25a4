# teamtemp/services/views.py
"""
Armado de las vistas (dashboard, retro, analytics, admin) a partir de los
agregados. Aquí vive el umbral de anonimato: una ronda con menos de
`min_responses_to_show` envíos no se muestra.
"""
from __future__ import annotations

from uuid import UUID

from teamtemp.core.config import settings as app_settings
from teamtemp.core.errors import NotFound
from teamtemp.schemas.insights import QuestionAggregate
from teamtemp.schemas.records import Team
from teamtemp.schemas.views import (
    AdminLoadOut,
    AdminRoundOut,
    AnalyticsOut,
    AnalyticsRound,
    CommentOut,
    DashboardOut,
    DataPoint,
    FreeTextOut,
    QuestionAnalytics,
    QuestionBrief,
    QuestionCard,
    RetroOut,
    RoundScore,
    RoundSummaryRow,
    SetItemOut,
    SettingsOut,
    TeamBrief,
)
from teamtemp.services import trends
from teamtemp.services.aggregation import (
    distribution,
    get_previous_closed_round,
    get_round_aggregates,
    get_team_aggregates,
    round2,
)
from teamtemp.services.check_in import check_in_question
from teamtemp.services.normalizer import scale_labels
from teamtemp.services.questions import question_set_items
from teamtemp.services.teams import get_settings
from teamtemp.storage.base import StorageAccessor

RETRO_TOP = 3

QUESTIONS_TO_ASK = [
    "What might be behind this signal?",
    "Is this something we can influence, or is it coming from outside the team?",
    "Has anyone noticed this shifting recently?",
    "What would 'slightly better' look like here?",
]

EXPERIMENTS = [
    "Try one small change for the next two weeks, then check again.",
    "Have one person own this topic and report back next round.",
    "Schedule a 15-minute chat to dig deeper before the next temperature check.",
    "Write down one concrete thing the team could start, stop, or keep doing.",
]


def _data_point(a: QuestionAggregate) -> DataPoint:
    return DataPoint(
        round_id=a.round_id,
        round_created_at=a.round_created_at,
        scale_max=a.scale_max,
        avg=a.avg,
        norm_avg=trends.norm_avg(a),
        spread=a.spread,
        norm_spread=trends.norm_spread(a),
        count=a.count,
        values=a.values,
        distribution=distribution(a.values, a.scale_max),
    )


# ---------------- dashboard ----------------

def build_dashboard(store: StorageAccessor, team: Team, limit_rounds: int | None = None) -> DashboardOut:
    team_settings = get_settings(store, team.id)
    min_responses = team_settings.min_responses_to_show

    aggregates = get_team_aggregates(store, team.id, limit_rounds or app_settings.DASHBOARD_ROUNDS)
    closed = store.list_rounds(team.id, status="closed")
    visible = {r.id for r in closed if store.count_submissions(r.id) >= min_responses}
    aggregates = [a for a in aggregates if a.round_id in visible]

    rotating_ids = {
        item.question_id for item, _ in question_set_items(store, team.id) if item.kind == "rotating_pool"
    }

    cards = []
    for question_id, points in trends.series_by_question(aggregates).items():
        latest = points[-1]
        cards.append(QuestionCard(
            question_id=question_id,
            question_text=latest.question_text,
            is_rotating=question_id in rotating_ids,
            mixed_signals=trends.is_mixed_signals(latest),
            scale_labels=scale_labels(latest.scale_max),
            data_points=[_data_point(p) for p in points],
        ))

    movers = trends.top_movers(trends.question_deltas(aggregates))
    return DashboardOut(
        team_name=team.name,
        team_slug=team.slug,
        scale_max=team_settings.scale_max,
        has_enough_data=bool(visible),
        min_responses=min_responses,
        question_cards=cards,
        increases=movers.increases,
        decreases=movers.decreases,
        last_round_id=closed[0].id if closed else None,
    )


# ---------------- retro ----------------

def build_retro(store: StorageAccessor, team: Team, round_id: UUID) -> RetroOut:
    round_ = store.get_round(round_id)
    if not round_ or round_.team_id != team.id:
        raise NotFound("Round not found")

    min_responses = get_settings(store, team.id).min_responses_to_show
    count = store.count_submissions(round_id)
    base = dict(
        team_name=team.name,
        round_id=round_.id,
        round_created_at=round_.created_at,
        min_responses=min_responses,
        response_count=count,
    )
    if count < min_responses:
        return RetroOut(enough_responses=False, **base)

    current = get_round_aggregates(store, round_id)
    prev_id = get_previous_closed_round(store, round_id)
    previous = get_round_aggregates(store, prev_id) if prev_id else []
    prev_by_q = {p.question_id: p for p in previous}

    report = trends.derive_trend([*previous, *current])

    scores = []
    for a in current:
        p = prev_by_q.get(a.question_id)
        delta = trends.consecutive_delta(p, a) if p else None
        scores.append(RoundScore(
            question_id=a.question_id, question_text=a.question_text,
            avg=a.avg, scale_max=a.scale_max, delta=delta,
        ))

    prev_scale = previous[0].scale_max if previous else round_.scale_max

    return RetroOut(
        enough_responses=True,
        check_in_question=check_in_question(round_.id),
        previous_round_id=prev_id,
        scale_max=round_.scale_max,
        scale_changed=prev_scale != round_.scale_max,
        round_scores=scores,
        celebration=report.celebration,
        drops=report.drops[:RETRO_TOP],
        high_spread=report.high_spread[:RETRO_TOP],
        signals_worth_discussing=report.signals_worth_discussing,
        questions_to_ask=QUESTIONS_TO_ASK,
        experiments=EXPERIMENTS,
        free_texts=[FreeTextOut(text=ft.text, created_at=ft.created_at) for ft in store.list_free_texts(round_id)],
        **base,
    )


# ---------------- analytics ----------------

def build_analytics(store: StorageAccessor, team: Team, limit_rounds: int | None = None) -> AnalyticsOut:
    aggregates = get_team_aggregates(store, team.id, limit_rounds or app_settings.ANALYTICS_ROUNDS)
    questions = [
        QuestionAnalytics(
            question_id=question_id,
            question_text=points[-1].question_text,
            rounds=[
                AnalyticsRound(
                    round_id=a.round_id,
                    round_date=a.round_created_at,
                    scale_max=a.scale_max,
                    avg=a.avg,
                    norm_avg=round2(trends.norm_avg(a)),
                    spread=a.spread,
                    norm_spread=round2(trends.norm_spread(a)),
                    count=a.count,
                    distribution=distribution(a.values, a.scale_max),
                )
                for a in points
            ],
        )
        for question_id, points in trends.series_by_question(aggregates).items()
    ]
    return AnalyticsOut(current_scale_max=get_settings(store, team.id).scale_max, questions=questions)


# ---------------- admin ----------------

def build_admin_load(store: StorageAccessor, team: Team) -> AdminLoadOut:
    team_settings = get_settings(store, team.id)

    fixed, rotating = [], []
    for item, q in question_set_items(store, team.id):
        out = SetItemOut(
            id=item.id,
            question_id=item.question_id,
            kind=item.kind,
            position=item.position,
            question=QuestionBrief.model_validate(q, from_attributes=True) if q else None,
        )
        (fixed if item.kind == "fixed" else rotating).append(out)

    rounds = []
    for r in store.list_rounds(team.id):
        summary = []
        if r.status == "closed":
            summary = [
                RoundSummaryRow(question_text=a.question_text, avg=a.avg, count=a.count)
                for a in get_round_aggregates(store, r.id)
            ]
        rounds.append(AdminRoundOut(
            **r.model_dump(include={"id", "token", "status", "scale_max", "opens_at", "closes_at", "created_at"}),
            response_count=store.count_submissions(r.id),
            summary=summary,
        ))

    return AdminLoadOut(
        team=TeamBrief(name=team.name, slug=team.slug),
        settings=SettingsOut.model_validate(team_settings, from_attributes=True),
        fixed_items=fixed,
        rotating_items=rotating,
        rounds=rounds,
    )


def list_comments(store: StorageAccessor, team: Team) -> list[CommentOut]:
    """Texto libre de todas las rondas cerradas, más reciente primero."""
    out = []
    for r in store.list_rounds(team.id, status="closed"):
        out.extend(
            CommentOut(text=ft.text, created_at=ft.created_at, round_id=r.id, round_date=r.created_at)
            for ft in store.list_free_texts(r.id)
        )
    out.sort(key=lambda c: c.created_at, reverse=True)
    return out
