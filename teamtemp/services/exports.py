# teamtemp/services/exports.py
"""Exportaciones CSV / XLSX de las estadísticas por ronda y pregunta."""
from __future__ import annotations

import csv
import io
from io import BytesIO
from typing import Iterator

from openpyxl import Workbook

from teamtemp.core.config import settings as app_settings
from teamtemp.schemas.records import Team
from teamtemp.services import trends
from teamtemp.services.aggregation import distribution, get_team_aggregates, round2
from teamtemp.services.views import list_comments
from teamtemp.storage.base import StorageAccessor

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

STATS_HEADERS = [
    "round_id", "round_date", "question_id", "question_text", "scale_max",
    "count", "avg", "spread", "norm_avg", "norm_spread", "distribution",
]


def round_stats_rows(store: StorageAccessor, team: Team) -> list[list]:
    """Una fila por (ronda, pregunta), ronda más reciente primero."""
    rows = []
    for a in get_team_aggregates(store, team.id, app_settings.ANALYTICS_ROUNDS):
        rows.append([
            str(a.round_id),
            a.round_created_at.isoformat(),
            str(a.question_id),
            a.question_text,
            a.scale_max,
            a.count,
            a.avg,
            a.spread,
            round2(trends.norm_avg(a)),
            round2(trends.norm_spread(a)),
            " ".join(str(c) for c in distribution(a.values, a.scale_max)),
        ])
    return rows


def stream_round_stats_csv(store: StorageAccessor, team: Team) -> Iterator[str]:
    # Las filas se leen antes de devolver el generador: la sesión de BD
    # puede cerrarse antes de que termine el streaming
    rows = round_stats_rows(store, team)

    def stream():
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(STATS_HEADERS); yield output.getvalue(); output.seek(0); output.truncate(0)
        for row in rows:
            writer.writerow(row); yield output.getvalue(); output.seek(0); output.truncate(0)

    return stream()


def build_team_workbook(store: StorageAccessor, team: Team) -> bytes:
    rows = round_stats_rows(store, team)
    rounds = store.list_rounds(team.id)

    wb = Workbook()
    ws_sum = wb.active; ws_sum.title = "Summary"
    ws_sum.append(["team", "slug", "rounds", "closed_rounds", "submissions"])
    ws_sum.append([
        team.name,
        team.slug,
        len(rounds),
        sum(1 for r in rounds if r.status == "closed"),
        sum(store.count_submissions(r.id) for r in rounds),
    ])

    ws_q = wb.create_sheet("Questions")
    ws_q.append(STATS_HEADERS)
    for row in rows:
        ws_q.append(row)

    ws_c = wb.create_sheet("Comments")
    ws_c.append(["round_id", "round_date", "created_at", "text"])
    for c in list_comments(store, team):
        ws_c.append([str(c.round_id), c.round_date.isoformat(), c.created_at.isoformat(), c.text])

    buf = BytesIO(); wb.save(buf)
    return buf.getvalue()
