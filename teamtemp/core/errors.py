# teamtemp/core/errors.py
"""
Errores de dominio. Los servicios los lanzan; main.py los traduce a HTTP.
Los datos vacíos (una pregunta sin respuestas) NO son error: el agregado
simplemente no aparece.
"""
from __future__ import annotations


class TeamTempError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(TeamTempError):
    status_code = 404


class NoDefaultQuestionSet(NotFound):
    def __init__(self, team_id):
        super().__init__(f"Team {team_id} has no default question set")
        self.team_id = team_id


class InvalidState(TeamTempError):
    status_code = 409


class InvalidAnswer(TeamTempError):
    status_code = 422


class Unauthorized(TeamTempError):
    status_code = 403
