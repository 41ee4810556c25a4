# teamtemp/services/normalizer.py
"""
Normalización de escala: lleva promedios y dispersiones de una escala 1..N
a [0, 1] para comparar rondas respondidas con escalas distintas.
"""
from __future__ import annotations

# Etiquetas conocidas por tamaño de escala
SCALE_LABELS: dict[int, list[str]] = {
    3: ["Disagree", "Partly", "Agree"],
    4: ["Disagree", "Somewhat disagree", "Somewhat agree", "Agree"],
    5: ["Str. disagree", "Disagree", "Neutral", "Agree", "Str. agree"],
}

SUPPORTED_SCALES = tuple(sorted(SCALE_LABELS))


def normalize_avg(avg: float, scale_max: int) -> float:
    """
    Promedio crudo -> [0, 1].
    Ej.: 2.5 en escala de 3 -> (2.5 - 1) / (3 - 1) = 0.75
    """
    if scale_max <= 1:
        return 0.0
    return (avg - 1) / (scale_max - 1)


def normalize_spread(spread: float, scale_max: int) -> float:
    """
    Desviación estándar cruda -> [0, 1].
    La máxima posible en 1..N es (N - 1) / 2 (mitad en cada extremo).
    """
    if scale_max <= 1:
        return 0.0
    return spread / ((scale_max - 1) / 2)


def scale_labels(n: int) -> list[str]:
    if n in SCALE_LABELS:
        return list(SCALE_LABELS[n])
    if n <= 1:
        return []
    labels = [str(i) for i in range(1, n + 1)]
    labels[0], labels[-1] = "Disagree", "Agree"
    return labels
