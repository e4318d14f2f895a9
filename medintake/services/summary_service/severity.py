"""Deterministic severity, unit and PHQ-9 helpers.

Source: PHQ-9 scoring guidelines
https://www.apa.org/depression-guideline/patient-health-questionnaire.pdf
"""
from typing import Mapping, Union

from medintake.shared.models import (
    DepressionBand,
    HealthMetrics,
    PHQ9_ITEMS,
    PHQ9Response,
    SeverityCategory,
)


# Weights for the single overall health score shown on the report
HEALTH_SCORE_WEIGHTS = {
    "sleep": 0.3,
    "mood": 0.25,
    "energy": 0.25,
    "appetite": 0.2,
}

# Body heat-map colors by pain severity ceiling
HEATMAP_COLORS = (
    (3, "#10B981"),     # Green
    (6, "#F59E0B"),     # Yellow
    (8, "#F97316"),     # Orange
    (10, "#DC2626"),    # Red
)


def severity_category(value: int) -> SeverityCategory:
    """Bucket a 1-10 severity for display.

    Raises:
        ValueError: If value is outside 1-10
    """
    if not 1 <= value <= 10:
        raise ValueError(f"Severity must be 1-10, got {value}")
    if value <= 3:
        return SeverityCategory.LOW
    if value <= 6:
        return SeverityCategory.MODERATE
    return SeverityCategory.SEVERE


def format_unit(unit: str, count: int) -> str:
    """Singular or plural form of a duration unit.

    Units are stored as "word(s)". Units without that suffix fall back to
    naive trailing-s handling.

    Example:
        >>> format_unit("day(s)", 1), format_unit("day(s)", 3)
        ('day', 'days')
    """
    if unit.endswith("(s)"):
        base = unit[:-len("(s)")]
        return base if count == 1 else f"{base}s"
    if count == 1:
        return unit[:-1] if unit.endswith("s") else unit
    return unit if unit.endswith("s") else f"{unit}s"


def phq9_score(responses: Union[PHQ9Response, Mapping[str, int]]) -> int:
    """Sum of items q1-q9 (0-27). The difficulty item is not scored."""
    if isinstance(responses, PHQ9Response):
        return responses.score
    total = 0
    for item in PHQ9_ITEMS:
        value = responses.get(item, 0)
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        total += value
    return total


def phq9_band(score: int) -> DepressionBand:
    if score >= 15:
        return DepressionBand.SEVERE
    if score >= 10:
        return DepressionBand.MODERATE
    if score >= 5:
        return DepressionBand.MILD
    return DepressionBand.MINIMAL


def heatmap_color(severity: int) -> str:
    for ceiling, color in HEATMAP_COLORS:
        if severity <= ceiling:
            return color
    return HEATMAP_COLORS[-1][1]


def health_score(metrics: HealthMetrics) -> int:
    """Weighted 1-10 score over sleep quality, mood, energy and appetite."""
    scores = {
        "sleep": metrics.sleep.quality,
        "mood": metrics.mood.overall,
        "energy": metrics.energy.level,
        "appetite": metrics.appetite.level,
    }
    total = sum(scores[key] * weight for key, weight in HEALTH_SCORE_WEIGHTS.items())
    # Halves round up
    return int(total + 0.5)
