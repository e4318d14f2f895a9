"""Summary Service: deterministic report text and chart records.

Nothing here calls the oracle. The narrative summary doubles as the
fallback patient summary when the oracle is unavailable.

Components:
- severity.py: severity buckets, duration units, PHQ-9 scoring, health score
- narrative.py: patient summary paragraph
- chart_data.py: timeline, heat-map, radar and episode records
- report_link.py: stateless report URL hand-off
"""

from .severity import (
    format_unit,
    health_score,
    heatmap_color,
    phq9_band,
    phq9_score,
    severity_category,
)
from .narrative import build_narrative_summary, describe_symptom, filled_items
from .chart_data import doctor_handoff, symptom_trends
from .report_link import build_report_link, parse_report_link

__all__ = [
    "format_unit",
    "health_score",
    "heatmap_color",
    "phq9_band",
    "phq9_score",
    "severity_category",
    "build_narrative_summary",
    "describe_symptom",
    "filled_items",
    "doctor_handoff",
    "symptom_trends",
    "build_report_link",
    "parse_report_link",
]
