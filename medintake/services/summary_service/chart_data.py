"""Chart-ready records for the doctor report.

Produces plain dicts (camelCase keys) consumed by the report renderer:
symptom timeline, pain heat-map, health radar and weekly episode bars,
wrapped in the doctor hand-off record.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from medintake.shared.models import (
    AIAnalysis,
    HealthMetrics,
    PainLocation,
    Questionnaire,
    Symptom,
)
from .severity import heatmap_color

logger = logging.getLogger(__name__)


ANALYSIS_VERSION = "1.0"

EPISODE_WEEKS = ("Week 1", "Week 2", "Week 3", "Week 4")

# Minimum change in average severity that counts as a trend
TREND_THRESHOLD = 1.0


def symptom_timeline(symptoms: Sequence[Symptom], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """One timeline point per symptom.

    Symptom rows carry no onset date, so every point is dated today.
    """
    day = (today or date.today()).isoformat()
    return [
        {
            "date": day,
            "severity": symptom.severity,
            "symptom": symptom.type,
            "type": "symptom",
        }
        for symptom in symptoms
    ]


def pain_heatmap(pain_locations: Sequence[PainLocation]) -> List[Dict[str, Any]]:
    return [
        {
            "location": pain.location,
            "intensity": pain.severity,
            "episodes": 1,
            "color": heatmap_color(pain.severity),
        }
        for pain in pain_locations
    ]


def health_radar(metrics: HealthMetrics) -> List[Dict[str, Any]]:
    """Six radar dimensions on a 1-10 scale, higher is better.

    Anxiety and stress are inverted (11 - value) to keep that direction.
    """
    dimensions = (
        ("Sleep Quality", metrics.sleep.quality),
        ("Mood", metrics.mood.overall),
        ("Energy Level", metrics.energy.level),
        ("Appetite", metrics.appetite.level),
        ("Anxiety (Inverted)", 11 - metrics.mood.anxiety),
        ("Stress (Inverted)", 11 - metrics.mood.stress),
    )
    return [
        {"dimension": name, "score": score, "maxScore": 10}
        for name, score in dimensions
    ]


def episode_bars(symptoms: Sequence[Symptom]) -> List[Dict[str, Any]]:
    """Spread symptoms over four weekly bars by entry position."""
    bars = []
    for index, week in enumerate(EPISODE_WEEKS):
        in_week = [s for i, s in enumerate(symptoms) if i % len(EPISODE_WEEKS) == index]
        average = sum(s.severity for s in in_week) / len(in_week) if in_week else 0
        bars.append({"week": week, "episodes": len(in_week), "severity": average})
    return bars


def symptom_trends(timeline: Sequence[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Classify each symptom as improving, worsening or stable.

    Compares the average severity of the first seven points with the last
    seven. Symptoms with fewer than two points are stable.
    """
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for point in timeline:
        groups.setdefault(str(point["symptom"]), []).append(point)

    trends: Dict[str, List[str]] = {"improving": [], "worsening": [], "stable": []}
    for symptom, points in groups.items():
        points = sorted(points, key=lambda p: p["date"])
        recent = points[-7:]
        earlier = points[:7]
        if len(recent) < 2 or len(earlier) < 2:
            trends["stable"].append(symptom)
            continue

        change = (
            sum(p["severity"] for p in recent) / len(recent)
            - sum(p["severity"] for p in earlier) / len(earlier)
        )
        if change < -TREND_THRESHOLD:
            trends["improving"].append(symptom)
        elif change > TREND_THRESHOLD:
            trends["worsening"].append(symptom)
        else:
            trends["stable"].append(symptom)
    return trends


def doctor_handoff(
    questionnaire: Questionnaire,
    analysis: AIAnalysis,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the complete chart and hand-off record for one questionnaire.

    Args:
        questionnaire: Submitted questionnaire
        analysis: Oracle or fallback analysis
        now: Generation timestamp (UTC now if omitted)

    Returns:
        Dict with patientSummary, keyFindings, recommendations,
        urgencyLevel, chartData and metadata
    """
    now = now or datetime.now(timezone.utc)
    chart_data = {
        "timeline": symptom_timeline(questionnaire.symptoms, now.date()),
        "heatmap": pain_heatmap(questionnaire.pain_locations),
        "radar": health_radar(questionnaire.health_metrics),
        "episodes": episode_bars(questionnaire.symptoms),
    }

    logger.debug(
        "CHART_DATA_GENERATED",
        extra={
            "timeline_points": len(chart_data["timeline"]),
            "heatmap_points": len(chart_data["heatmap"]),
        }
    )

    return {
        "patientSummary": analysis.summary,
        "keyFindings": list(analysis.key_symptoms),
        "recommendations": list(analysis.recommendations),
        "urgencyLevel": analysis.risk_level.value,
        "chartData": chart_data,
        "metadata": {
            "generatedAt": now.isoformat(),
            "patientId": questionnaire.patient_info.medical_id,
            "analysisVersion": ANALYSIS_VERSION,
        },
    }
