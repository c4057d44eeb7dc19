"""Best-effort extraction of a focus score and recommendations from model text."""
from __future__ import annotations

import re

from balance.models.schemas import FocusAnalysis

DEFAULT_SCORE = 50.0
MAX_RECOMMENDATIONS = 5
MIN_RECOMMENDATION_LENGTH = 10

_NUMBER = r"(\d+(?:\.\d+)?)"
# Optional colon, whitespace and markdown emphasis between a label and its value
_LABEL_SEP = r"[*_]*:?[*_\s]*"

# Priority order matters: the first pattern that matches anywhere wins.
SCORE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"focus\s+score{_LABEL_SEP}{_NUMBER}", re.IGNORECASE),
    re.compile(rf"score{_LABEL_SEP}{_NUMBER}", re.IGNORECASE),
    re.compile(rf"{_NUMBER}\s*/\s*100"),
    re.compile(rf"{_NUMBER}\s*%"),
)

_LIST_MARKER = re.compile(r"^(?:\d+\.|[•\-*])\s*")

FALLBACK_RECOMMENDATIONS: tuple[str, ...] = (
    "Continue monitoring your health metrics",
    "Maintain consistent sleep schedule",
    "Take regular breaks during focused work",
)


def clamp_score(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def parse_score(text: str) -> float:
    for pattern in SCORE_PATTERNS:
        match = pattern.search(text)
        if match:
            return clamp_score(float(match.group(1)))
    return DEFAULT_SCORE


def parse_recommendations(text: str) -> list[str]:
    """Collect numbered or bulleted lines, in order, capped at five."""

    recommendations: list[str] = []
    for line in text.splitlines():
        trimmed = line.strip()
        marker = _LIST_MARKER.match(trimmed)
        if not marker:
            continue
        cleaned = trimmed[marker.end():].strip()
        if len(cleaned) > MIN_RECOMMENDATION_LENGTH:
            recommendations.append(cleaned)

    if not recommendations:
        recommendations = list(FALLBACK_RECOMMENDATIONS)

    return recommendations[:MAX_RECOMMENDATIONS]


def parse_analysis(text: str, user_id: str | None = None) -> FocusAnalysis:
    """Build a freshly stamped :class:`FocusAnalysis` from the raw reply."""

    return FocusAnalysis(
        summary=text.strip(),
        focus_score=parse_score(text),
        recommendations=parse_recommendations(text),
        user_id=user_id,
    )
