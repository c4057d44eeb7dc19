"""Physiological plausibility checks for health data and self-reported input.

Every rule runs; nothing short-circuits. Issues are reported in check order
(heart rate, sleep, activity, steps / activity, duration, stress, focus).
ERROR issues block the pipeline, WARNING issues are shown to the user only.
"""
from __future__ import annotations

import math

from balance.models.schemas import (
    HealthData,
    Severity,
    UserInput,
    ValidationIssue,
    ValidationResult,
)

MAX_HEART_RATE = 200
ELEVATED_HEART_RATE = 120
LOW_HEART_RATE = 40
MIN_HEART_RATE = 30

MAX_SLEEP_HOURS = 24
LONG_SLEEP_HOURS = 12
SHORT_SLEEP_HOURS = 4

MINUTES_PER_DAY = 1440
HIGH_ACTIVE_MINUTES = 720
HIGH_STEP_COUNT = 100_000

MAX_DURATION_HOURS = 24
EXCESSIVE_DURATION_HOURS = 16
LONG_DURATION_HOURS = 12


def _error(message: str) -> ValidationIssue:
    return ValidationIssue(severity=Severity.ERROR, message=message)


def _warning(message: str) -> ValidationIssue:
    return ValidationIssue(severity=Severity.WARNING, message=message)


def validate_health(data: HealthData) -> ValidationResult:
    """Check a health snapshot against plausible bounds."""

    issues: list[ValidationIssue] = []

    if not all(math.isfinite(rate) for rate in data.heart_rate_samples):
        issues.append(_error("Heart rate readings must be finite numbers"))
    elif data.heart_rate_samples:
        avg_hr = data.average_heart_rate
        if avg_hr > MAX_HEART_RATE:
            issues.append(_error(f"Average heart rate is dangerously high ({avg_hr:.0f} bpm)"))
        elif avg_hr >= ELEVATED_HEART_RATE:
            issues.append(_warning(f"Average heart rate is elevated ({avg_hr:.0f} bpm)"))
        elif avg_hr < MIN_HEART_RATE:
            issues.append(_error(f"Average heart rate is dangerously low ({avg_hr:.0f} bpm)"))
        elif avg_hr <= LOW_HEART_RATE:
            issues.append(_warning(f"Average heart rate is unusually low ({avg_hr:.0f} bpm)"))

    sleep = data.sleep_hours
    if not math.isfinite(sleep):
        issues.append(_error("Sleep duration must be a finite number"))
    elif sleep > MAX_SLEEP_HOURS:
        issues.append(_error("Sleep duration cannot exceed 24 hours"))
    elif sleep > LONG_SLEEP_HOURS:
        issues.append(_warning(f"Sleep duration is unusually long ({sleep:.1f} hours)"))
    elif sleep < 0:
        issues.append(_error("Sleep duration must be positive"))
    elif sleep < SHORT_SLEEP_HOURS:
        issues.append(_warning(f"Sleep duration is very low ({sleep:.1f} hours)"))

    active = data.active_minutes
    if not math.isfinite(active):
        issues.append(_error("Active minutes must be a finite number"))
    elif active < 0:
        issues.append(_error("Active minutes must be positive"))
    elif active > MINUTES_PER_DAY:
        issues.append(_error("Active time cannot exceed 24 hours"))
    elif active > HIGH_ACTIVE_MINUTES:
        issues.append(_warning(f"Active time is unusually high ({active:.0f} minutes)"))

    steps = data.step_count
    if not math.isfinite(steps):
        issues.append(_error("Step count must be a finite number"))
    elif steps < 0:
        issues.append(_error("Step count must be positive"))
    elif steps > HIGH_STEP_COUNT:
        issues.append(_warning(f"Step count is unusually high ({steps:.0f} steps)"))

    return ValidationResult(issues=issues)


def validate_user_input(
    user_input: UserInput,
    long_duration_severity: Severity = Severity.WARNING,
) -> ValidationResult:
    """Check self-reported activity details.

    A duration in (12, 16] hours is always listed; ``long_duration_severity``
    decides whether it blocks.
    """

    issues: list[ValidationIssue] = []

    if not user_input.activity.strip():
        issues.append(_error("Activity description is required"))

    duration = user_input.duration_hours
    if not math.isfinite(duration):
        issues.append(_error("Duration must be a finite number"))
    elif duration <= 0:
        issues.append(_error("Duration must be positive"))
    elif duration > MAX_DURATION_HOURS:
        issues.append(_error("Activity duration cannot exceed 24 hours"))
    elif duration > EXCESSIVE_DURATION_HOURS:
        issues.append(_error("Activity duration over 16 hours is not realistic"))
    elif duration > LONG_DURATION_HOURS:
        issues.append(
            ValidationIssue(
                severity=long_duration_severity,
                message=f"Activity duration is unusually long ({duration:.1f} hours)",
            )
        )

    if not 1 <= user_input.stress_level <= 10:
        issues.append(_error("Stress level must be between 1-10"))

    if not 1 <= user_input.focus_level <= 10:
        issues.append(_error("Focus level must be between 1-10"))

    return ValidationResult(issues=issues)
