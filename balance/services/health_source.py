"""Health data sources: named mock scenarios and randomised readings."""
from __future__ import annotations

import asyncio
import logging
import random
import re
from enum import Enum
from typing import Protocol

from balance.models.schemas import HealthData, utcnow


logger = logging.getLogger(__name__)


class HealthDataSource(Protocol):
    async def fetch_health_data(self) -> HealthData:
        ...


class MockScenario(str, Enum):
    WELL_RESTED = "well_rested"
    STRESSED = "stressed"
    VERY_ACTIVE = "very_active"
    SEDENTARY = "sedentary"
    OPTIMAL = "optimal"


# heart rate samples, sleep hours, steps, active minutes
SCENARIO_READINGS: dict[MockScenario, tuple[list[float], float, float, float]] = {
    MockScenario.WELL_RESTED: ([68, 70, 69, 71, 67, 72, 70, 68, 69, 71], 8.2, 8500, 45),
    MockScenario.STRESSED: ([85, 88, 90, 87, 92, 89, 91, 88, 86, 90], 5.2, 4200, 25),
    MockScenario.VERY_ACTIVE: ([75, 78, 80, 77, 82, 79, 81, 78, 76, 80], 7.5, 15000, 120),
    MockScenario.SEDENTARY: ([65, 66, 64, 67, 65, 66, 64, 65, 66, 67], 7.0, 2500, 15),
    MockScenario.OPTIMAL: ([70, 72, 71, 73, 70, 72, 71, 70, 72, 71], 8.0, 10000, 60),
}


def parse_scenario(value: str | MockScenario | None) -> MockScenario | None:
    """Accept ``well_rested``, ``wellRested`` or ``well-rested`` spellings."""

    if value is None or isinstance(value, MockScenario):
        return value
    text = value.strip().replace("-", "_")
    if "_" not in text:
        text = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", text)
    normalized = text.lower()
    try:
        return MockScenario(normalized)
    except ValueError:
        raise ValueError(
            f"Unknown scenario {value!r}; expected one of {', '.join(s.value for s in MockScenario)}"
        ) from None


def scenario_health_data(scenario: MockScenario) -> HealthData:
    heart_rate, sleep, steps, active = SCENARIO_READINGS[scenario]
    return HealthData(
        heart_rate_samples=list(heart_rate),
        sleep_hours=sleep,
        step_count=steps,
        active_minutes=active,
        timestamp=utcnow(),
    )


class MockHealthDataSource:
    """Deterministic scenario data, or plausible random readings.

    The random mode fetches each metric separately and joins them, the way a
    platform integration queries heart rate, sleep, steps and activity.
    """

    def __init__(self, scenario: str | MockScenario | None = None, seed: int | None = None) -> None:
        self.scenario = parse_scenario(scenario)
        self._random = random.Random(seed)

    async def fetch_health_data(self) -> HealthData:
        if self.scenario is not None:
            logger.debug("Using mock scenario %s", self.scenario.value)
            return scenario_health_data(self.scenario)

        heart_rate, sleep, steps, active = await asyncio.gather(
            self.fetch_heart_rate(),
            self.fetch_sleep_hours(days=7),
            self.fetch_step_count(days=1),
            self.fetch_active_minutes(),
        )
        return HealthData(
            heart_rate_samples=heart_rate,
            sleep_hours=sleep,
            step_count=steps,
            active_minutes=active,
            timestamp=utcnow(),
        )

    async def fetch_heart_rate(self) -> list[float]:
        base = self._random.uniform(65, 75)
        return [round(base + self._random.uniform(-5, 10), 1) for _ in range(10)]

    async def fetch_sleep_hours(self, days: int = 7) -> float:
        return round(self._random.uniform(6.0, 9.0), 1)

    async def fetch_step_count(self, days: int = 1) -> float:
        return float(round(self._random.uniform(3000, 12000)))

    async def fetch_active_minutes(self) -> float:
        return float(round(self._random.uniform(20, 120)))
