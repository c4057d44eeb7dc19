"""Render the focus-analysis prompt from validated inputs."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from balance.models.schemas import HealthData, User, UserInput

PROMPT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "prompts" / "focus_analysis.yaml"


@lru_cache()
def load_prompt_config(path: Path = PROMPT_CONFIG_PATH) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def system_prompt() -> str:
    return load_prompt_config()["system_prompt"]


def build_prompt(user: User | None, health_data: HealthData, user_input: UserInput) -> str:
    """Fill the prompt template.

    Heart rates, steps and active minutes render as integers; sleep and
    duration with one decimal place. Only the first few heart-rate readings
    (most recent as supplied) are listed.
    """

    config = load_prompt_config()
    limit = int(config.get("max_recent_heart_rates", 5))
    recent = health_data.heart_rate_samples[:limit]
    user_name = (user.name.strip() if user else "") or config.get("default_user_name", "User")

    return config["template"].format(
        user_name=user_name,
        average_heart_rate=f"{health_data.average_heart_rate:.0f}",
        recent_heart_rates=", ".join(f"{rate:.0f}" for rate in recent) or "none",
        sleep_hours=f"{health_data.sleep_hours:.1f}",
        step_count=int(health_data.step_count),
        active_minutes=int(health_data.active_minutes),
        activity=user_input.activity.strip(),
        duration_hours=f"{user_input.duration_hours:.1f}",
        stress_level=user_input.stress_level,
        focus_level=user_input.focus_level,
    )
