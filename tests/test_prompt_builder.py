"""Tests for prompt rendering."""
from balance.models.schemas import HealthData, User
from balance.services.prompt_builder import build_prompt, system_prompt


def test_prompt_contains_formatted_fields(well_rested_health, studying_input):
    user = User(id="user-1", name="Jamie")

    prompt = build_prompt(user, well_rested_health, studying_input)

    assert "Jamie" in prompt
    assert "Average Heart Rate: 69 bpm" in prompt
    assert "Recent Heart Rates: 68, 70, 69, 71, 67 bpm" in prompt
    assert "8.2 hours/night" in prompt
    assert "Today's Steps: 8500" in prompt
    assert "Active Minutes: 45" in prompt
    assert "Activity: Studying" in prompt
    assert "Duration: 1.0 hours" in prompt
    assert "Stress Level: 3/10" in prompt
    assert "Focus Level: 7/10" in prompt


def test_prompt_includes_instruction_block(well_rested_health, studying_input):
    prompt = build_prompt(None, well_rested_health, studying_input)

    assert "focus score from 0-100" in prompt
    assert "3-5 specific, actionable recommendations" in prompt
    assert "anomalies" in prompt


def test_only_five_most_recent_heart_rates_are_listed(studying_input):
    data = HealthData(
        heart_rate_samples=[61.4, 62.6, 63, 64, 65, 99, 98],
        sleep_hours=7,
        step_count=1234.9,
        active_minutes=30.7,
    )

    prompt = build_prompt(None, data, studying_input)

    assert "Recent Heart Rates: 61, 63, 63, 64, 65 bpm" in prompt
    assert "99" not in prompt.split("Recent Heart Rates:")[1].split("\n")[0]
    assert "Today's Steps: 1234" in prompt
    assert "Active Minutes: 30" in prompt
    assert "7.0 hours/night" in prompt


def test_prompt_is_deterministic(well_rested_health, studying_input):
    user = User(id="user-1", name="Jamie")

    assert build_prompt(user, well_rested_health, studying_input) == build_prompt(
        user, well_rested_health, studying_input
    )


def test_missing_name_falls_back_to_default(well_rested_health, studying_input):
    prompt = build_prompt(User(id="user-1", name="  "), well_rested_health, studying_input)

    assert "patterns for User:" in prompt


def test_system_prompt_is_loaded_from_config():
    assert system_prompt().startswith("You are a health and focus analysis assistant.")
