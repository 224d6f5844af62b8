"""
Test data builders shared across the suite
"""

from datetime import datetime, timezone

from unitprefs.domain.preferences import UserPreferences

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

METRIC_ONBOARDING = {
    "body_weight_unit": "kg",
    "strength_training_unit": "kg",
    "body_measurement_unit": "cm",
    "distance_unit": "km",
}

IMPERIAL_ONBOARDING = {
    "body_weight_unit": "lbs",
    "strength_training_unit": "lbs",
    "body_measurement_unit": "in",
    "distance_unit": "mi",
}


def make_preferences(
    user_id: str = "user-1",
    preferences_id: str = "pref-1",
    advanced_logging_enabled: bool = False,
    **units,
) -> UserPreferences:
    """Build a stored-looking UserPreferences (metric unless overridden)"""
    return UserPreferences(
        id=preferences_id,
        user_id=user_id,
        advanced_logging_enabled=advanced_logging_enabled,
        created_at=NOW,
        updated_at=NOW,
        **{**METRIC_ONBOARDING, **units},
    )
