"""
Domain Models
"""

from .preferences import (
    BodyWeightUnit,
    StrengthTrainingUnit,
    BodyMeasurementUnit,
    DistanceUnit,
    UnitSystem,
    UNIT_FIELDS,
    METRIC_UNITS,
    IMPERIAL_UNITS,
    DEFAULT_USER_PREFERENCES,
    UserPreferences,
    UserPreferencesData,
    UserPreferencesUpdate,
    OnboardingPreferences,
    create_default,
    default_view,
    validate_preferences,
    classify_units,
    is_metric_system,
    is_imperial_system,
    parse_unit,
)

__all__ = [
    "BodyWeightUnit",
    "StrengthTrainingUnit",
    "BodyMeasurementUnit",
    "DistanceUnit",
    "UnitSystem",
    "UNIT_FIELDS",
    "METRIC_UNITS",
    "IMPERIAL_UNITS",
    "DEFAULT_USER_PREFERENCES",
    "UserPreferences",
    "UserPreferencesData",
    "UserPreferencesUpdate",
    "OnboardingPreferences",
    "create_default",
    "default_view",
    "validate_preferences",
    "classify_units",
    "is_metric_system",
    "is_imperial_system",
    "parse_unit",
]
