"""
User Preference Domain Model

Units a user records and reads training data in:
- Body weight tracking and display
- Strength training loads
- Body measurements (height, circumferences)
- Distances (running, walking, cycling)
plus the advanced logging toggle.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, TypedDict

from ..exceptions import InvalidPreferencesError, PreferencesParseError


class BodyWeightUnit(str, Enum):
    """Units for body weight"""
    KILOGRAMS = "kg"
    POUNDS = "lbs"


class StrengthTrainingUnit(str, Enum):
    """Units for strength training loads"""
    KILOGRAMS = "kg"
    POUNDS = "lbs"


class BodyMeasurementUnit(str, Enum):
    """Units for body measurements"""
    CENTIMETERS = "cm"
    INCHES = "in"


class DistanceUnit(str, Enum):
    """Units for distances"""
    KILOMETERS = "km"
    MILES = "mi"


class UnitSystem(str, Enum):
    """Overall classification of a set of unit choices"""
    METRIC = "metric"
    IMPERIAL = "imperial"
    MIXED = "mixed"


# Field name -> enum of allowed values
UNIT_FIELDS = MappingProxyType({
    "body_weight_unit": BodyWeightUnit,
    "strength_training_unit": StrengthTrainingUnit,
    "body_measurement_unit": BodyMeasurementUnit,
    "distance_unit": DistanceUnit,
})

METRIC_UNITS = MappingProxyType({
    "body_weight_unit": BodyWeightUnit.KILOGRAMS,
    "strength_training_unit": StrengthTrainingUnit.KILOGRAMS,
    "body_measurement_unit": BodyMeasurementUnit.CENTIMETERS,
    "distance_unit": DistanceUnit.KILOMETERS,
})

IMPERIAL_UNITS = MappingProxyType({
    "body_weight_unit": BodyWeightUnit.POUNDS,
    "strength_training_unit": StrengthTrainingUnit.POUNDS,
    "body_measurement_unit": BodyMeasurementUnit.INCHES,
    "distance_unit": DistanceUnit.MILES,
})

ADVANCED_LOGGING_FIELD = "advanced_logging_enabled"

# Defaults follow the metric system
DEFAULT_USER_PREFERENCES = MappingProxyType({
    **METRIC_UNITS,
    ADVANCED_LOGGING_FIELD: False,
})


class UserPreferencesData(TypedDict):
    """Payload for creating or upserting a record"""
    user_id: str
    body_weight_unit: BodyWeightUnit
    strength_training_unit: StrengthTrainingUnit
    body_measurement_unit: BodyMeasurementUnit
    distance_unit: DistanceUnit
    advanced_logging_enabled: bool


class UserPreferencesUpdate(TypedDict, total=False):
    """Partial update; only the keys present are written"""
    body_weight_unit: BodyWeightUnit
    strength_training_unit: StrengthTrainingUnit
    body_measurement_unit: BodyMeasurementUnit
    distance_unit: DistanceUnit
    advanced_logging_enabled: bool


class OnboardingPreferences(TypedDict):
    """Unit choices collected during onboarding (no advanced logging)"""
    body_weight_unit: BodyWeightUnit
    strength_training_unit: StrengthTrainingUnit
    body_measurement_unit: BodyMeasurementUnit
    distance_unit: DistanceUnit


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_unit(field: str, value: Any) -> Enum:
    """
    Parse a raw value into the enum declared for a unit field

    Args:
        field: Unit field name (e.g. "distance_unit")
        value: Raw value (enum member or its string value)

    Returns:
        Enum member

    Raises:
        PreferencesParseError: If the value is not a member of the field's set
    """
    enum_cls = UNIT_FIELDS[field]
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        raise PreferencesParseError(field, value) from None


def _is_member(field: str, value: Any) -> bool:
    try:
        parse_unit(field, value)
    except PreferencesParseError:
        return False
    return True


def validate_preferences(preferences: Mapping[str, Any]) -> bool:
    """
    Check that every present field holds an allowed value

    Absent (or None) fields are ignored so partial updates can be validated;
    an empty mapping is valid.
    """
    for field in UNIT_FIELDS:
        value = preferences.get(field)
        if value is not None and not _is_member(field, value):
            return False

    flag = preferences.get(ADVANCED_LOGGING_FIELD)
    if flag is not None and not isinstance(flag, bool):
        return False

    return True


def create_default(user_id: str) -> UserPreferencesData:
    """
    Build default preferences for a new user (no id, no timestamps)

    Raises:
        InvalidPreferencesError: If user_id is empty or whitespace
    """
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidPreferencesError("User ID is required")

    return UserPreferencesData(user_id=user_id, **DEFAULT_USER_PREFERENCES)


def _as_utc(field: str, value: Any) -> datetime:
    """Convert a stored timestamp into an aware UTC datetime"""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise PreferencesParseError(field, value) from None

    if not isinstance(value, datetime):
        raise PreferencesParseError(field, value)

    # SQLite drops tzinfo; stored values are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class UserPreferences:
    """A user's unit choices and advanced logging flag"""

    id: str
    user_id: str
    body_weight_unit: BodyWeightUnit
    strength_training_unit: StrengthTrainingUnit
    body_measurement_unit: BodyMeasurementUnit
    distance_unit: DistanceUnit
    advanced_logging_enabled: bool
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        for field in UNIT_FIELDS:
            object.__setattr__(self, field, parse_unit(field, getattr(self, field)))

        if not isinstance(self.advanced_logging_enabled, bool):
            raise PreferencesParseError(ADVANCED_LOGGING_FIELD, self.advanced_logging_enabled)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UserPreferences":
        """
        Rebuild preferences from raw persisted column values

        Every unit field is re-validated so a corrupted row fails here
        instead of leaking an unknown unit into the application.

        Args:
            record: Mapping of column name -> stored value

        Returns:
            UserPreferences

        Raises:
            PreferencesParseError: Naming the offending field and value
        """
        flag = record.get(ADVANCED_LOGGING_FIELD)
        if isinstance(flag, int) and not isinstance(flag, bool):
            flag = bool(flag)

        return cls(
            id=str(record["id"]),
            user_id=record["user_id"],
            body_weight_unit=record.get("body_weight_unit"),
            strength_training_unit=record.get("strength_training_unit"),
            body_measurement_unit=record.get("body_measurement_unit"),
            distance_unit=record.get("distance_unit"),
            advanced_logging_enabled=flag,
            created_at=_as_utc("created_at", record.get("created_at")),
            updated_at=_as_utc("updated_at", record.get("updated_at")),
        )

    @property
    def is_persisted(self) -> bool:
        """Defaults synthesized on read carry an empty id"""
        return bool(self.id)

    @property
    def unit_system(self) -> UnitSystem:
        return classify_units(self)

    def to_dict(self) -> Dict:
        data = asdict(self)
        for field in UNIT_FIELDS:
            data[field] = data[field].value
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        data["unit_system"] = self.unit_system.value
        return data


def default_view(user_id: str = "", now: Optional[datetime] = None) -> UserPreferences:
    """
    Synthesize unpersisted default preferences

    The result has an empty id and is never written to storage.
    """
    now = now or utcnow()
    return UserPreferences(
        id="",
        user_id=user_id,
        created_at=now,
        updated_at=now,
        **DEFAULT_USER_PREFERENCES,
    )


def classify_units(preferences: UserPreferences) -> UnitSystem:
    """Metric if all four units are metric, imperial if all four are imperial, else mixed"""
    units = {field: getattr(preferences, field) for field in UNIT_FIELDS}
    if units == dict(METRIC_UNITS):
        return UnitSystem.METRIC
    if units == dict(IMPERIAL_UNITS):
        return UnitSystem.IMPERIAL
    return UnitSystem.MIXED


def is_metric_system(preferences: UserPreferences) -> bool:
    return classify_units(preferences) is UnitSystem.METRIC


def is_imperial_system(preferences: UserPreferences) -> bool:
    return classify_units(preferences) is UnitSystem.IMPERIAL
