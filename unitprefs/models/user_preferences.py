"""
User Preferences Model
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime

from ..database import Base
from ..domain.preferences import DEFAULT_USER_PREFERENCES, utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class UserPreferenceRecord(Base):
    """Model for storing a user's unit choices (one row per user)"""

    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, unique=True, index=True)

    # Units stored as their short string values (kg, lbs, cm, in, km, mi)
    body_weight_unit = Column(String(8), nullable=False, default=DEFAULT_USER_PREFERENCES["body_weight_unit"].value)
    strength_training_unit = Column(String(8), nullable=False, default=DEFAULT_USER_PREFERENCES["strength_training_unit"].value)
    body_measurement_unit = Column(String(8), nullable=False, default=DEFAULT_USER_PREFERENCES["body_measurement_unit"].value)
    distance_unit = Column(String(8), nullable=False, default=DEFAULT_USER_PREFERENCES["distance_unit"].value)

    advanced_logging_enabled = Column(Boolean, nullable=False, default=False)

    # Python-side timestamps keep sub-second resolution on SQLite
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<UserPreferenceRecord(user_id='{self.user_id}', id='{self.id}')>"


# Writable columns, shared by the entity and the table
PREFERENCE_COLUMNS = (
    "user_id",
    "body_weight_unit",
    "strength_training_unit",
    "body_measurement_unit",
    "distance_unit",
    "advanced_logging_enabled",
)
