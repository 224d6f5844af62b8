"""
Database Models
"""

from .user_preferences import UserPreferenceRecord, PREFERENCE_COLUMNS

__all__ = [
    "UserPreferenceRecord",
    "PREFERENCE_COLUMNS",
]
