"""
Client-side State Stores
"""

from .user_preferences_store import UserPreferencesStore, UserPreferencesState

__all__ = [
    "UserPreferencesStore",
    "UserPreferencesState",
]
