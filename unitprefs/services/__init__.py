"""
Services
"""

from .user_preferences_service import UserPreferencesService, LookupResult

__all__ = [
    "UserPreferencesService",
    "LookupResult",
]
