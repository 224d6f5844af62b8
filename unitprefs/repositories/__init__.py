"""
Repositories
"""

from .user_preferences_repository import (
    UserPreferencesRepository,
    SqlAlchemyUserPreferencesRepository,
)

__all__ = [
    "UserPreferencesRepository",
    "SqlAlchemyUserPreferencesRepository",
]
