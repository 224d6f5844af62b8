"""
Dependency Injection
FastAPI dependencies and session wiring for the preferences services
"""

from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from .database import AsyncSessionLocal
from .repositories.user_preferences_repository import (
    UserPreferencesRepository,
    SqlAlchemyUserPreferencesRepository,
)
from .services.user_preferences_service import UserPreferencesService
from .store.user_preferences_store import UserPreferencesStore

# Global service instance (initialized on startup)
_preferences_service = None


def init_services():
    """Initialize services (called on app startup)"""
    global _preferences_service

    _preferences_service = UserPreferencesService(SqlAlchemyUserPreferencesRepository(AsyncSessionLocal))


async def get_preferences_service() -> UserPreferencesService:
    """Get preferences service instance"""
    if _preferences_service is None:
        init_services()
    return _preferences_service


def build_preferences_store(
    repository: Optional[UserPreferencesRepository] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> UserPreferencesStore:
    """
    Build the preferences store for one application session

    Args:
        repository: Repository to use (defaults to SQLAlchemy on session_factory)
        session_factory: Session factory for the default repository

    Returns:
        A fresh store wired to its own service
    """
    if repository is None:
        repository = SqlAlchemyUserPreferencesRepository(session_factory or AsyncSessionLocal)
    return UserPreferencesStore(UserPreferencesService(repository))
