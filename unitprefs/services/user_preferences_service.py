"""
User Preferences Service

Business rules for unit preferences:
- Reads fall back to unpersisted defaults
- Every write is validated before the repository is touched
- Saves route to update (existing record) or atomic upsert (no record)
"""

from typing import Any, Generic, Mapping, Optional, TypeVar

from ..domain.preferences import (
    ADVANCED_LOGGING_FIELD,
    UNIT_FIELDS,
    OnboardingPreferences,
    UserPreferences,
    UserPreferencesData,
    UserPreferencesUpdate,
    create_default,
    default_view,
    validate_preferences,
)
from ..exceptions import (
    InvalidPreferencesError,
    PreferencesNotFoundError,
    PreferencesServiceError,
)
from ..repositories.user_preferences_repository import UserPreferencesRepository
from ..utils.logging_config import get_logger

logger = get_logger("service")

T = TypeVar("T")

UPDATABLE_FIELDS = (*UNIT_FIELDS, ADVANCED_LOGGING_FIELD)


class LookupResult(Generic[T]):
    """Outcome of a lookup: either a value or the error that prevented it"""

    def __init__(self, value: Optional[T] = None, error: Optional[Exception] = None):
        self.value = value
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        """Value on success, default when the lookup failed"""
        return self.value if self.ok else default

    def __repr__(self):
        if self.ok:
            return f"<LookupResult(value={self.value!r})>"
        return f"<LookupResult(error={self.error!r})>"


class UserPreferencesService:
    """Service for managing unit preferences and the advanced logging toggle"""

    def __init__(self, repository: UserPreferencesRepository):
        self.repository = repository

    async def get_preferences(self, user_id: str) -> UserPreferences:
        """
        Get user preferences, or unpersisted defaults if none exist

        Args:
            user_id: User ID

        Returns:
            Stored preferences, or defaults with an empty id

        Raises:
            PreferencesServiceError: If the repository fails
        """
        try:
            existing = await self.repository.find_by_user_id(user_id)
        except Exception as e:
            logger.error(f"Error getting user preferences for {user_id}: {e}")
            raise PreferencesServiceError("Failed to get user preferences") from None

        if existing:
            return existing

        logger.debug(f"No preferences stored for {user_id}, returning defaults")
        return default_view(user_id)

    async def create_preferences(self, user_id: str, onboarding_data: OnboardingPreferences) -> UserPreferences:
        """
        Save the unit choices made during onboarding

        Advanced logging is always off for new users. The write is an
        upsert, so repeating onboarding updates the existing record.

        Args:
            user_id: User ID
            onboarding_data: All four unit choices

        Returns:
            The stored preferences

        Raises:
            InvalidPreferencesError: If a unit is missing or invalid
        """
        defaults = create_default(user_id)

        missing = [field for field in UNIT_FIELDS if onboarding_data.get(field) is None]
        if missing or not validate_preferences(onboarding_data):
            logger.error(f"Rejected onboarding preferences for {user_id} (missing: {missing})")
            raise InvalidPreferencesError("Invalid preferences data")

        preferences_data = UserPreferencesData(
            **{
                **defaults,
                **{field: onboarding_data[field] for field in UNIT_FIELDS},
                ADVANCED_LOGGING_FIELD: False,
            }
        )

        try:
            created = await self.repository.upsert_by_user(user_id, preferences_data)
        except Exception as e:
            logger.error(f"Error creating user preferences for {user_id}: {e}")
            raise

        logger.info(f"Saved onboarding preferences for {user_id} ({created.unit_system.value})")
        return created

    async def update_preferences(self, user_id: str, update_data: UserPreferencesUpdate) -> UserPreferences:
        """
        Update user preferences, creating them from defaults if none exist

        Args:
            user_id: User ID
            update_data: Fields to change; absent fields keep their value

        Returns:
            The stored preferences after the update

        Raises:
            InvalidPreferencesError: If a present field is invalid
            PreferencesServiceError: If the updated record cannot be re-read
        """
        defaults = create_default(user_id)

        if not validate_preferences(update_data):
            logger.error(f"Rejected preferences update for {user_id}: {dict(update_data)}")
            raise InvalidPreferencesError("Invalid preferences data")

        changes = _present_fields(update_data)

        try:
            existing = await self.repository.find_by_user_id(user_id)

            if existing is None:
                return await self.repository.upsert_by_user(user_id, UserPreferencesData(**{**defaults, **changes}))

            await self.repository.update(existing.id, changes)

            # update() does not return the row
            updated = await self.repository.find_by_id(existing.id)
            if updated is None:
                raise PreferencesServiceError("Failed to retrieve updated preferences")

            return updated

        except Exception as e:
            logger.error(f"Error updating user preferences for {user_id}: {e}")
            raise

    async def delete_preferences(self, user_id: str) -> None:
        """
        Delete user preferences

        Raises:
            PreferencesNotFoundError: If the user has no preferences
        """
        try:
            existing = await self.repository.find_by_user_id(user_id)
            if existing is None:
                raise PreferencesNotFoundError("User preferences not found")

            await self.repository.delete(existing.id)

        except Exception as e:
            logger.error(f"Error deleting user preferences for {user_id}: {e}")
            raise

        logger.info(f"Deleted preferences for {user_id}")

    async def lookup_advanced_logging(self, user_id: str) -> LookupResult[bool]:
        """
        Look up the advanced logging flag

        A user without preferences reads as disabled. A repository failure
        is returned inside the result instead of being raised.
        """
        try:
            preferences = await self.repository.find_by_user_id(user_id)
        except Exception as e:
            logger.warning(f"Error checking advanced logging status for {user_id}: {e}")
            return LookupResult(error=e)

        return LookupResult(value=bool(preferences and preferences.advanced_logging_enabled))

    async def is_advanced_logging_enabled(self, user_id: str) -> bool:
        """True only if stored preferences enable advanced logging"""
        result = await self.lookup_advanced_logging(user_id)
        # Fail-safe: an unreadable backend means advanced logging is off
        return result.value_or(False)


def _present_fields(data: Mapping[str, Any]) -> UserPreferencesUpdate:
    """Keep only updatable fields that carry a value"""
    return UserPreferencesUpdate(
        **{field: data[field] for field in UPDATABLE_FIELDS if data.get(field) is not None}
    )
