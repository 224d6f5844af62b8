"""
User Preferences Repository

Persistence port for user preferences plus its SQLAlchemy implementation.
Records are reachable by their generated id and by the unique user_id.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..database import AsyncSessionLocal
from ..domain.preferences import (
    ADVANCED_LOGGING_FIELD,
    UNIT_FIELDS,
    UserPreferences,
    UserPreferencesData,
    UserPreferencesUpdate,
    parse_unit,
    utcnow,
)
from ..exceptions import (
    DuplicatePreferencesError,
    InvalidPreferencesError,
    PreferencesNotFoundError,
    PreferencesParseError,
    PreferencesPersistenceError,
)
from ..models.user_preferences import UserPreferenceRecord, PREFERENCE_COLUMNS
from ..utils.logging_config import get_logger

logger = get_logger("repository")

# user_id is immutable after creation
UPDATABLE_COLUMNS = tuple(c for c in PREFERENCE_COLUMNS if c != "user_id")

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class UserPreferencesRepository(ABC):
    """Repository interface for user preferences persistence"""

    @abstractmethod
    async def create(self, preferences_data: UserPreferencesData) -> str:
        """
        Create new user preferences

        Returns:
            The generated preferences ID

        Raises:
            DuplicatePreferencesError: If the user already has preferences
        """

    @abstractmethod
    async def find_by_id(self, preferences_id: str) -> Optional[UserPreferences]:
        """Find preferences by ID, None if not found"""

    @abstractmethod
    async def find_by_user_id(self, user_id: str) -> Optional[UserPreferences]:
        """Find preferences by user ID, None if not found"""

    @abstractmethod
    async def update(self, preferences_id: str, update_data: UserPreferencesUpdate) -> None:
        """
        Update only the fields present in update_data

        Raises:
            PreferencesNotFoundError: If no record has this ID
        """

    @abstractmethod
    async def delete(self, preferences_id: str) -> None:
        """
        Delete preferences

        Raises:
            PreferencesNotFoundError: If no record has this ID
        """

    @abstractmethod
    async def upsert_by_user(self, user_id: str, preferences_data: UserPreferencesData) -> UserPreferences:
        """Atomically create or update the user's preferences and return the stored record"""


def _is_unique_violation(error: IntegrityError) -> bool:
    """True if the integrity error comes from a unique constraint"""
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == "23505":
        return True
    return "unique" in str(orig).lower()


def _require_user_id(user_id: Any) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidPreferencesError("User ID is required")
    return user_id


def _to_columns(data: Mapping[str, Any], columns: Iterable[str]) -> Dict[str, Any]:
    """
    Convert entity fields into column values

    Only keys present (and not None) in data are returned, so unset
    fields are left untouched by updates.
    """
    values = {}
    for column in columns:
        value = data.get(column)
        if value is None:
            continue
        if column in UNIT_FIELDS:
            value = parse_unit(column, value).value
        elif column == ADVANCED_LOGGING_FIELD and not isinstance(value, bool):
            raise PreferencesParseError(column, value)
        values[column] = value
    return values


def _to_entity(row: Mapping[str, Any]) -> UserPreferences:
    try:
        return UserPreferences.from_record(row)
    except PreferencesParseError as e:
        logger.error(f"Corrupted preferences row {row.get('id')}: {e}")
        raise


class SqlAlchemyUserPreferencesRepository(UserPreferencesRepository):
    """SQLAlchemy (async) implementation of the preferences repository"""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def create(self, preferences_data: UserPreferencesData) -> str:
        _require_user_id(preferences_data.get("user_id"))
        values = _to_columns(preferences_data, PREFERENCE_COLUMNS)

        try:
            async with self.session_factory() as session:
                record = UserPreferenceRecord(**values)
                session.add(record)
                await session.commit()
                logger.info(f"✓ Created preferences {record.id} for user {record.user_id}")
                return record.id

        except IntegrityError as e:
            logger.error(f"Error in create: {e}")
            if _is_unique_violation(e):
                raise DuplicatePreferencesError("User preferences already exist") from e
            raise PreferencesPersistenceError(f"Error creating user preferences: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error in create: {e}")
            raise PreferencesPersistenceError(f"Error creating user preferences: {e}") from e

    async def find_by_id(self, preferences_id: str) -> Optional[UserPreferences]:
        return await self._find_one(UserPreferenceRecord.id == preferences_id, "find_by_id")

    async def find_by_user_id(self, user_id: str) -> Optional[UserPreferences]:
        return await self._find_one(UserPreferenceRecord.user_id == user_id, "find_by_user_id")

    async def _find_one(self, criterion, operation: str) -> Optional[UserPreferences]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(*UserPreferenceRecord.__table__.c).where(criterion)
                )
                row = result.mappings().one_or_none()

        except SQLAlchemyError as e:
            logger.error(f"Error in {operation}: {e}")
            raise PreferencesPersistenceError(f"Error finding user preferences: {e}") from e

        if row is None:
            return None

        return _to_entity(row)

    async def update(self, preferences_id: str, update_data: UserPreferencesUpdate) -> None:
        values = _to_columns(update_data, UPDATABLE_COLUMNS)
        values["updated_at"] = utcnow()

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(UserPreferenceRecord)
                    .where(UserPreferenceRecord.id == preferences_id)
                    .values(**values)
                )
                await session.commit()

        except SQLAlchemyError as e:
            logger.error(f"Error in update: {e}")
            raise PreferencesPersistenceError(f"Error updating user preferences: {e}") from e

        # Zero affected rows: nothing has this id
        if result.rowcount == 0:
            logger.error(f"Error in update: no preferences with id {preferences_id}")
            raise PreferencesNotFoundError("User preferences not found")

        logger.info(f"✓ Updated preferences {preferences_id}: {sorted(values)}")

    async def delete(self, preferences_id: str) -> None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(UserPreferenceRecord).where(UserPreferenceRecord.id == preferences_id)
                )
                await session.commit()

        except SQLAlchemyError as e:
            logger.error(f"Error in delete: {e}")
            raise PreferencesPersistenceError(f"Error deleting user preferences: {e}") from e

        if result.rowcount == 0:
            logger.error(f"Error in delete: no preferences with id {preferences_id}")
            raise PreferencesNotFoundError("User preferences not found")

        logger.info(f"✓ Deleted preferences {preferences_id}")

    async def upsert_by_user(self, user_id: str, preferences_data: UserPreferencesData) -> UserPreferences:
        _require_user_id(user_id)
        values = _to_columns({**preferences_data, "user_id": user_id}, PREFERENCE_COLUMNS)
        now = utcnow()

        try:
            async with self.session_factory() as session:
                dialect = session.get_bind().dialect.name
                insert = UPSERT_INSERTS.get(dialect)
                if insert is None:
                    raise PreferencesPersistenceError(f"Upsert is not supported on {dialect}")

                # Single INSERT ... ON CONFLICT (user_id) DO UPDATE, never read-then-write
                stmt = insert(UserPreferenceRecord).values(**values, created_at=now, updated_at=now)
                stmt = stmt.on_conflict_do_update(
                    index_elements=["user_id"],
                    set_={
                        **{k: getattr(stmt.excluded, k) for k in values if k != "user_id"},
                        "updated_at": now,
                    },
                ).returning(*UserPreferenceRecord.__table__.c)

                result = await session.execute(stmt)
                row = result.mappings().one()
                await session.commit()

        except SQLAlchemyError as e:
            logger.error(f"Error in upsert_by_user: {e}")
            raise PreferencesPersistenceError(f"Error upserting user preferences: {e}") from e

        logger.info(f"✓ Upserted preferences for user {user_id}")
        return _to_entity(row)
