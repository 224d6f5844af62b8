"""
Test the SQLAlchemy preferences repository against in-memory SQLite
"""

import asyncio

import pytest
from sqlalchemy import func, select, update

from unitprefs.database import create_engine_for, create_session_factory
from unitprefs.domain.preferences import (
    BodyWeightUnit,
    DistanceUnit,
    UnitSystem,
    create_default,
)
from unitprefs.exceptions import (
    DuplicatePreferencesError,
    InvalidPreferencesError,
    PreferencesNotFoundError,
    PreferencesParseError,
    PreferencesPersistenceError,
)
from unitprefs.models.user_preferences import UserPreferenceRecord
from unitprefs.repositories.user_preferences_repository import SqlAlchemyUserPreferencesRepository

from tests.factories import IMPERIAL_ONBOARDING


async def count_rows(repository, user_id: str) -> int:
    async with repository.session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(UserPreferenceRecord).where(UserPreferenceRecord.user_id == user_id)
        )
        return result.scalar_one()


class TestCreate:
    def test_returns_generated_id(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            found = await repository.find_by_id(preferences_id)
            return preferences_id, found

        preferences_id, found = run_with_repository(body)

        assert preferences_id
        assert found.id == preferences_id
        assert found.user_id == "user-1"
        assert found.unit_system is UnitSystem.METRIC
        assert found.advanced_logging_enabled is False
        assert found.created_at.tzinfo is not None

    def test_duplicate_user_raises(self, run_with_repository):
        async def body(repository):
            await repository.create(create_default("user-1"))
            with pytest.raises(DuplicatePreferencesError, match="already exist"):
                await repository.create(create_default("user-1"))
            return await count_rows(repository, "user-1")

        assert run_with_repository(body) == 1

    def test_blank_user_id_raises(self, run_with_repository):
        async def body(repository):
            with pytest.raises(InvalidPreferencesError):
                await repository.create({**create_default("user-1"), "user_id": " "})

        run_with_repository(body)


class TestFind:
    def test_unknown_id_returns_none(self, run_with_repository):
        async def body(repository):
            return await repository.find_by_id("does-not-exist")

        assert run_with_repository(body) is None

    def test_unknown_user_returns_none(self, run_with_repository):
        async def body(repository):
            await repository.create(create_default("user-1"))
            return await repository.find_by_user_id("user-2")

        assert run_with_repository(body) is None

    def test_find_by_user_id(self, run_with_repository):
        async def body(repository):
            await repository.create({**create_default("user-1"), **IMPERIAL_ONBOARDING})
            return await repository.find_by_user_id("user-1")

        found = run_with_repository(body)
        assert found.unit_system is UnitSystem.IMPERIAL

    def test_corrupted_row_fails_with_field_name(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            async with repository.session_factory() as session:
                await session.execute(
                    update(UserPreferenceRecord)
                    .where(UserPreferenceRecord.id == preferences_id)
                    .values(distance_unit="leagues")
                )
                await session.commit()

            with pytest.raises(PreferencesParseError, match="distance_unit.*leagues"):
                await repository.find_by_user_id("user-1")

        run_with_repository(body)


class TestUpdate:
    def test_changes_only_present_fields(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            before = await repository.find_by_id(preferences_id)
            await asyncio.sleep(0.01)
            await repository.update(preferences_id, {"body_weight_unit": BodyWeightUnit.POUNDS})
            after = await repository.find_by_id(preferences_id)
            return before, after

        before, after = run_with_repository(body)

        assert after.body_weight_unit is BodyWeightUnit.POUNDS
        assert after.strength_training_unit == before.strength_training_unit
        assert after.body_measurement_unit == before.body_measurement_unit
        assert after.distance_unit == before.distance_unit
        assert after.advanced_logging_enabled == before.advanced_logging_enabled
        assert after.user_id == before.user_id
        assert after.created_at == before.created_at
        assert after.updated_at > before.updated_at

    def test_user_id_is_not_updatable(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            await repository.update(preferences_id, {"user_id": "user-2", "distance_unit": "mi"})
            return await repository.find_by_id(preferences_id)

        found = run_with_repository(body)
        assert found.user_id == "user-1"
        assert found.distance_unit is DistanceUnit.MILES

    def test_unknown_id_raises_not_found(self, run_with_repository):
        async def body(repository):
            with pytest.raises(PreferencesNotFoundError, match="not found"):
                await repository.update("does-not-exist", {"distance_unit": "mi"})

        run_with_repository(body)


class TestDelete:
    def test_delete_removes_record(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            await repository.delete(preferences_id)
            return await repository.find_by_id(preferences_id), await repository.find_by_user_id("user-1")

        assert run_with_repository(body) == (None, None)

    def test_delete_frees_user_slot(self, run_with_repository):
        async def body(repository):
            preferences_id = await repository.create(create_default("user-1"))
            await repository.delete(preferences_id)
            return await repository.create(create_default("user-1"))

        assert run_with_repository(body)

    def test_unknown_id_raises_not_found(self, run_with_repository):
        async def body(repository):
            with pytest.raises(PreferencesNotFoundError):
                await repository.delete("does-not-exist")

        run_with_repository(body)


class TestUpsertByUser:
    def test_creates_when_absent(self, run_with_repository):
        async def body(repository):
            created = await repository.upsert_by_user("user-1", {**create_default("user-1"), **IMPERIAL_ONBOARDING})
            return created, await repository.find_by_user_id("user-1")

        created, found = run_with_repository(body)

        assert created.id
        assert created == found
        assert created.unit_system is UnitSystem.IMPERIAL

    def test_updates_when_present(self, run_with_repository):
        async def body(repository):
            first = await repository.upsert_by_user("user-1", create_default("user-1"))
            await asyncio.sleep(0.01)
            second = await repository.upsert_by_user("user-1", {**create_default("user-1"), **IMPERIAL_ONBOARDING})
            return first, second, await count_rows(repository, "user-1")

        first, second, rows = run_with_repository(body)

        assert rows == 1
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert second.unit_system is UnitSystem.IMPERIAL

    def test_user_id_argument_scopes_the_write(self, run_with_repository):
        async def body(repository):
            return await repository.upsert_by_user("user-2", create_default("user-1"))

        assert run_with_repository(body).user_id == "user-2"

    def test_blank_user_id_raises(self, run_with_repository):
        async def body(repository):
            with pytest.raises(InvalidPreferencesError):
                await repository.upsert_by_user("", create_default("user-1"))

        run_with_repository(body)


@pytest.mark.parametrize("flag", ["false", 0, 1, "yes"])
def test_non_bool_advanced_logging_is_rejected(run_with_repository, flag):
    async def body(repository):
        preferences_id = await repository.create(create_default("user-1"))

        with pytest.raises(PreferencesParseError, match="advanced_logging_enabled"):
            await repository.create({**create_default("user-2"), "advanced_logging_enabled": flag})
        with pytest.raises(PreferencesParseError, match="advanced_logging_enabled"):
            await repository.update(preferences_id, {"advanced_logging_enabled": flag})
        with pytest.raises(PreferencesParseError, match="advanced_logging_enabled"):
            await repository.upsert_by_user("user-1", {**create_default("user-1"), "advanced_logging_enabled": flag})

        return await repository.find_by_id(preferences_id), await repository.find_by_user_id("user-2")

    stored, never_created = run_with_repository(body)

    assert stored.advanced_logging_enabled is False
    assert never_created is None


def test_backend_failure_surfaces_as_persistence_error():
    """Tables were never created, so every statement fails"""
    async def main():
        engine = create_engine_for("sqlite+aiosqlite://")
        repository = SqlAlchemyUserPreferencesRepository(create_session_factory(engine))
        try:
            with pytest.raises(PreferencesPersistenceError, match="no such table"):
                await repository.find_by_user_id("user-1")
            with pytest.raises(PreferencesPersistenceError, match="Error creating user preferences"):
                await repository.create(create_default("user-1"))
            with pytest.raises(PreferencesPersistenceError, match="Error upserting user preferences"):
                await repository.upsert_by_user("user-1", create_default("user-1"))
        finally:
            await engine.dispose()

    asyncio.run(main())
