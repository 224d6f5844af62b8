"""
Test the service and store wiring
"""

import asyncio

from unitprefs import dependencies
from unitprefs.services.user_preferences_service import UserPreferencesService
from unitprefs.store.user_preferences_store import UserPreferencesStore

from tests.factories import make_preferences


class MockRepository:
    """Repository serving one stored record"""

    async def find_by_user_id(self, user_id):
        return make_preferences(user_id=user_id)


def test_service_is_initialized_lazily(monkeypatch):
    monkeypatch.setattr(dependencies, "_preferences_service", None)

    first = asyncio.run(dependencies.get_preferences_service())
    second = asyncio.run(dependencies.get_preferences_service())

    assert isinstance(first, UserPreferencesService)
    assert second is first
    assert dependencies._preferences_service is first


def test_init_services_replaces_the_instance(monkeypatch):
    monkeypatch.setattr(dependencies, "_preferences_service", None)

    first = asyncio.run(dependencies.get_preferences_service())
    dependencies.init_services()

    assert asyncio.run(dependencies.get_preferences_service()) is not first


def test_build_preferences_store_uses_given_repository():
    store = dependencies.build_preferences_store(repository=MockRepository())

    asyncio.run(store.load_user_preferences("user-7"))

    assert isinstance(store, UserPreferencesStore)
    assert store.preferences.user_id == "user-7"
