"""
User Preferences Store

Observable cache of the last-known preferences for the current session,
plus loading/error/initialized flags. Actions call the service and write
the outcome into the state before they return; they never raise.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Mapping, Optional

from ..domain.preferences import (
    DEFAULT_USER_PREFERENCES,
    OnboardingPreferences,
    UserPreferences,
    UserPreferencesUpdate,
    default_view,
    is_metric_system,
)
from ..services.user_preferences_service import UserPreferencesService
from ..utils.logging_config import get_logger

logger = get_logger("store")

LOAD_ERROR = "Failed to load user preferences"
CREATE_ERROR = "Failed to create user preferences"
UPDATE_ERROR = "Failed to update user preferences"


@dataclass(frozen=True)
class UserPreferencesState:
    """Snapshot of the store"""

    preferences: Optional[UserPreferences] = None
    is_loading: bool = False
    is_initialized: bool = False
    error: Optional[str] = None


Listener = Callable[[UserPreferencesState], None]


class UserPreferencesStore:
    """
    Session-scoped preferences cache

    One store is built per application session and handed to its
    consumers. Actions are serialized, so two actions started back to back
    apply in the order they were called.
    """

    def __init__(self, service: UserPreferencesService):
        self._service = service
        self._state = UserPreferencesState()
        self._listeners: List[Listener] = []
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    # State accessors

    @property
    def state(self) -> UserPreferencesState:
        return self._state

    @property
    def preferences(self) -> Optional[UserPreferences]:
        return self._state.preferences

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_initialized(self) -> bool:
        return self._state.is_initialized

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def service(self) -> UserPreferencesService:
        return self._service

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener with every new state snapshot

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"Preferences listener failed: {e}")

    # Plain setters

    def set_preferences(self, preferences: Optional[UserPreferences]) -> None:
        self._set_state(preferences=preferences, is_initialized=True)

    def set_loading(self, loading: bool) -> None:
        self._set_state(is_loading=loading)

    def set_error(self, error: Optional[str]) -> None:
        self._set_state(error=error)

    def reset(self) -> None:
        """Back to the uninitialized state"""
        self._set_state(**vars(UserPreferencesState()))

    def use_service(self, service: UserPreferencesService) -> None:
        """Swap the backing service (test isolation only)"""
        self._service = service

    def _action_lock(self) -> asyncio.Lock:
        """Lock serializing actions, one per running event loop"""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    # Service-backed actions

    async def load_user_preferences(self, user_id: str) -> None:
        await self._run(
            lambda: self._service.get_preferences(user_id),
            LOAD_ERROR,
            clear_on_failure=True,
        )

    async def create_user_preferences(self, user_id: str, onboarding_data: OnboardingPreferences) -> None:
        await self._run(
            lambda: self._service.create_preferences(user_id, onboarding_data),
            CREATE_ERROR,
        )

    async def update_user_preferences(self, user_id: str, update_data: UserPreferencesUpdate) -> None:
        await self._run(
            lambda: self._service.update_preferences(user_id, update_data),
            UPDATE_ERROR,
        )

    async def _run(
        self,
        action: Callable[[], Awaitable[UserPreferences]],
        error_message: str,
        clear_on_failure: bool = False,
    ) -> None:
        async with self._action_lock():
            self._set_state(is_loading=True, error=None)
            try:
                preferences = await action()
            except Exception as e:
                logger.error(f"{error_message}: {e}")
                if clear_on_failure:
                    self._set_state(error=error_message, preferences=None)
                else:
                    self._set_state(error=error_message)
            else:
                self._set_state(preferences=preferences, error=None)
            finally:
                self._set_state(is_loading=False, is_initialized=True)

    # Derived, read-only

    def get_defaults(self) -> Mapping:
        return DEFAULT_USER_PREFERENCES

    def get_current_preferences(self) -> UserPreferences:
        """Cached preferences, or a default view (empty id and user_id) that is never stored"""
        return self._state.preferences or default_view()

    def is_metric_system(self) -> bool:
        return is_metric_system(self.get_current_preferences())

    def is_advanced_logging_enabled(self) -> bool:
        return self.get_current_preferences().advanced_logging_enabled
