"""
Preference Errors

Typed conditions raised by the domain, the repository and the service.
"""

from typing import Any


class PreferencesError(Exception):
    """Base class for all preference errors"""


class InvalidPreferencesError(PreferencesError):
    """A unit or flag value is outside its allowed set (raised before any write)"""


class PreferencesParseError(InvalidPreferencesError):
    """Raw data could not be parsed into a preference field"""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for {field}: {value!r}")


class PreferencesNotFoundError(PreferencesError):
    """Update or delete targeted a record that does not exist"""


class DuplicatePreferencesError(PreferencesError):
    """A record already exists for the user"""


class PreferencesPersistenceError(PreferencesError):
    """Any other backend failure, carrying the backend message"""


class PreferencesServiceError(PreferencesError):
    """Coarse, action-specific failure reported by the service"""
