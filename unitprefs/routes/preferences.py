"""
User Preferences API Routes
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Optional
from pydantic import BaseModel
import logging

from ..dependencies import get_preferences_service
from ..exceptions import (
    PreferencesError,
    InvalidPreferencesError,
    PreferencesNotFoundError,
    DuplicatePreferencesError,
)
from ..services.user_preferences_service import UserPreferencesService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


class OnboardingPreferencesRequest(BaseModel):
    """Request model for unit choices made during onboarding"""
    body_weight_unit: str
    strength_training_unit: str
    body_measurement_unit: str
    distance_unit: str


class PreferencesUpdateRequest(BaseModel):
    """Request model for partial preference updates"""
    body_weight_unit: Optional[str] = None
    strength_training_unit: Optional[str] = None
    body_measurement_unit: Optional[str] = None
    distance_unit: Optional[str] = None
    advanced_logging_enabled: Optional[bool] = None


def _to_http_error(error: PreferencesError) -> HTTPException:
    """Map preference errors to HTTP status codes"""
    if isinstance(error, InvalidPreferencesError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, PreferencesNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, DuplicatePreferencesError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@router.get("/{user_id}")
async def get_preferences(
    user_id: str,
    service: UserPreferencesService = Depends(get_preferences_service)
) -> Dict:
    """
    Get user preferences (defaults if none are stored)

    Returns:
        Preferences and whether they are persisted
    """
    try:
        preferences = await service.get_preferences(user_id)
    except PreferencesError as e:
        logger.error(f"Failed to get preferences: {e}")
        raise _to_http_error(e)

    return {
        "success": True,
        "persisted": preferences.is_persisted,
        "preferences": preferences.to_dict()
    }


@router.post("/{user_id}", status_code=201)
async def create_preferences(
    user_id: str,
    request: OnboardingPreferencesRequest,
    service: UserPreferencesService = Depends(get_preferences_service)
) -> Dict:
    """
    Save onboarding unit choices (idempotent)

    Args:
        request: The four unit choices
    """
    try:
        preferences = await service.create_preferences(user_id, request.model_dump())
    except PreferencesError as e:
        logger.error(f"Failed to create preferences: {e}")
        raise _to_http_error(e)

    return {
        "success": True,
        "preferences": preferences.to_dict()
    }


@router.patch("/{user_id}")
async def update_preferences(
    user_id: str,
    request: PreferencesUpdateRequest,
    service: UserPreferencesService = Depends(get_preferences_service)
) -> Dict:
    """
    Update some preferences, leaving the others unchanged

    Args:
        request: Fields to change
    """
    try:
        preferences = await service.update_preferences(
            user_id, request.model_dump(exclude_unset=True, exclude_none=True)
        )
    except PreferencesError as e:
        logger.error(f"Failed to update preferences: {e}")
        raise _to_http_error(e)

    return {
        "success": True,
        "preferences": preferences.to_dict()
    }


@router.delete("/{user_id}")
async def delete_preferences(
    user_id: str,
    service: UserPreferencesService = Depends(get_preferences_service)
) -> Dict:
    """Delete user preferences"""
    try:
        await service.delete_preferences(user_id)
    except PreferencesError as e:
        logger.error(f"Failed to delete preferences: {e}")
        raise _to_http_error(e)

    return {
        "success": True,
        "message": f"Preferences for '{user_id}' deleted"
    }


@router.get("/{user_id}/advanced-logging")
async def get_advanced_logging(
    user_id: str,
    service: UserPreferencesService = Depends(get_preferences_service)
) -> Dict:
    """Whether advanced logging is enabled (false if unknown)"""
    enabled = await service.is_advanced_logging_enabled(user_id)
    return {
        "user_id": user_id,
        "enabled": enabled
    }
