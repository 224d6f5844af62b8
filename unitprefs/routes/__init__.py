"""
API Routes Module
"""

from .preferences import router as preferences_router

__all__ = [
    'preferences_router',
]
