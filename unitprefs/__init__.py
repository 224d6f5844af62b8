"""
Unit Preferences Service

Measurement unit and advanced logging preferences: domain model,
persistence, business rules and a client-side cache.
"""

__version__ = "1.0.0"
