"""
Notification Preferences — Per-doctor settings held in process memory.

Lost on restart; the portal has no write path to the document store.
"""

from __future__ import annotations

from portal.models.portal import NotificationPreferences

_preferences: dict[str, NotificationPreferences] = {}


def get_preferences(doctor_id: str) -> NotificationPreferences:
    return _preferences.get(doctor_id) or NotificationPreferences()


def save_preferences(doctor_id: str, prefs: NotificationPreferences) -> NotificationPreferences:
    _preferences[doctor_id] = prefs
    return prefs


def reset_preferences() -> None:
    """Clear all stored preferences (for testing)."""
    _preferences.clear()
