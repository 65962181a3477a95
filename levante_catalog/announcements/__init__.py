"""Announcements lookup backed by Supabase."""

from levante_catalog.announcements.client import AnnouncementService
from levante_catalog.announcements.models import (
    VALID_CATEGORIES,
    VALID_LANGUAGES,
    Announcement,
)

__all__ = [
    "VALID_CATEGORIES",
    "VALID_LANGUAGES",
    "Announcement",
    "AnnouncementService",
]
