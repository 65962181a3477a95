"""Data models for announcements rows and their localized view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal

AnnouncementCategory = Literal["announcement", "privacy", "landing", "app"]
Language = Literal["es", "en"]

VALID_CATEGORIES = ("announcement", "privacy", "landing", "app")
VALID_LANGUAGES = ("es", "en")


@dataclass(frozen=True)
class Announcement:
    """An announcement localized to one language."""

    id: str
    title: str
    full_text: str
    category: str
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any], language: str) -> Announcement:
        """Build from a raw datastore row, selecting ``*_<language>`` fields."""
        return cls(
            id=str(row.get("id", "")),
            title=row.get(f"title_{language}") or "",
            full_text=row.get(f"full_text_{language}") or "",
            category=row.get("category", ""),
            created_at=row.get("created_at", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "full_text": self.full_text,
            "category": self.category,
            "created_at": self.created_at,
        }
