"""
Form data for report and event creation
Mutable draft while the user types, frozen snapshot once submission starts
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

from cityreport.core.constants import DEFAULT_PHOTO_MIME_TYPE, REPORT_CATEGORIES
from cityreport.core.locale import CalendarLocale, format_event_date
from cityreport.geocoding.selection import LocationSelection


class SubmissionKind(Enum):
    """What the wizard creates."""
    REPORT = "report"
    EVENT = "event"


class ReportCategory(str, Enum):
    """Category of a citizen report."""
    DANGER = "danger"
    TRAVAUX = "travaux"
    NUISANCE = "nuisance"
    POLLUTION = "pollution"
    REPARATION = "reparation"

    @property
    def label(self) -> str:
        return REPORT_CATEGORIES[self.value]


@dataclass(frozen=True)
class PhotoItem:
    """Local photo picked by the user."""
    path: str
    mime_type: Optional[str] = None

    @property
    def filename(self) -> str:
        return Path(self.path).name

    @property
    def content_type(self) -> str:
        return self.mime_type or DEFAULT_PHOTO_MIME_TYPE


@dataclass
class FormDraft:
    """Fields being edited. Only the wizard mutates it."""
    title: str = ""
    description: str = ""
    category: Optional[ReportCategory] = None
    date: Optional[datetime] = None
    photos: List[PhotoItem] = field(default_factory=list)


def to_iso_utc(value: datetime) -> str:
    """ISO-8601 in UTC with milliseconds, e.g. 2025-03-03T17:00:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class FormSnapshot:
    """
    Everything a submission attempt reads, frozen at submit time.

    `address` is the text sent to the backend; it can differ from
    `location.display_text` for a current-location selection.
    """
    kind: SubmissionKind
    title: str
    description: str
    location: LocationSelection
    category: Optional[ReportCategory] = None
    date: Optional[datetime] = None
    photos: Tuple[PhotoItem, ...] = ()
    address: Optional[str] = None

    def text_fields(self, user_id: int) -> List[Tuple[str, str]]:
        """
        Multipart text fields expected by the backend, in order.

        Raises:
            ValueError: the snapshot has no coordinate
        """
        coordinate = self.location.coordinate
        if coordinate is None:
            raise ValueError("Cannot build payload without a coordinate")

        if self.kind == SubmissionKind.REPORT:
            fields = [
                ("title", self.title),
                ("description", self.description),
                ("city", self.address or ""),
                ("latitude", str(coordinate.latitude)),
                ("longitude", str(coordinate.longitude)),
            ]
            if self.category is not None:
                fields.append(("type", self.category.value))
            fields.append(("userId", str(user_id)))
            return fields

        return [
            ("title", self.title),
            ("description", self.description),
            ("date", to_iso_utc(self.date) if self.date else ""),
            ("latitude", str(coordinate.latitude)),
            ("longitude", str(coordinate.longitude)),
            ("location", self.address or ""),
            ("organizerId", str(user_id)),
        ]

    def summary(self, locale: CalendarLocale) -> str:
        """One-line description for confirmation messages."""
        where = self.address or self.location.display_text
        if self.kind == SubmissionKind.EVENT and self.date:
            return f"{self.title} - {format_event_date(self.date, locale)} - {where}"
        if self.category is not None:
            return f"[{self.category.label}] {self.title} - {where}"
        return f"{self.title} - {where}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        coordinate = self.location.coordinate
        return {
            "kind": self.kind.value,
            "title": self.title,
            "description": self.description,
            "category": self.category.value if self.category else None,
            "date": self.date.isoformat() if self.date else None,
            "latitude": coordinate.latitude if coordinate else None,
            "longitude": coordinate.longitude if coordinate else None,
            "display_text": self.location.display_text,
            "address": self.address,
            "photos": [p.path for p in self.photos],
        }
