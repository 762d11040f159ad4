"""
CityReport - Core Utilities
Central configuration, logging, error taxonomy and value objects.
"""

from cityreport.core.config import settings, get_settings, Settings
from cityreport.core.constants import (
    REPORT_CATEGORIES,
    PROGRESS_PHASES,
    POSTAL_CODE_PATTERN,
)
from cityreport.core.exceptions import (
    CityReportError,
    NetworkError,
    NoResultsError,
    ValidationError,
    SubmissionBusyError,
    ServerError,
    IdentityError,
)
from cityreport.core.geo_utils import (
    Coordinate,
    is_valid_coordinate,
    format_coordinate,
)
from cityreport.core.locale import CalendarLocale, FRENCH, format_event_date
from cityreport.core.observable import StateCell

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "REPORT_CATEGORIES",
    "PROGRESS_PHASES",
    "POSTAL_CODE_PATTERN",
    # Errors
    "CityReportError",
    "NetworkError",
    "NoResultsError",
    "ValidationError",
    "SubmissionBusyError",
    "ServerError",
    "IdentityError",
    # Values
    "Coordinate",
    "is_valid_coordinate",
    "format_coordinate",
    "CalendarLocale",
    "FRENCH",
    "format_event_date",
    "StateCell",
]
