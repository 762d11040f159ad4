"""
CityReport - Error Taxonomy
Exceptions surfaced to the UI layer. Each carries a user-facing message.
"""

from typing import Optional

from cityreport.core.constants import MSG_BUSY, MSG_MISSING_FIELD


class CityReportError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(CityReportError):
    """Transport failure, or the remote service refused the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NoResultsError(CityReportError):
    """Geocoding provider answered but found nothing."""


class ValidationError(CityReportError):
    """A required form field is missing or invalid."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or MSG_MISSING_FIELD.get(field, f"Champ invalide : {field}"))
        self.field = field


class SubmissionBusyError(CityReportError):
    """A submission is already in flight."""

    def __init__(self, message: str = MSG_BUSY):
        super().__init__(message)


class ServerError(CityReportError):
    """Submission endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Erreur serveur ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class IdentityError(CityReportError):
    """The current user id could not be resolved."""
