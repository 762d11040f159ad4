"""
Multipart submission of reports and events

Drives one attempt through three phases:

    preparing   (-> 0.2)  build the payload, short pause so the UI can render
    uploading   (-> 0.7)  single POST carrying all fields and photos
    finalizing  (-> 1.0)  read the response, short pause before reporting

Endpoints:
    POST <api_url>/reports  title, description, city, latitude, longitude, type, userId, photos*
    POST <api_url>/events   title, description, date, latitude, longitude, location, organizerId, photos*
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx

from cityreport.core.config import settings
from cityreport.core.constants import (
    EVENTS_ENDPOINT,
    MSG_BUSY,
    MSG_INVALID_PHOTOS,
    MSG_USER_ID_MISSING,
    REPORTS_ENDPOINT,
)
from cityreport.core.exceptions import (
    CityReportError,
    IdentityError,
    NetworkError,
    ServerError,
    SubmissionBusyError,
    ValidationError,
)
from cityreport.submission.forms import FormSnapshot, SubmissionKind
from cityreport.submission.identity import IdentityProvider
from cityreport.submission.progress import SubmissionPhase, SubmissionProgress

logger = logging.getLogger(__name__)

MSG_UPLOAD_FAILED = "Impossible de contacter le serveur"
MSG_UNEXPECTED = "Une erreur est survenue."


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of one attempt. The single shape the UI branches on.

    error_kind is one of: busy, validation, identity, network, server, unknown.
    """
    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    status_code: Optional[int] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "SubmissionResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls, error_kind: str, message: str, status_code: Optional[int] = None
    ) -> "SubmissionResult":
        return cls(success=False, error=message, error_kind=error_kind, status_code=status_code)

    @classmethod
    def from_error(cls, error: CityReportError) -> "SubmissionResult":
        return cls.failure(
            _ERROR_KINDS.get(type(error), "unknown"),
            error.message,
            getattr(error, "status_code", None),
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error}


_ERROR_KINDS = {
    SubmissionBusyError: "busy",
    ValidationError: "validation",
    IdentityError: "identity",
    NetworkError: "network",
    ServerError: "server",
}

MultipartParts = List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]]


class SubmissionPipeline:
    """
    Sends a validated FormSnapshot to the backend.

    `submit()` never raises: every failure comes back as
    `SubmissionResult(success=False, ...)`. At most one attempt runs at a
    time; a concurrent call is answered with error_kind "busy" and sends
    nothing. Failed attempts are not retried or kept.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        preparing_delay: Optional[float] = None,
        finalizing_delay: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize pipeline.

        Args:
            identity: Source of the current user id
            api_url: Backend base URL, defaults to settings.api_url
            timeout: Upload timeout in seconds
            preparing_delay: Pause after payload assembly
            finalizing_delay: Pause before reporting success
            http_client: Pre-configured async client (not closed by this object)
        """
        self.identity = identity
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self.timeout = settings.submission_timeout_seconds if timeout is None else timeout
        self.preparing_delay = (
            settings.preparing_delay_seconds if preparing_delay is None else preparing_delay
        )
        self.finalizing_delay = (
            settings.finalizing_delay_seconds if finalizing_delay is None else finalizing_delay
        )
        self.progress = SubmissionProgress()

        self._client = http_client
        self._owns_client = http_client is None
        self._in_flight = False

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def endpoint_for(self, kind: SubmissionKind) -> str:
        path = REPORTS_ENDPOINT if kind == SubmissionKind.REPORT else EVENTS_ENDPOINT
        return f"{self.api_url}{path}"

    async def submit(self, snapshot: FormSnapshot) -> SubmissionResult:
        """
        Run one submission attempt.

        Args:
            snapshot: Validated form contents

        Returns:
            Success with the decoded response body, or a failure with a
            user-facing message
        """
        if self._in_flight:
            logger.warning("Submission rejected: another attempt is in flight")
            return SubmissionResult.failure("busy", MSG_BUSY)

        self._in_flight = True
        self.progress.reset()
        try:
            return await self._run(snapshot)
        except CityReportError as e:
            logger.error(f"Submission failed: {e.message}")
            return SubmissionResult.from_error(e)
        except Exception as e:
            logger.exception(f"Unexpected submission failure: {e}")
            return SubmissionResult.failure("unknown", str(e) or MSG_UNEXPECTED)
        finally:
            self._in_flight = False

    async def _run(self, snapshot: FormSnapshot) -> SubmissionResult:
        self.progress.enter(SubmissionPhase.PREPARING)
        parts = self.assemble(snapshot)
        if self.preparing_delay > 0:
            await asyncio.sleep(self.preparing_delay)

        self.progress.enter(SubmissionPhase.UPLOADING)
        url = self.endpoint_for(snapshot.kind)
        logger.info(
            f"Submitting {snapshot.kind.value} {snapshot.title!r} "
            f"with {len(snapshot.photos)} photo(s) to {url}"
        )
        response = await self._post(url, parts)

        if response.is_error:
            raise ServerError(response.status_code, response.text)

        self.progress.enter(SubmissionPhase.FINALIZING)
        try:
            data = response.json()
        except ValueError:
            logger.warning("Submission response is not JSON")
            data = None
        if self.finalizing_delay > 0:
            await asyncio.sleep(self.finalizing_delay)

        logger.info(f"{snapshot.kind.value.capitalize()} submitted successfully")
        return SubmissionResult.ok(data)

    def assemble(self, snapshot: FormSnapshot) -> MultipartParts:
        """
        Build the multipart parts: text fields first, then one 'photos' part per photo.

        Raises:
            IdentityError: no user id available
            ValidationError: a photo file cannot be read
        """
        user_id = self.identity.get_user_id()
        if user_id is None:
            raise IdentityError(MSG_USER_ID_MISSING)

        parts: MultipartParts = [
            (name, (None, value, None)) for name, value in snapshot.text_fields(user_id)
        ]

        for photo in snapshot.photos:
            try:
                content = Path(photo.path).read_bytes()
            except OSError as e:
                logger.error(f"Cannot read photo {photo.path}: {e}")
                raise ValidationError("photos", MSG_INVALID_PHOTOS) from e
            parts.append(("photos", (photo.filename, content, photo.content_type)))

        return parts

    async def _post(self, url: str, parts: MultipartParts) -> httpx.Response:
        try:
            return await self._get_client().post(url, files=parts)
        except httpx.HTTPError as e:
            logger.error(f"Upload to {url} failed: {e}")
            raise NetworkError(MSG_UPLOAD_FAILED) from e
