"""
Step-by-step creation of a report or an event

Reports: category -> details -> location, then submit.
Events:  details -> location, then submit.

Navigation is free; only the submit action is gated. Validation reports the
first missing field in a fixed order so the message is always the same for
the same form.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Tuple, Union

from cityreport.core.config import settings
from cityreport.core.constants import MSG_TOO_MANY_PHOTOS
from cityreport.core.exceptions import NetworkError, SubmissionBusyError, ValidationError
from cityreport.core.geo_utils import Coordinate
from cityreport.geocoding.client import AddressSuggestion
from cityreport.geocoding.selection import LocationSelection, LocationSelectionState
from cityreport.submission.forms import (
    FormDraft,
    FormSnapshot,
    PhotoItem,
    ReportCategory,
    SubmissionKind,
)
from cityreport.submission.pipeline import SubmissionPipeline, SubmissionResult

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    """Screens of the creation flow."""
    CATEGORY = "category"
    DETAILS = "details"
    LOCATION = "location"


STEPS_BY_KIND: Dict[SubmissionKind, Tuple[WizardStep, ...]] = {
    SubmissionKind.REPORT: (WizardStep.CATEGORY, WizardStep.DETAILS, WizardStep.LOCATION),
    SubmissionKind.EVENT: (WizardStep.DETAILS, WizardStep.LOCATION),
}

# Checked in this order; the first missing one is reported
REQUIRED_FIELDS: Dict[SubmissionKind, Tuple[str, ...]] = {
    SubmissionKind.REPORT: ("title", "description", "category", "coordinate"),
    SubmissionKind.EVENT: ("title", "description", "date", "coordinate", "photos"),
}


class SubmissionWizard:
    """
    Form state machine for one creation screen.

    Edits are rejected with SubmissionBusyError while an attempt is in
    flight, so the pipeline reads a stable snapshot.
    """

    def __init__(
        self,
        kind: SubmissionKind,
        location: LocationSelectionState,
        pipeline: SubmissionPipeline,
        max_photos: Optional[int] = None,
        address_wait_seconds: Optional[float] = None,
    ):
        """
        Initialize wizard.

        Args:
            kind: Report or event
            location: Location field state
            pipeline: Submission pipeline used by `submit()`
            max_photos: Photo limit, defaults to settings.max_photos
            address_wait_seconds: Longest wait for a pending current-location address
        """
        self.kind = kind
        self.location = location
        self.pipeline = pipeline
        self.max_photos = settings.max_photos if max_photos is None else max_photos
        self.address_wait_seconds = address_wait_seconds
        self.steps = STEPS_BY_KIND[kind]

        self.draft = self._new_draft()
        self._index = 0
        self._submitting = False

        logger.info(f"SubmissionWizard initialized for {kind.value}")

    def _new_draft(self) -> FormDraft:
        if self.kind == SubmissionKind.EVENT:
            return FormDraft(date=datetime.now())
        return FormDraft()

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def step(self) -> WizardStep:
        return self.steps[self._index]

    @property
    def step_number(self) -> int:
        """1-based position of the current step."""
        return self._index + 1

    @property
    def is_first_step(self) -> bool:
        return self._index == 0

    @property
    def is_last_step(self) -> bool:
        return self._index == len(self.steps) - 1

    def next(self) -> WizardStep:
        """Go forward; stays on the last step."""
        if not self.is_last_step:
            self._index += 1
        return self.step

    def previous(self) -> WizardStep:
        """Go back; stays on the first step."""
        if not self.is_first_step:
            self._index -= 1
        return self.step

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def _ensure_editable(self) -> None:
        if self._submitting:
            raise SubmissionBusyError()

    def set_title(self, title: str) -> None:
        self._ensure_editable()
        self.draft.title = title

    def set_description(self, description: str) -> None:
        self._ensure_editable()
        self.draft.description = description

    def set_category(self, category: Union[ReportCategory, str, None]) -> None:
        """
        Choose the report category.

        Raises:
            ValidationError: unknown category value
        """
        self._ensure_editable()
        if category is None or isinstance(category, ReportCategory):
            self.draft.category = category
            return
        try:
            self.draft.category = ReportCategory(category)
        except ValueError:
            raise ValidationError("category", f"Catégorie inconnue : {category}")

    def set_date(self, date: Optional[datetime]) -> None:
        self._ensure_editable()
        self.draft.date = date

    def add_photo(self, photo: Union[PhotoItem, str]) -> None:
        """
        Attach a photo.

        Raises:
            ValidationError: photo limit reached
        """
        self._ensure_editable()
        if len(self.draft.photos) >= self.max_photos:
            raise ValidationError("photos", MSG_TOO_MANY_PHOTOS)
        if isinstance(photo, str):
            photo = PhotoItem(path=photo)
        self.draft.photos.append(photo)

    def remove_photo(self, index: int) -> None:
        self._ensure_editable()
        del self.draft.photos[index]

    def select_suggestion(self, suggestion: AddressSuggestion) -> LocationSelection:
        self._ensure_editable()
        return self.location.select_suggestion(suggestion)

    def use_current_location(self, coordinate: Coordinate) -> LocationSelection:
        self._ensure_editable()
        return self.location.use_current_location(coordinate)

    async def select_from_map_tap(self, coordinate: Coordinate) -> LocationSelection:
        self._ensure_editable()
        return await self.location.select_from_map_tap(coordinate)

    def clear_location(self) -> None:
        self._ensure_editable()
        self.location.clear()

    # -------------------------------------------------------------------------
    # Validation & submission
    # -------------------------------------------------------------------------

    def _is_present(self, field_name: str) -> bool:
        draft = self.draft
        if field_name == "title":
            return bool(draft.title.strip())
        if field_name == "description":
            return bool(draft.description.strip())
        if field_name == "category":
            return draft.category is not None
        if field_name == "date":
            return draft.date is not None
        if field_name == "coordinate":
            return self.location.coordinate is not None
        if field_name == "photos":
            return len(draft.photos) > 0
        raise KeyError(field_name)

    def first_missing_field(self) -> Optional[str]:
        """Earliest unmet required field, or None when the form is complete."""
        for field_name in REQUIRED_FIELDS[self.kind]:
            if not self._is_present(field_name):
                return field_name
        return None

    def validate(self) -> None:
        """
        Raises:
            ValidationError: naming the first missing field
        """
        missing = self.first_missing_field()
        if missing is not None:
            raise ValidationError(missing)

    def snapshot(self, address: Optional[str] = None) -> FormSnapshot:
        """Freeze the current form. `address` defaults to the selection's payload address."""
        draft = self.draft
        return FormSnapshot(
            kind=self.kind,
            title=draft.title.strip(),
            description=draft.description.strip(),
            location=self.location.selection,
            category=draft.category,
            date=draft.date,
            photos=tuple(draft.photos),
            address=address if address is not None else self.location.payload_address,
        )

    async def submit(self) -> SubmissionResult:
        """
        Validate and send the form.

        Returns:
            Pipeline result; on success the form is reset, on failure
            everything is kept for a retry

        Raises:
            SubmissionBusyError: an attempt is already in flight
            ValidationError: a required field is missing (nothing is sent)
        """
        if self._submitting:
            raise SubmissionBusyError()
        self.validate()

        self._submitting = True
        try:
            try:
                address = await self.location.resolve_payload_address(self.address_wait_seconds)
            except NetworkError as e:
                logger.warning(f"Submission stopped, address unavailable: {e.message}")
                return SubmissionResult.from_error(e)

            result = await self.pipeline.submit(self.snapshot(address))
        finally:
            self._submitting = False

        if result.success:
            self.reset()
        return result

    def reset(self) -> None:
        """Empty the form and go back to the first step."""
        self._ensure_editable()
        self.draft = self._new_draft()
        self.location.clear()
        self._index = 0
