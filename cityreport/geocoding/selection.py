"""
Selected location for the form being filled.

A small state holder between the address resolver and the wizard. The text
shown to the user and the address sent to the backend may differ: a
"current location" selection displays the sentinel label while the real
street address arrives later from a background reverse lookup.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cityreport.core.exceptions import CityReportError, ValidationError
from cityreport.core.geo_utils import Coordinate
from cityreport.core.observable import StateCell
from cityreport.geocoding.client import AddressSuggestion
from cityreport.geocoding.resolver import AddressResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationSelection:
    """What the location field currently shows."""
    display_text: str = ""
    coordinate: Optional[Coordinate] = None
    is_current_location_label: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.coordinate is not None


class LocationSelectionState:
    """
    Holds the selected coordinate and its display text.

    Mutators either apply a complete selection or leave the previous one
    untouched. Subscribe to `state` to follow changes.
    """

    def __init__(self, resolver: AddressResolver):
        self.resolver = resolver
        self.state: StateCell[LocationSelection] = StateCell(LocationSelection())
        self._payload_address: Optional[str] = None
        self._generation = 0

    @property
    def selection(self) -> LocationSelection:
        return self.state.value

    @property
    def display_text(self) -> str:
        return self.selection.display_text

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return self.selection.coordinate

    @property
    def is_current_location_label(self) -> bool:
        return self.selection.is_current_location_label

    @property
    def payload_address(self) -> Optional[str]:
        """Address to submit, None while a current-location lookup is pending."""
        if self.is_current_location_label:
            return self.resolver.current_location_address.value
        return self._payload_address

    def select_suggestion(self, suggestion: AddressSuggestion) -> LocationSelection:
        """Apply a suggestion as-is (no geocoding) and discard the suggestion list."""
        self._generation += 1
        selection = self._apply(suggestion)
        self.resolver.clear_suggestions()
        return selection

    def use_current_location(self, coordinate: Coordinate) -> LocationSelection:
        """Select the device position right away; the real address resolves in the background."""
        self._generation += 1
        suggestion = self.resolver.resolve_current_location(coordinate)
        return self._apply(suggestion)

    async def select_from_map_tap(self, coordinate: Coordinate) -> LocationSelection:
        """
        Select the address under a map tap.

        A tap whose lookup finishes after any newer change to the field
        (another tap, a picked suggestion, current location, clear) is
        dropped and the current selection is returned unchanged.

        Raises:
            NetworkError, NoResultsError: reverse lookup failed; the previous
                selection is kept
        """
        self._generation += 1
        generation = self._generation
        try:
            suggestion = await self.resolver.reverse_geocode(coordinate)
        except CityReportError as e:
            if generation != self._generation:
                logger.debug(f"Dropping failed lookup of a superseded map tap: {e.message}")
                return self.selection
            raise

        if generation != self._generation:
            logger.debug("Dropping superseded map tap")
            return self.selection
        return self.select_suggestion(suggestion)

    def clear(self) -> None:
        self._generation += 1
        self._payload_address = None
        self.state.set(LocationSelection())

    async def resolve_payload_address(self, timeout: Optional[float] = None) -> str:
        """
        Address to put in the submission, waiting for a pending current-location lookup.

        Raises:
            ValidationError: nothing selected
            NetworkError: current-location address unavailable
        """
        coordinate = self.coordinate
        if coordinate is None:
            raise ValidationError("coordinate")
        if self.is_current_location_label:
            return await self.resolver.wait_for_current_location_address(coordinate, timeout)
        if not self._payload_address:
            raise ValidationError("coordinate")
        return self._payload_address

    def _apply(self, suggestion: AddressSuggestion) -> LocationSelection:
        if suggestion.is_current_location:
            selection = LocationSelection(
                display_text=self.resolver.current_location_label,
                coordinate=suggestion.coordinate,
                is_current_location_label=True,
            )
            self._payload_address = None
        else:
            selection = LocationSelection(
                display_text=suggestion.formatted,
                coordinate=suggestion.coordinate,
                is_current_location_label=False,
            )
            self._payload_address = suggestion.formatted

        logger.debug(f"Location selected: {selection.display_text!r}")
        self.state.set(selection)
        return selection
