"""
Address resolution for the location step.

Turns free text or a coordinate into ranked suggestions, and handles the
"use my current location" flow without searching for the sentinel label.
"""

import asyncio
import logging
import math
import re
from collections import OrderedDict
from typing import List, Optional

from cityreport.core.config import settings
from cityreport.core.constants import MSG_CURRENT_LOCATION_UNRESOLVED, POSTAL_CODE_PATTERN
from cityreport.core.exceptions import CityReportError, NetworkError
from cityreport.core.geo_utils import Coordinate
from cityreport.core.observable import StateCell
from cityreport.geocoding.client import AddressSuggestion, GeocodeClient, SuggestionSource

logger = logging.getLogger(__name__)


def extract_postal_code(address: str) -> float:
    """
    First standalone 5-digit group of an address, as a number.

    Returns:
        The postal code, or infinity when the address has none
    """
    match = re.search(POSTAL_CODE_PATTERN, address)
    return int(match.group(0)) if match else math.inf


def rank_suggestions(suggestions: List[AddressSuggestion]) -> List[AddressSuggestion]:
    """Sort ascending by postal code; addresses without one go last, in input order."""
    return sorted(suggestions, key=lambda s: extract_postal_code(s.formatted))


class AddressResolver:
    """
    Search state for one address field.

    Only the newest search may update `suggestions`: every call takes a
    generation number and a response that arrives after a newer call started
    is dropped. Successful results are cached per query so retyping a query
    does not hit the provider again.

    Attributes:
        suggestions: Current suggestion list, replaced wholesale
        error: User-facing message of the last failure, None after success
        is_loading: True while the newest search is waiting on the network
        current_location_address: Real address of the last "current location"
            request, None until the background reverse lookup resolves
    """

    CACHE_SIZE = 32

    def __init__(
        self,
        client: GeocodeClient,
        current_location_label: Optional[str] = None,
        debounce_seconds: Optional[float] = None,
    ):
        """
        Initialize resolver.

        Args:
            client: Geocoding client
            current_location_label: Sentinel shown for the GPS position
            debounce_seconds: Quiet period before a search hits the network
        """
        self.client = client
        self.current_location_label = current_location_label or settings.current_location_label
        self.debounce_seconds = (
            settings.search_debounce_seconds if debounce_seconds is None else debounce_seconds
        )

        self.suggestions: List[AddressSuggestion] = []
        self.error: Optional[str] = None
        self.is_loading = False
        self.current_location_address: StateCell[Optional[str]] = StateCell(None)

        self._generation = 0
        self._cache: "OrderedDict[str, List[AddressSuggestion]]" = OrderedDict()
        self._inflight = {}
        self._current_location: Optional[Coordinate] = None
        self._current_location_task: Optional[asyncio.Task] = None

    def is_searchable(self, query: Optional[str]) -> bool:
        """Blank text and the sentinel label never reach the provider."""
        if query is None or not query.strip():
            return False
        return query != self.current_location_label

    async def search(self, query: str) -> List[AddressSuggestion]:
        """
        Search addresses for free text.

        Args:
            query: Text typed by the user

        Returns:
            Ranked suggestions; empty for blank or sentinel input, on failure
            (see `error`), and when a newer search superseded this one
        """
        self._generation += 1
        generation = self._generation

        if not self.is_searchable(query):
            self.suggestions = []
            self.is_loading = False
            return []

        key = query.strip()

        if self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
            if generation != self._generation:
                logger.debug(f"Search {key!r} superseded during debounce")
                return []

        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self.suggestions = list(cached)
            self.error = None
            self.is_loading = False
            return list(cached)

        self.is_loading = True
        self.error = None
        try:
            results = await self._fetch(key)
        except CityReportError as e:
            if generation != self._generation:
                logger.debug(f"Dropping stale failure for {key!r}: {e.message}")
                return []
            logger.warning(f"Address search failed for {key!r}: {e.message}")
            self.error = e.message
            self.suggestions = []
            self.is_loading = False
            return []

        ranked = rank_suggestions(results)
        self._remember(key, ranked)

        if generation != self._generation:
            logger.debug(f"Dropping stale results for {key!r}")
            return []

        self.suggestions = ranked
        self.is_loading = False
        return list(ranked)

    async def _fetch(self, key: str) -> List[AddressSuggestion]:
        """Share one provider request between concurrent searches for the same text."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self.client.forward_search(key))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        return await asyncio.shield(task)

    def _remember(self, key: str, results: List[AddressSuggestion]) -> None:
        self._cache[key] = results
        self._cache.move_to_end(key)
        while len(self._cache) > self.CACHE_SIZE:
            self._cache.popitem(last=False)

    def clear_suggestions(self) -> None:
        """Empty the list and drop any pending search result."""
        self._generation += 1
        self.suggestions = []
        self.is_loading = False

    async def reverse_geocode(self, coordinate: Coordinate) -> AddressSuggestion:
        """
        Address at a coordinate (map taps).

        Raises:
            NetworkError, NoResultsError: lookup failed; `error` is set as well
        """
        self.is_loading = True
        self.error = None
        try:
            return await self.client.reverse_geocode(coordinate)
        except CityReportError as e:
            self.error = e.message
            raise
        finally:
            self.is_loading = False

    def resolve_current_location(self, coordinate: Coordinate) -> AddressSuggestion:
        """
        Suggestion for the device position, returned without waiting on the network.

        The suggestion carries the sentinel label. A reverse lookup is started
        in the background; its address is published on
        `current_location_address`. Must be called from a running event loop.

        Args:
            coordinate: GPS position

        Returns:
            Synthesized suggestion
        """
        suggestion = AddressSuggestion(
            formatted=self.current_location_label,
            coordinate=coordinate,
            source_kind=SuggestionSource.CURRENT_LOCATION,
        )

        self._generation += 1
        self.suggestions = [suggestion]
        self.error = None
        self.is_loading = False

        self._start_current_location_lookup(coordinate)
        return suggestion

    def _start_current_location_lookup(self, coordinate: Coordinate) -> asyncio.Task:
        self._current_location = coordinate
        self.current_location_address.set(None)
        loop = asyncio.get_running_loop()
        self._current_location_task = loop.create_task(
            self._lookup_current_location(coordinate)
        )
        return self._current_location_task

    async def _lookup_current_location(self, coordinate: Coordinate) -> Optional[str]:
        try:
            result = await self.client.reverse_geocode(coordinate)
        except CityReportError as e:
            logger.warning(f"Current location lookup failed: {e.message}")
            if coordinate == self._current_location:
                self.error = e.message
            return None

        if coordinate != self._current_location:
            logger.debug("Current location moved, dropping stale address")
            return None

        logger.info(f"Current location resolved to {result.formatted!r}")
        self.current_location_address.set(result.formatted)
        return result.formatted

    async def wait_for_current_location_address(
        self, coordinate: Coordinate, timeout: Optional[float] = None
    ) -> str:
        """
        Real address for a "current location" selection, waiting if needed.

        A lookup that failed earlier, or one for another coordinate, is
        started again.

        Args:
            coordinate: Position selected as current location
            timeout: Longest wait in seconds

        Returns:
            Normalized street address

        Raises:
            NetworkError: Address could not be determined in time
        """
        wait = settings.current_location_wait_seconds if timeout is None else timeout

        if coordinate == self._current_location and self.current_location_address.value:
            return self.current_location_address.value

        task = self._current_location_task
        if (
            task is None
            or coordinate != self._current_location
            or (task.done() and (task.cancelled() or task.result() is None))
        ):
            task = self._start_current_location_lookup(coordinate)

        try:
            address = await asyncio.wait_for(asyncio.shield(task), timeout=wait)
        except asyncio.TimeoutError:
            logger.warning(f"Current location lookup still pending after {wait}s")
            raise NetworkError(MSG_CURRENT_LOCATION_UNRESOLVED)

        if not address:
            raise NetworkError(MSG_CURRENT_LOCATION_UNRESOLVED)
        return address
