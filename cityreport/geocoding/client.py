"""
Geocoding API client for CityReport

Thin wrapper over an OpenCage-compatible geocoding endpoint:

    GET <geocoding_url>?q=<text>&key=<key>          forward search
    GET <geocoding_url>?q=<lat>+<lng>&key=<key>     reverse lookup

Provider results are narrowed here into AddressSuggestion values; nothing
provider-specific is returned to callers.

API Documentation: https://opencagedata.com/api
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from cityreport.core.config import settings
from cityreport.core.constants import (
    MSG_NO_RESULTS,
    MSG_REVERSE_FAILED,
    MSG_REVERSE_NO_RESULTS,
    MSG_SEARCH_FAILED,
    UNNAMED_ROAD_PATTERN,
)
from cityreport.core.exceptions import NetworkError, NoResultsError
from cityreport.core.geo_utils import Coordinate, reverse_query

logger = logging.getLogger(__name__)


class SuggestionSource(str, Enum):
    """Where a suggestion came from."""

    GEOCODED = "geocoded"
    CURRENT_LOCATION = "currentLocation"


@dataclass(frozen=True)
class AddressSuggestion:
    """
    One candidate address.

    Attributes:
        formatted: Display text, already normalized
        coordinate: Position of the address
        source_kind: Provider result or synthesized "current location"
    """

    formatted: str
    coordinate: Coordinate
    source_kind: SuggestionSource = SuggestionSource.GEOCODED

    @property
    def is_current_location(self) -> bool:
        return self.source_kind == SuggestionSource.CURRENT_LOCATION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "formatted": self.formatted,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "source_kind": self.source_kind.value,
        }


class _ProviderGeometry(BaseModel):
    lat: float
    lng: float


class _ProviderResult(BaseModel):
    formatted: str
    geometry: _ProviderGeometry


def normalize_address(address: str, unknown_road_label: Optional[str] = None) -> str:
    """Replace the provider's 'unnamed road' placeholder with a readable label."""
    label = unknown_road_label or settings.unknown_road_label
    return re.sub(UNNAMED_ROAD_PATTERN, label, address, flags=re.IGNORECASE)


class GeocodeClient:
    """
    Client for the geocoding provider. Holds no state besides the HTTP client.

    Usage:
        async with GeocodeClient(api_key="your_key") as client:
            suggestions = await client.forward_search("10 rue de la Paix")
            here = await client.reverse_geocode(Coordinate(48.8698, 2.3311))

    Errors:
        NetworkError: transport failure or non-2xx provider response
        NoResultsError: provider returned an empty result set
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        unknown_road_label: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize geocoding client.

        Args:
            api_key: Provider key, defaults to settings.geocoding_api_key
            base_url: Provider endpoint, defaults to settings.geocoding_url
            timeout: HTTP request timeout in seconds
            unknown_road_label: Replacement text for unnamed roads
            http_client: Pre-configured async client (not closed by this object)
        """
        self.api_key = api_key if api_key is not None else settings.geocoding_api_key
        self.base_url = base_url or settings.geocoding_url
        self.timeout = settings.geocoding_timeout_seconds if timeout is None else timeout
        self.unknown_road_label = unknown_road_label or settings.unknown_road_label
        self._client = http_client
        self._owns_client = http_client is None

        if not self.api_key:
            logger.warning("No geocoding API key configured")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this object created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def forward_search(self, text: str) -> List[AddressSuggestion]:
        """
        Look up addresses matching free text.

        Args:
            text: Address or place name

        Returns:
            Suggestions in provider order

        Raises:
            NetworkError: Request failed
            NoResultsError: Nothing matched
        """
        logger.info(f"Geocoding search: {text!r}")
        suggestions = await self._query(text, MSG_SEARCH_FAILED, MSG_NO_RESULTS)
        logger.info(f"Geocoding returned {len(suggestions)} suggestions")
        return suggestions

    async def reverse_geocode(self, coordinate: Coordinate) -> AddressSuggestion:
        """
        Find the address at a coordinate. The first provider result is used.

        The returned suggestion keeps the requested coordinate rather than the
        provider's snapped position.

        Raises:
            NetworkError: Request failed
            NoResultsError: No address known at this position
        """
        logger.info(f"Reverse geocoding: ({coordinate.latitude}, {coordinate.longitude})")
        suggestions = await self._query(
            reverse_query(coordinate), MSG_REVERSE_FAILED, MSG_REVERSE_NO_RESULTS
        )
        return AddressSuggestion(formatted=suggestions[0].formatted, coordinate=coordinate)

    async def _query(
        self, query: str, failure_message: str, empty_message: str
    ) -> List[AddressSuggestion]:
        """Run one provider request and narrow its results."""
        params = {"q": query, "key": self.api_key or ""}

        try:
            response = await self._get_client().get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Geocoding request failed: {e}")
            raise NetworkError(failure_message) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error:
            status = data.get("status") or {}
            detail = status.get("message") if isinstance(status, dict) else None
            logger.error(
                f"Geocoding provider error {response.status_code}: {detail or 'Erreur de serveur'}"
            )
            raise NetworkError(failure_message, status_code=response.status_code)

        results = data.get("results") or []
        if not isinstance(results, list):
            logger.warning(f"Unexpected geocoding results payload: {type(results).__name__}")
            results = []

        suggestions = self._parse_results(results)
        if not suggestions:
            raise NoResultsError(empty_message)
        return suggestions

    def _parse_results(self, results: List[Any]) -> List[AddressSuggestion]:
        """Narrow raw provider results, skipping malformed entries."""
        suggestions = []
        for raw in results:
            try:
                result = _ProviderResult.model_validate(raw)
                coordinate = Coordinate.from_lat_lng(result.geometry.lat, result.geometry.lng)
            except (PydanticValidationError, ValueError) as e:
                logger.warning(f"Skipping malformed geocoding result: {e}")
                continue
            suggestions.append(
                AddressSuggestion(
                    formatted=normalize_address(result.formatted, self.unknown_road_label),
                    coordinate=coordinate,
                )
            )
        return suggestions
