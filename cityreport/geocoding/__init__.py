"""
CityReport - Geocoding Module
Address search, reverse lookup and the selected location of a form.
"""

from cityreport.geocoding.client import (
    GeocodeClient,
    AddressSuggestion,
    SuggestionSource,
    normalize_address,
)
from cityreport.geocoding.resolver import (
    AddressResolver,
    extract_postal_code,
    rank_suggestions,
)
from cityreport.geocoding.selection import (
    LocationSelection,
    LocationSelectionState,
)

__all__ = [
    # Client
    "GeocodeClient",
    "AddressSuggestion",
    "SuggestionSource",
    "normalize_address",
    # Resolver
    "AddressResolver",
    "extract_postal_code",
    "rank_suggestions",
    # Selection
    "LocationSelection",
    "LocationSelectionState",
]
