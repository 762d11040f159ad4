"""
CityReport - Geospatial Utilities
Coordinate value object and helpers.
"""

import math
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """Geographic point in decimal degrees. Immutable."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not is_valid_coordinate(self.latitude, self.longitude):
            raise ValueError(
                f"Invalid coordinate: ({self.latitude}, {self.longitude})"
            )

    def to_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_lat_lng(cls, lat: Any, lng: Any) -> "Coordinate":
        """Build from provider-style lat/lng values (numbers or numeric strings)."""
        return cls(latitude=float(lat), longitude=float(lng))


def is_valid_coordinate(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """
    Check that both values are finite numbers inside WGS84 bounds.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees

    Returns:
        True when the pair is a usable coordinate
    """
    if latitude is None or longitude is None:
        return False
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def format_coordinate(coordinate: Coordinate, precision: int = 6) -> str:
    """Format as 'lat, lon' with fixed precision."""
    return f"{coordinate.latitude:.{precision}f}, {coordinate.longitude:.{precision}f}"


def reverse_query(coordinate: Coordinate) -> str:
    """Provider query for a reverse lookup. URL-encoded it reads '<lat>+<lng>'."""
    return f"{coordinate.latitude} {coordinate.longitude}"
