"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path

import httpx

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cityreport.core.geo_utils import Coordinate
from cityreport.geocoding.client import GeocodeClient
from cityreport.geocoding.resolver import AddressResolver
from cityreport.geocoding.selection import LocationSelectionState
from cityreport.submission.identity import StaticIdentity
from cityreport.submission.pipeline import SubmissionPipeline

GEOCODING_URL = "https://geocoder.test/geocode/v1/json"
API_URL = "https://backend.test"


def provider_result(formatted, lat, lng, **extra):
    """One provider result, with optional provider-specific fields."""
    result = {"formatted": formatted, "geometry": {"lat": lat, "lng": lng}}
    result.update(extra)
    return result


def provider_payload(*results):
    return {"results": list(results), "status": {"code": 200, "message": "OK"}}


@pytest.fixture
def paix_results():
    """Provider answer for '10 rue de la Paix'."""
    return provider_payload(
        provider_result(
            "10 Rue de la Paix, Paris 75002", 48.8692, 2.3316,
            components={"city": "Paris", "postcode": "75002"},
            confidence=9,
        ),
    )


@pytest.fixture
def paris_coordinate():
    return Coordinate(48.8698, 2.3311)


@pytest.fixture
def make_geocoder():
    """Build a GeocodeClient whose HTTP calls go to `handler`."""
    def _make(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GeocodeClient(
            api_key="test_key",
            base_url=GEOCODING_URL,
            unknown_road_label="Route inconnue",
            http_client=http_client,
        )
    return _make


@pytest.fixture
def make_resolver(make_geocoder):
    """AddressResolver without debounce over a mocked provider."""
    def _make(handler, debounce_seconds=0):
        return AddressResolver(
            make_geocoder(handler),
            current_location_label="Ma position",
            debounce_seconds=debounce_seconds,
        )
    return _make


@pytest.fixture
def make_selection(make_resolver):
    def _make(handler):
        return LocationSelectionState(make_resolver(handler))
    return _make


@pytest.fixture
def make_pipeline():
    """SubmissionPipeline with no delays over a mocked backend."""
    def _make(handler, user_id=42):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return SubmissionPipeline(
            identity=StaticIdentity(user_id),
            api_url=API_URL,
            preparing_delay=0,
            finalizing_delay=0,
            http_client=http_client,
        )
    return _make


@pytest.fixture
def photo_file(tmp_path):
    """A small JPEG-like file on disk."""
    path = tmp_path / "pothole.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg-data")
    return path


def multipart_fields(request):
    """Decode the text parts of a multipart request into a dict (last value wins)."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=")[1].encode()
    fields = {}
    for part in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in part:
            continue
        head, _, body = part.partition(b"\r\n\r\n")
        if b"filename=" in head:
            continue
        name = head.split(b'name="')[1].split(b'"')[0].decode()
        fields[name] = body.rstrip(b"\r\n").decode()
    return fields
