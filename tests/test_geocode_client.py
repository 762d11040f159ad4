"""
Tests for the geocoding client
"""
import pytest

import httpx

from conftest import provider_payload, provider_result
from cityreport.core.exceptions import NetworkError, NoResultsError
from cityreport.core.geo_utils import Coordinate
from cityreport.geocoding.client import (
    AddressSuggestion,
    GeocodeClient,
    SuggestionSource,
    normalize_address,
)


class TestNormalizeAddress:
    """Test unnamed road rewriting."""

    def test_replaces_placeholder_case_insensitive(self):
        """Test every casing of the placeholder is replaced."""
        assert normalize_address("Unnamed Road, 13001 Marseille", "Route inconnue") == \
            "Route inconnue, 13001 Marseille"
        assert normalize_address("unnamed road", "Route inconnue") == "Route inconnue"

    def test_leaves_other_text_alone(self):
        """Test regular addresses are unchanged."""
        assert normalize_address("10 Rue de la Paix, Paris 75002", "Route inconnue") == \
            "10 Rue de la Paix, Paris 75002"


class TestForwardSearch:
    """Test suite for forward search."""

    @pytest.mark.asyncio
    async def test_sends_query_and_key(self, make_geocoder, paix_results):
        """Test the provider receives q and key parameters."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=paix_results)

        client = make_geocoder(handler)
        await client.forward_search("10 rue de la Paix")

        assert len(requests) == 1
        assert requests[0].method == "GET"
        assert requests[0].url.params["q"] == "10 rue de la Paix"
        assert requests[0].url.params["key"] == "test_key"

    @pytest.mark.asyncio
    async def test_narrows_provider_results(self, make_geocoder, paix_results):
        """Test results become strict AddressSuggestion values."""
        client = make_geocoder(lambda request: httpx.Response(200, json=paix_results))

        suggestions = await client.forward_search("10 rue de la Paix")

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert isinstance(suggestion, AddressSuggestion)
        assert suggestion.formatted == "10 Rue de la Paix, Paris 75002"
        assert suggestion.coordinate == Coordinate(48.8692, 2.3316)
        assert suggestion.source_kind == SuggestionSource.GEOCODED
        assert set(suggestion.to_dict()) == {"formatted", "latitude", "longitude", "source_kind"}

    @pytest.mark.asyncio
    async def test_normalizes_unnamed_road(self, make_geocoder):
        """Test forward results are normalized by the client."""
        payload = provider_payload(provider_result("unnamed road, 33000 Bordeaux", 44.84, -0.58))
        client = make_geocoder(lambda request: httpx.Response(200, json=payload))

        suggestions = await client.forward_search("bordeaux")

        assert suggestions[0].formatted == "Route inconnue, 33000 Bordeaux"

    @pytest.mark.asyncio
    async def test_keeps_provider_order(self, make_geocoder):
        """Test the client itself does not rank results."""
        payload = provider_payload(
            provider_result("Rue A, 75008 Paris", 48.87, 2.31),
            provider_result("Rue B, 69001 Lyon", 45.76, 4.83),
        )
        client = make_geocoder(lambda request: httpx.Response(200, json=payload))

        suggestions = await client.forward_search("rue")

        assert [s.formatted for s in suggestions] == ["Rue A, 75008 Paris", "Rue B, 69001 Lyon"]

    @pytest.mark.asyncio
    async def test_skips_malformed_results(self, make_geocoder):
        """Test entries without usable geometry are dropped."""
        payload = provider_payload(
            {"formatted": "No geometry"},
            provider_result("Bad latitude", 123.0, 2.0),
            provider_result("Rue C, 31000 Toulouse", 43.6, 1.44),
        )
        client = make_geocoder(lambda request: httpx.Response(200, json=payload))

        suggestions = await client.forward_search("rue")

        assert [s.formatted for s in suggestions] == ["Rue C, 31000 Toulouse"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"results": 5}, {"results": {"formatted": "x"}}, ["not", "a", "dict"]])
    async def test_results_not_a_list_raise_no_results(self, make_geocoder, body):
        """Test an odd 2xx payload shape ends as NoResultsError, not a raw TypeError."""
        client = make_geocoder(lambda request: httpx.Response(200, json=body))

        with pytest.raises(NoResultsError):
            await client.forward_search("10 rue de la Paix")

    @pytest.mark.asyncio
    async def test_empty_results_raise_no_results(self, make_geocoder):
        """Test an empty result set is distinguished from a failure."""
        client = make_geocoder(lambda request: httpx.Response(200, json=provider_payload()))

        with pytest.raises(NoResultsError) as exc_info:
            await client.forward_search("nowhere")

        assert exc_info.value.message == "Aucune adresse correspondante trouvée"

    @pytest.mark.asyncio
    async def test_only_malformed_results_raise_no_results(self, make_geocoder):
        """Test nothing usable counts as no results."""
        payload = provider_payload({"formatted": "No geometry"})
        client = make_geocoder(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(NoResultsError):
            await client.forward_search("nowhere")

    @pytest.mark.asyncio
    async def test_transport_error_raises_network_error(self, make_geocoder):
        """Test raw httpx errors are wrapped."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_geocoder(handler)

        with pytest.raises(NetworkError) as exc_info:
            await client.forward_search("10 rue de la Paix")

        assert exc_info.value.message == "Impossible de rechercher l'adresse"
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_provider_error_status_raises_network_error(self, make_geocoder):
        """Test non-2xx provider answers become NetworkError with the status."""
        payload = {"results": [], "status": {"code": 401, "message": "invalid API key"}}
        client = make_geocoder(lambda request: httpx.Response(401, json=payload))

        with pytest.raises(NetworkError) as exc_info:
            await client.forward_search("10 rue de la Paix")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, make_geocoder):
        """Test an HTML error page is still reported as NetworkError."""
        client = make_geocoder(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

        with pytest.raises(NetworkError):
            await client.forward_search("10 rue de la Paix")


class TestReverseGeocode:
    """Test suite for reverse lookup."""

    @pytest.mark.asyncio
    async def test_sends_lat_lng_query(self, make_geocoder, paris_coordinate):
        """Test the query is '<lat>+<lng>' once URL-decoded."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=provider_payload(
                provider_result("1 Rue de la Paix, 75002 Paris, France", 48.8699, 2.3312)
            ))

        client = make_geocoder(handler)
        await client.reverse_geocode(paris_coordinate)

        assert requests[0].url.params["q"] == "48.8698 2.3311"

    @pytest.mark.asyncio
    async def test_uses_first_result_and_requested_coordinate(self, make_geocoder, paris_coordinate):
        """Test the first result's text is paired with the requested position."""
        payload = provider_payload(
            provider_result("Unnamed Road, 75002 Paris", 48.87, 2.33),
            provider_result("Second choice", 48.0, 2.0),
        )
        client = make_geocoder(lambda request: httpx.Response(200, json=payload))

        suggestion = await client.reverse_geocode(paris_coordinate)

        assert suggestion.formatted == "Route inconnue, 75002 Paris"
        assert suggestion.coordinate == paris_coordinate

    @pytest.mark.asyncio
    async def test_empty_results(self, make_geocoder, paris_coordinate):
        """Test reverse lookup with no address."""
        client = make_geocoder(lambda request: httpx.Response(200, json=provider_payload()))

        with pytest.raises(NoResultsError) as exc_info:
            await client.reverse_geocode(paris_coordinate)

        assert exc_info.value.message == "Impossible de déterminer l'adresse exacte"

    @pytest.mark.asyncio
    async def test_timeout(self, make_geocoder, paris_coordinate):
        """Test timeouts are wrapped like other transport errors."""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_geocoder(handler)

        with pytest.raises(NetworkError):
            await client.reverse_geocode(paris_coordinate)


class TestClientDefaults:
    def test_explicit_zero_timeout_is_kept(self):
        """Test timeout=0 is not replaced by the configured default."""
        client = GeocodeClient(api_key="k", timeout=0)
        assert client.timeout == 0
