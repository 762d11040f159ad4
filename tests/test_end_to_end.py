"""
Full flow: search an address, fill the form, submit
"""
import pytest

import httpx

from conftest import API_URL, GEOCODING_URL, multipart_fields
from cityreport.geocoding.client import GeocodeClient
from cityreport.geocoding.resolver import AddressResolver
from cityreport.geocoding.selection import LocationSelectionState
from cityreport.submission.forms import ReportCategory, SubmissionKind
from cityreport.submission.identity import StaticIdentity
from cityreport.submission.pipeline import SubmissionPipeline
from cityreport.submission.wizard import SubmissionWizard


@pytest.fixture
def traffic():
    return {"geocoder": [], "backend": []}


@pytest.fixture
def build_flow(paix_results, traffic):
    """Wizard wired to one transport that plays both geocoder and backend."""
    def _build(backend_status=201):
        def handler(request):
            if str(request.url).startswith(GEOCODING_URL):
                traffic["geocoder"].append(request)
                return httpx.Response(200, json=paix_results)
            traffic["backend"].append(request)
            if backend_status >= 400:
                return httpx.Response(backend_status, text="Erreur serveur")
            return httpx.Response(backend_status, json={"id": 101})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        resolver = AddressResolver(
            GeocodeClient(api_key="test_key", base_url=GEOCODING_URL, http_client=http_client),
            current_location_label="Ma position",
            debounce_seconds=0,
        )
        pipeline = SubmissionPipeline(
            identity=StaticIdentity(42),
            api_url=API_URL,
            preparing_delay=0,
            finalizing_delay=0,
            http_client=http_client,
        )
        wizard = SubmissionWizard(SubmissionKind.REPORT, LocationSelectionState(resolver), pipeline)
        return resolver, wizard
    return _build


class TestReportFlow:
    """Test the report flow end to end."""

    @pytest.mark.asyncio
    async def test_search_select_submit(self, build_flow, traffic):
        """Test a report about 10 rue de la Paix reaches the backend."""
        resolver, wizard = build_flow()
        progress = []
        wizard.pipeline.progress.subscribe(progress.append)

        wizard.set_category(ReportCategory.DANGER)
        wizard.next()
        wizard.set_title("Nid de poule")
        wizard.set_description("Trou profond")
        wizard.next()
        suggestions = await resolver.search("10 rue de la Paix")
        wizard.select_suggestion(suggestions[0])

        result = await wizard.submit()

        assert result.success is True
        assert result.data == {"id": 101}
        assert len(traffic["geocoder"]) == 1
        assert len(traffic["backend"]) == 1
        assert multipart_fields(traffic["backend"][0]) == {
            "title": "Nid de poule",
            "description": "Trou profond",
            "city": "10 Rue de la Paix, Paris 75002",
            "latitude": "48.8692",
            "longitude": "2.3316",
            "type": "danger",
            "userId": "42",
        }
        assert progress == [0.2, 0.7, 1.0]
        assert wizard.draft.title == ""

    @pytest.mark.asyncio
    async def test_server_error_then_retry(self, build_flow, traffic):
        """Test a 500 is reported and the kept form can be sent again."""
        resolver, wizard = build_flow(backend_status=500)
        wizard.set_category(ReportCategory.DANGER)
        wizard.set_title("Nid de poule")
        wizard.set_description("Trou profond")
        suggestions = await resolver.search("10 rue de la Paix")
        wizard.select_suggestion(suggestions[0])

        result = await wizard.submit()

        assert result.success is False
        assert result.error == "Erreur serveur (500): Erreur serveur"
        assert wizard.pipeline.progress.current == 0.7
        assert wizard.draft.title == "Nid de poule"

        retry = await wizard.submit()

        assert retry.success is False
        assert len(traffic["backend"]) == 2
