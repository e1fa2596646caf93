"""
Analysis API tests.

The pipeline runs for real against the test database, but pages are served
by an httpx mock transport so no test touches the network.
"""
import json

import httpx
import pytest

from wcag_audit.features.analysis.dependencies import get_analysis_service, get_broadcaster, get_store
from wcag_audit.features.analysis.routes.fixtures import ACCESSIBLE_HTML, NOT_ACCESSIBLE_HTML
from wcag_audit.features.analysis.services.analyser import default_analyser
from wcag_audit.features.analysis.services.analysis_service import AnalysisService
from wcag_audit.features.analysis.services.dispatcher import AnalysisDispatcher
from wcag_audit.features.analysis.services.fetcher import PageFetcher
from wcag_audit.features.analysis.services.orchestrator import AnalysisOrchestrator

PAGES = {
    "/accessible.html": ACCESSIBLE_HTML,
    "/not-accessible.html": NOT_ACCESSIBLE_HTML,
}


def serve_pages(request):
    if request.url.path in PAGES:
        return httpx.Response(200, text=PAGES[request.url.path])
    return httpx.Response(404)


@pytest.fixture
def dispatcher():
    orchestrator = AnalysisOrchestrator(
        store=get_store(),
        fetcher=PageFetcher(timeout=5, transport=httpx.MockTransport(serve_pages)),
        analyser=default_analyser(),
        broadcaster=get_broadcaster(),
    )
    return AnalysisDispatcher(orchestrator)


@pytest.fixture
def api(client, test_app, dispatcher, monkeypatch):
    from sse_starlette.sse import AppStatus

    # The shutdown event binds to the loop of the first client that streams
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)

    test_app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(get_store(), dispatcher)
    yield client
    client.portal.call(dispatcher.drain, 5)
    test_app.dependency_overrides.clear()


def submit(api, url):
    response = api.post("/api/v1/analyze", json={"url": url})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def wait_for_runs(api, dispatcher):
    api.portal.call(dispatcher.drain, 5)


class TestSubmitAnalysis:

    def test_returns_pending_record_with_camel_case_keys(self, api):
        response = api.post("/api/v1/analyze", json={"url": "https://site.test/accessible.html"})

        assert response.status_code == 201
        payload = response.json()
        assert payload["status"] == "success"
        assert payload["message"] == "Analysis started"
        assert set(payload["data"]) == {"id", "url", "status", "createdAt"}
        assert payload["data"]["status"] == "pending"
        assert payload["data"]["url"] == "https://site.test/accessible.html"

    def test_url_without_scheme_is_normalized(self, api):
        data = submit(api, "site.test/accessible.html")

        assert data["url"] == "https://site.test/accessible.html"

    @pytest.mark.parametrize("url", ["", "   ", "ftp://site.test/file", "https://"])
    def test_invalid_url_is_rejected(self, api, url):
        response = api.post("/api/v1/analyze", json={"url": url})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid URL")

    def test_missing_url_fails_validation(self, api):
        response = api.post("/api/v1/analyze", json={})

        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"


class TestGetAnalysis:

    def test_finished_analysis_has_results(self, api, dispatcher):
        data = submit(api, "https://site.test/accessible.html")
        wait_for_runs(api, dispatcher)

        response = api.get(f"/api/v1/analyses/{data['id']}")

        assert response.status_code == 200
        analysis = response.json()["data"]
        assert analysis["status"] == "finished"
        assert analysis["errorMessage"] is None
        assert list(analysis["results"]) == ["title-check", "img-alt-check", "input-label-check"]
        assert all(result["passed"] for result in analysis["results"].values())
        assert {"createdAt", "updatedAt"} <= set(analysis)

    def test_http_error_is_recorded(self, api, dispatcher):
        data = submit(api, "https://site.test/missing")
        wait_for_runs(api, dispatcher)

        analysis = api.get(f"/api/v1/analyses/{data['id']}").json()["data"]

        assert analysis["status"] == "failed"
        assert analysis["errorMessage"] == "Not Found"
        assert analysis["results"] is None

    def test_unknown_id_is_404(self, api):
        response = api.get("/api/v1/analyses/does-not-exist")

        assert response.status_code == 404
        assert response.json()["message"] == "Analysis not found"


class TestListAnalyses:

    def test_newest_first_with_pagination(self, api, dispatcher):
        ids = [submit(api, f"https://site.test/accessible.html?n={i}")["id"] for i in range(3)]
        wait_for_runs(api, dispatcher)

        response = api.get("/api/v1/analyses", params={"page": 1, "limit": 2})

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["page"] == 1
        assert page["limit"] == 2
        assert page["total"] >= 3
        assert page["totalPages"] == -(-page["total"] // 2)
        assert [item["id"] for item in page["items"]] == [ids[2], ids[1]]

    def test_default_limit(self, api):
        page = api.get("/api/v1/analyses").json()["data"]

        assert page["page"] == 1
        assert page["limit"] == 10

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    def test_out_of_range_paging_is_rejected(self, api, params):
        assert api.get("/api/v1/analyses", params=params).status_code == 422


class TestProgressChannel:

    def test_websocket_receives_every_transition(self, api):
        with api.websocket_connect("/api/v1/ws/analyses") as websocket:
            data = submit(api, "https://site.test/not-accessible.html")

            events = []
            while not events or events[-1]["status"] not in ("finished", "failed"):
                message = websocket.receive_json()
                assert message["event"] == "analysis-progress"
                if message["data"]["analysisId"] == data["id"]:
                    events.append(message["data"])

        assert [event["status"] for event in events] == ["fetching", "ongoing", "finished"]
        results = events[-1]["results"]
        assert results["title-check"]["passed"] is False
        assert results["img-alt-check"]["details"] == {
            "totalImages": 2,
            "imagesWithoutAlt": 1,
            "imagesWithEmptyAlt": 1,
        }
        assert results["input-label-check"]["details"] == {"totalInputs": 2, "inputsWithoutLabel": 2}

    def test_websocket_failure_event_carries_error_message(self, api):
        with api.websocket_connect("/api/v1/ws/analyses") as websocket:
            data = submit(api, "https://site.test/gone")

            while True:
                message = websocket.receive_json()["data"]
                if message["analysisId"] == data["id"] and message["status"] == "failed":
                    break

        assert message["errorMessage"] == "Not Found"
        assert "results" not in message

    def test_sse_stream_of_finished_analysis_sends_snapshot_and_ends(self, api, dispatcher):
        data = submit(api, "https://site.test/accessible.html")
        wait_for_runs(api, dispatcher)

        response = api.get(f"/api/v1/analyses/{data['id']}/events")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        lines = response.text.splitlines()
        assert "event: analysis-progress" in lines
        event = json.loads(next(line for line in lines if line.startswith("data: "))[len("data: "):])
        assert event["analysisId"] == data["id"]
        assert event["status"] == "finished"

    def test_sse_unknown_id_is_404(self, api):
        assert api.get("/api/v1/analyses/does-not-exist/events").status_code == 404


class TestFixturePages:

    @pytest.mark.parametrize(
        "path, marker",
        [
            ("/test-fixtures/accessible.html", "Test Page - Accessible"),
            ("/test-fixtures/not-accessible.html", "Test Page - Not Accessible"),
        ],
    )
    def test_serves_html(self, client, path, marker):
        response = client.get(path)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert marker in response.text
