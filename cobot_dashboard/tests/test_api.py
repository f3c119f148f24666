"""HTTP-level tests for the FastAPI app — envelopes, status codes, CORS."""

from __future__ import annotations

from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from cobot_dashboard.dependencies import get_aggregator, get_cobot_client
from cobot_dashboard.exceptions import ProviderError
from cobot_dashboard.main import app
from cobot_dashboard.tests.conftest import (
    TEST_MEMBER_ID,
    make_aggregator,
    make_cobot_client,
)


@pytest.fixture
def api() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_cobot(client: MagicMock) -> None:
    app.dependency_overrides[get_cobot_client] = lambda: client
    app.dependency_overrides[get_aggregator] = lambda: make_aggregator(client)


class TestHealth:
    def test_health_ok(self, api: TestClient) -> None:
        response = api.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert "T" in body["timestamp"]

    def test_cors_headers_without_origin(self, api: TestClient) -> None:
        response = api.get("/health")
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Content-Type" in response.headers["Access-Control-Allow-Headers"]

    def test_preflight_for_put(self, api: TestClient) -> None:
        response = api.options(
            f"/api/member/{TEST_MEMBER_ID}/custom_fields",
            headers={
                "Origin": "https://support.example.com",
                "Access-Control-Request-Method": "PUT",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "PUT" in response.headers["Access-Control-Allow-Methods"]


class TestGetMember:
    def test_success_envelope(self, api: TestClient, cobot_client: MagicMock) -> None:
        _use_cobot(cobot_client)

        response = api.get(f"/api/member/{TEST_MEMBER_ID}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "fetchedAt" in body
        data = body["data"]
        assert data["name"] == "Erika Mustermann"
        assert data["totalBookingsLast30Days"] == 2
        assert data["upcomingBookings"] == 1
        assert len(data["bookingHistory"]) == 3
        assert data["lastInvoice"]["amount"] == "210.5 EUR"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_profile_404_is_500(
        self, api: TestClient, custom_fields_raw: dict, invoices_raw: list[dict]
    ) -> None:
        _use_cobot(make_cobot_client(
            member=ProviderError("Cobot API Error: 404", status_code=404),
            custom_fields=custom_fields_raw,
            invoices=invoices_raw,
            past=[],
            upcoming=[],
        ))

        response = api.get(f"/api/member/{TEST_MEMBER_ID}")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Cobot API Error: 404"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_invoice_failure_still_succeeds(self, api: TestClient, member_raw: dict) -> None:
        _use_cobot(make_cobot_client(
            member=member_raw,
            custom_fields={"fields": []},
            invoices=ProviderError("Cobot API Error: 502", status_code=502),
            past=[],
            upcoming=[],
        ))

        response = api.get(f"/api/member/{TEST_MEMBER_ID}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["lastInvoice"] is None
        assert body["data"]["nextInvoice"] is None

    def test_numeric_plan_name_is_text(self, api: TestClient, member_raw: dict) -> None:
        member_raw["plan"] = {"name": 42, "price_display": 199}
        _use_cobot(make_cobot_client(member=member_raw, invoices=[], past=[], upcoming=[]))

        response = api.get(f"/api/member/{TEST_MEMBER_ID}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["plan"] == "42"
        assert data["planPrice"] == "199"

    def test_unexpected_error_keeps_envelope_and_cors(self) -> None:
        aggregator = MagicMock()
        aggregator.get_display_bundle = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_aggregator] = lambda: aggregator
        try:
            response = TestClient(app, raise_server_exceptions=False).get(
                f"/api/member/{TEST_MEMBER_ID}"
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Interner Serverfehler"}
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Content-Type" in response.headers["Access-Control-Allow-Headers"]


class TestPutCustomFields:
    def test_success_returns_provider_body(self, api: TestClient) -> None:
        client = make_cobot_client()
        client.put.return_value = [{"id": "aeb42929e950a92a4754f3313e44dfba", "value": True}]
        _use_cobot(client)

        response = api.put(
            f"/api/member/{TEST_MEMBER_ID}/custom_fields", json={"fix_desk": True}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": [{"id": "aeb42929e950a92a4754f3313e44dfba", "value": True}],
        }
        payload = client.put.call_args.args[1]
        assert payload == [{"id": "aeb42929e950a92a4754f3313e44dfba", "value": True}]

    def test_unknown_field_is_400_without_call(self, api: TestClient) -> None:
        client = make_cobot_client()
        _use_cobot(client)

        response = api.put(
            f"/api/member/{TEST_MEMBER_ID}/custom_fields", json={"unknown_field": "x"}
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Keine gültigen Felder zum Aktualisieren",
        }
        client.put.assert_not_awaited()

    def test_array_body_is_400_without_call(self, api: TestClient) -> None:
        client = make_cobot_client()
        _use_cobot(client)

        response = api.put(f"/api/member/{TEST_MEMBER_ID}/custom_fields", json=["fix_desk"])

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Keine gültigen Felder zum Aktualisieren",
        }
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        client.put.assert_not_awaited()

    def test_missing_body_is_400_without_call(self, api: TestClient) -> None:
        client = make_cobot_client()
        _use_cobot(client)

        response = api.put(f"/api/member/{TEST_MEMBER_ID}/custom_fields")

        assert response.status_code == 400
        assert response.json()["success"] is False
        client.put.assert_not_awaited()

    def test_provider_rejection_is_500(self, api: TestClient) -> None:
        client = make_cobot_client()
        client.put.side_effect = ProviderError(
            "Cobot API Error: 422 - invalid value", status_code=422, body="invalid value"
        )
        _use_cobot(client)

        response = api.put(
            f"/api/member/{TEST_MEMBER_ID}/custom_fields", json={"nachsendeadresse": ""}
        )

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "422" in body["error"]
        assert "invalid value" in body["error"]


class TestStaticWidget:
    def test_static_dir_served_behind_api(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        from cobot_dashboard.config import get_settings
        from cobot_dashboard.main import create_app

        (tmp_path / "index.html").write_text("<h1>Cobot Widget</h1>", encoding="utf-8")
        monkeypatch.setenv("STATIC_DIR", str(tmp_path))
        get_settings.cache_clear()
        try:
            client = TestClient(create_app())
            assert "Cobot Widget" in client.get("/").text
            assert client.get("/health").json()["status"] == "ok"
        finally:
            get_settings.cache_clear()
