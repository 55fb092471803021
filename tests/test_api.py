"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from apps.api.main import app
from apps.api.state import app_state


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health_reports_loaded_tables(self, client: TestClient) -> None:
        response = client.get("/health/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["signatures"] > 0
        assert body["red_flag_conditions"] == 6


class TestConsultEndpoint:
    def test_consult(self, client: TestClient, sciatica_intake: dict) -> None:
        response = client.post("/consult/", json=sciatica_intake)
        assert response.status_code == 200
        body = response.json()
        assert body["diagnosis"]["primary"] == "lumbar_disc_herniation"
        assert body["safety"]["flags"] == []
        assert set(body["soap_report"]) == {"S", "O", "A", "P"}

    def test_red_flags_in_response(self, client: TestClient) -> None:
        response = client.post("/consult/", json={"red_flags": {"neuro_saddle": "yes"}})
        assert response.json()["safety"]["flags"] == [
            {"condition_id": "cauda_equina", "matched_tags": ["saddle_anesthesia"]}
        ]

    def test_malformed_sub_record_is_422(self, client: TestClient) -> None:
        response = client.post("/consult/", json={"pain": ["low_back"]})
        assert response.status_code == 422
        assert response.json()["error"] == "MALFORMED_INTAKE"

    def test_summary_sim(self, client: TestClient, sciatica_history: list) -> None:
        response = client.post("/consult/summary", json={"history": sciatica_history})
        assert response.status_code == 200
        assert response.json()["is_ai"] is False

    def test_summary_ai_without_model_falls_back(
        self, client: TestClient, sciatica_history: list
    ) -> None:
        response = client.post(
            "/consult/summary", json={"history": sciatica_history, "mode": "ai"}
        )
        assert response.status_code == 200
        assert response.json()["diagnosis"] == "LUMBAR DISC HERNIATION"

    def test_summary_rejects_unknown_mode(self, client: TestClient) -> None:
        response = client.post("/consult/summary", json={"history": [], "mode": "oracle"})
        assert response.status_code == 422

    def test_uninitialised_engines_are_503(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(app_state, "doctor", None)
        response = client.post("/consult/", json={})
        assert response.status_code == 503
