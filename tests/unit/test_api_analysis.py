"""Tests for the analysis endpoint and health checks."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.fixtures.providers import MockProvider
from tests.fixtures.responses import LIKELY_FALSE, LIKELY_TRUE
from truthvote.analysis.checker import build_fact_checker
from truthvote.api.app import create_app
from truthvote.core.errors import ProviderAuthError


def _post(
    client: TestClient, content: str = "The moon is cheese", **extra: str
) -> dict:
    resp = client.post(
        "/api/posts",
        json={"content": content, **extra},
        headers={"X-User-Name": "alice"},
    )
    assert resp.status_code == 201
    return resp.json()


class TestAnalysisEndpoint:
    def test_without_keys_returns_neutral_placeholder(self, test_config) -> None:
        with TestClient(create_app(test_config)) as client:
            post = _post(client)
            resp = client.post(f"/api/posts/{post['id']}/analysis")

        assert resp.status_code == 200
        data = resp.json()
        assert data["true_rate"] == 50
        assert data["verdict"] == "Mixed"
        assert data["sources"] == []
        assert data["reasoning"] == [
            "OpenAI: OpenAI API key not configured",
            "Gemini: Gemini API key not configured",
        ]
        assert set(data["models"]) == {"openai", "gemini"}

    def test_with_providers(self, test_config) -> None:
        openai = MockProvider("openai", {"gpt-4o": LIKELY_TRUE})
        google = MockProvider("google", {"gemini-2.5-pro": LIKELY_TRUE})
        checker = build_fact_checker(
            {"openai": openai, "google": google}, test_config.analysis
        )
        with TestClient(create_app(test_config, fact_checker=checker)) as client:
            post = _post(client, "Water boils at 100C", image_url="http://img/1.png")
            data = client.post(f"/api/posts/{post['id']}/analysis").json()

        assert data["true_rate"] == 90
        assert data["verdict"] == "True"
        assert data["models"]["openai"]["verdict"] == "True"
        prompt = openai.call_log[0]["messages"][0].content
        assert "Water boils at 100C Image: http://img/1.png" in prompt

    def test_provider_failure_never_fails_request(self, test_config) -> None:
        checker = build_fact_checker(
            {
                "openai": MockProvider("openai", {"gpt-4o": LIKELY_FALSE}),
                "google": MockProvider(
                    "google", error=ProviderAuthError("google", "bad key")
                ),
            },
            test_config.analysis,
        )
        with TestClient(create_app(test_config, fact_checker=checker)) as client:
            post = _post(client)
            resp = client.post(f"/api/posts/{post['id']}/analysis")

        assert resp.status_code == 200
        data = resp.json()
        assert data["true_rate"] == 30
        assert data["models"]["gemini"]["reasoning"] == [
            "Gemini analysis temporarily unavailable"
        ]

    def test_missing_post(self, test_config) -> None:
        with TestClient(create_app(test_config)) as client:
            resp = client.post("/api/posts/nope/analysis")
        assert resp.status_code == 404


class TestHealth:
    @pytest.fixture
    def client(self, test_config):  # type: ignore[no-untyped-def]
        with TestClient(create_app(test_config)) as c:
            yield c

    def test_basic(self, client: TestClient) -> None:
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_detailed(self, client: TestClient) -> None:
        data = client.get("/api/health/detailed").json()
        assert data["status"] == "ok"
        components = data["components"]
        assert components["database"] == {"status": "ok"}
        assert components["analysis"] == {
            "openai": {"status": "placeholder"},
            "gemini": {"status": "placeholder"},
        }
        assert components["realtime"]["subscribers"] == 0


class TestProviderHealth:
    def _detailed(self, test_config, openai, google) -> dict:
        checker = build_fact_checker(
            {"openai": openai, "google": google}, test_config.analysis
        )
        with TestClient(create_app(test_config, fact_checker=checker)) as client:
            return client.get("/api/health/detailed").json()

    def test_reachable_providers(self, test_config) -> None:
        data = self._detailed(
            test_config, MockProvider("openai"), MockProvider("google")
        )
        assert data["status"] == "ok"
        assert data["components"]["analysis"] == {
            "openai": {"status": "ok"},
            "gemini": {"status": "ok"},
        }

    def test_one_unreachable_provider(self, test_config) -> None:
        data = self._detailed(
            test_config, MockProvider("openai"), MockProvider("google", healthy=False)
        )
        assert data["status"] == "ok"
        assert data["components"]["analysis"]["gemini"] == {"status": "unhealthy"}

    def test_all_unreachable_degrades(self, test_config) -> None:
        data = self._detailed(
            test_config,
            MockProvider("openai", healthy=False),
            MockProvider("google", healthy=False),
        )
        assert data["status"] == "degraded"

    def test_placeholder_and_unreachable(self, test_config) -> None:
        checker = build_fact_checker(
            {"openai": MockProvider("openai", healthy=False)}, test_config.analysis
        )
        with TestClient(create_app(test_config, fact_checker=checker)) as client:
            data = client.get("/api/health/detailed").json()
        assert data["components"]["analysis"] == {
            "openai": {"status": "unhealthy"},
            "gemini": {"status": "placeholder"},
        }
        assert data["status"] == "degraded"
