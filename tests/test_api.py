"""
Tests for the HTTP surface.

Verifies that:
- /health answers immediately
- /labels labels every visible, enabled form control
- Request validation rejects unknown fields
- Unexpected failures degrade to an empty label list
"""
import pytest
from fastapi.testclient import TestClient

import main
from main import app

SIGNUP_PAGE = """
<html><head><script>track()</script></head><body>
<form>
  <label for="email">Email address</label>
  <input id="email" type="email">
  <input type="password" aria-label="Password">
  <input type="hidden" name="csrf" value="x">
  <input name="promo_code" placeholder="Promo code">
  <button type="submit">Create account</button>
</form>
</body></html>
"""


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestLabels:
    """Tests for POST /labels."""

    def test_labels_form_controls(self, client):
        response = client.post("/labels", json={"html": SIGNUP_PAGE, "url": "https://example.com"})

        assert response.status_code == 200
        labels = response.json()["labels"]
        assert [entry["label"] for entry in labels] == [
            "Email address",
            "Password",
            "Promo code",
            "Create account",
        ]
        assert labels[0]["xpath"] == '//*[@id="email"]'
        assert labels[0]["detector"] == "associated-label"
        assert labels[1]["detector"] == "aria-label"
        assert all(entry["success"] for entry in labels)
        assert [entry["index"] for entry in labels] == [0, 1, 2, 3]

    def test_selector_narrows_elements(self, client):
        response = client.post(
            "/labels", json={"html": SIGNUP_PAGE, "selector": "#email"}
        )

        labels = response.json()["labels"]
        assert len(labels) == 1
        assert labels[0]["tag"] == "input"

    def test_strategy_override(self, client):
        response = client.post(
            "/labels",
            json={"html": SIGNUP_PAGE, "selector": "#email", "strategy": "first-match"},
        )

        entry = response.json()["labels"][0]
        assert entry["label"] == "Email address"
        assert entry["candidates"] == 1

    def test_high_floor_falls_back(self, client):
        response = client.post(
            "/labels",
            json={"html": "<div><input id='x'></div>", "min_confidence": 0.99},
        )

        entry = response.json()["labels"][0]
        assert entry["success"] is False
        assert entry["label"] == "Unlabeled"
        assert entry["detector"] == "none"

    def test_unknown_field_rejected(self, client):
        response = client.post("/labels", json={"html": "<p></p>", "mode": "fast"})
        assert response.status_code == 422

    def test_unexpected_error_returns_empty_list(self, client, monkeypatch):
        def explode(raw_html):
            raise RuntimeError("parser crashed")

        monkeypatch.setattr(main, "prune_html", explode)

        response = client.post("/labels", json={"html": "<p></p>"})

        assert response.status_code == 200
        assert response.json() == {"labels": []}
