from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml
from fastapi.testclient import TestClient

from spec_portal.access.visibility import VisibilityPolicy, VisibilityRule
from spec_portal.config import PortalConfig
from spec_portal.server import create_app

from conftest import CONTENT


@pytest.fixture
def config(tmp_path):
    return PortalConfig(content_root=CONTENT, default_version="v2", properties_path=tmp_path / "none.properties")


@pytest.fixture
def client(config, fixture_catalog):
    policy = VisibilityPolicy(rules=[VisibilityRule(path="en/internal", kind="folder", rule="role:staff")])
    return TestClient(create_app(config, fixture_catalog, policy))


class TestSpecEndpoints:
    def test_spec_as_json(self, client):
        resp = client.get("/apispecs/payment-api.json", params={"lang": "en", "version": "v2"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.headers["cache-control"] == "public, max-age=300"
        assert resp.json()["info"]["version"] == "2.1.0"

    def test_spec_as_yaml(self, client):
        resp = client.get("/apispecs/payment-api.yaml", params={"lang": "ar", "version": "v2"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/x-yaml")
        assert yaml.safe_load(resp.text)["info"]["title"] == "واجهة برمجة المدفوعات"

    def test_defaults_from_config(self, client):
        resp = client.get("/apispecs/wallet-api.json")
        assert resp.status_code == 200
        assert resp.json()["info"]["title"] == "Wallet API"

    def test_older_version(self, client):
        resp = client.get("/apispecs/payment-api.json", params={"version": "v1"})
        assert resp.json()["info"]["version"] == "1.4.0"

    def test_not_found(self, client):
        resp = client.get("/apispecs/nope-api.json", params={"lang": "en", "version": "v2"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Not found"
        assert "nope-api" in body["message"]
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_yaml_not_found(self, client):
        assert client.get("/apispecs/nope-api.yaml").status_code == 404

    def test_preflight(self, client):
        for suffix in ("json", "yaml"):
            resp = client.options(f"/apispecs/payment-api.{suffix}")
            assert resp.status_code == 200
            assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"

    def test_internal_error(self, config):
        catalog = MagicMock()
        catalog.get_spec = AsyncMock(side_effect=RuntimeError("disk on fire"))
        client = TestClient(create_app(config, catalog, VisibilityPolicy()))
        resp = client.get("/apispecs/payment-api.json")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "message": "disk on fire"}


class TestViewEndpoints:
    def test_header_error_is_json(self, client):
        with patch("spec_portal.server.specs_for_header", AsyncMock(side_effect=RuntimeError("scan failed"))):
            resp = client.get("/api/header")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "message": "scan failed"}

    def test_versions_error_is_json(self, client):
        with patch("spec_portal.server.list_versions", AsyncMock(side_effect=RuntimeError("scan failed"))):
            resp = client.get("/api/versions/payment-api")
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"

    def test_header(self, client):
        resp = client.get("/api/header", params={"lang": "en", "version": "v2"})
        assert resp.status_code == 200
        entries = resp.json()
        assert [e["id"] for e in entries] == ["payment-api", "wallet-api"]
        assert entries[0]["navigation_path"] == "/api/payment-api?version=v2&lang=en"

    def test_versions(self, client):
        resp = client.get("/api/versions/payment-api")
        assert [v["label"] for v in resp.json()] == ["v2 (Latest)", "v1"]


class TestCheckAccess:
    def test_path_required(self, client):
        resp = client.post("/api/auth/check-access", json={})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Path is required"}

    def test_public_page(self, client):
        resp = client.post("/api/auth/check-access", json={"path": "en/guides/intro.md"})
        assert resp.json()["visible"] is True

    def test_role_required(self, client):
        denied = client.post("/api/auth/check-access", json={"path": "en/internal/ops.md", "roles": ["user"]})
        assert denied.json()["visible"] is False
        assert denied.json()["required_role"] == "staff"

        allowed = client.post("/api/auth/check-access", json={"path": "en/internal/ops.md", "roles": ["staff"]})
        assert allowed.json()["visible"] is True
