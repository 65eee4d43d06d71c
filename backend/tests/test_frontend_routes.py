"""
IdeaFlow Backend — Status, Health and Frontend Fallback Tests
===============================================================
"""

import pytest

from ideaflow import __version__
from ideaflow.config import settings


@pytest.fixture
def build_dir(tmp_path, monkeypatch):
    build = tmp_path / "build"
    (build / "static").mkdir(parents=True)
    (build / "index.html").write_text("<html>IdeaFlow</html>")
    (build / "static" / "main.js").write_text("console.log('app')")
    monkeypatch.setattr(settings, "frontend_build_dir", str(build))
    return build


class TestStatusEndpoints:

    @pytest.mark.asyncio
    async def test_api_banner(self, client):
        response = await client.get("/api")
        assert response.status_code == 200
        assert response.json() == {"message": "IdeaFlow API is working!", "version": __version__}

    @pytest.mark.asyncio
    async def test_health_reports_database(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert "cache-control" not in response.headers

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/api", headers={"X-Request-ID": "abc12345"})
        assert response.headers["x-request-id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, client):
        response = await client.get("/api/cases/999", headers={"X-Request-ID": "trace-me"})
        assert response.json()["request_id"] == "trace-me"


class TestFrontendFallback:

    @pytest.mark.asyncio
    async def test_client_route_serves_index(self, client, build_dir):
        response = await client.get("/cases/42/edit")
        assert response.status_code == 200
        assert "IdeaFlow" in response.text

    @pytest.mark.asyncio
    async def test_root_serves_index(self, client, build_dir):
        response = await client.get("/")
        assert response.status_code == 200
        assert "IdeaFlow" in response.text

    @pytest.mark.asyncio
    async def test_existing_asset_served(self, client, build_dir):
        response = await client.get("/static/main.js")
        assert response.status_code == 200
        assert response.text == "console.log('app')"

    @pytest.mark.asyncio
    async def test_unknown_api_route_is_json_404(self, client, build_dir):
        get = await client.get("/api/does-not-exist")
        post = await client.post("/api/does-not-exist", json={})

        assert get.status_code == 404
        assert get.json()["error"] == "not_found"
        assert post.status_code == 404

    @pytest.mark.asyncio
    async def test_trailing_slash_redirects_to_api_route(self, client, build_dir):
        redirect = await client.get("/api/cases/?userId=1")
        followed = await client.get("/api/cases/", follow_redirects=True)

        assert redirect.status_code == 307
        assert redirect.headers["location"] == "http://test/api/cases?userId=1"
        assert followed.status_code == 200
        assert followed.json() == []

    @pytest.mark.asyncio
    async def test_wrong_method_on_api_route_is_405(self, client, build_dir):
        delete = await client.delete("/api/cases/1")
        post = await client.post("/api/cases/1/accept", json={"executorId": 1})

        assert delete.status_code == 405
        assert delete.json()["error"] == "http_error"
        assert post.status_code == 405

    @pytest.mark.asyncio
    async def test_missing_upload_is_404(self, client, build_dir):
        response = await client.get("/uploads/missing.png")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_build(self, client, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "frontend_build_dir", str(tmp_path / "nowhere"))

        response = await client.get("/profile")

        assert response.status_code == 500
        assert response.json()["message"] == "Frontend not built"
