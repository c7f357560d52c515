from datetime import datetime

from fastapi.testclient import TestClient

from gallery.core.config import Settings
from gallery.main import create_app, find_static_file

from conftest import INDEX_HTML


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["version"] == "1.0.0"
    assert body["uptime"] >= 0
    assert body["memory"]["rss"] > 0
    datetime.fromisoformat(body["timestamp"])


def test_lifespan_creates_media_directory(client, media_dir):
    assert media_dir.is_dir()


def test_root_serves_index_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == INDEX_HTML


def test_unknown_get_falls_back_to_index_page(client):
    resp = client.get("/gallery/some/client/route")
    assert resp.status_code == 200
    assert resp.text == INDEX_HTML


def test_static_asset_is_served(client, site_dir):
    (site_dir / "style.css").write_text("body{}", encoding="utf-8")

    resp = client.get("/style.css")
    assert resp.status_code == 200
    assert resp.text == "body{}"


def test_dotfiles_are_never_served(client, site_dir):
    (site_dir / ".env").write_text("SECRET=1", encoding="utf-8")

    resp = client.get("/.env")
    assert resp.text == INDEX_HTML


def test_unmatched_delete_is_json_404(client):
    resp = client.delete("/api/unknown")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Không tìm thấy trang"}


def test_unmatched_post_is_json_404(client):
    resp = client.post("/api/unknown")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_missing_index_page_is_json_404(tmp_path):
    settings = Settings(
        MEDIA_ROOT_PATH=tmp_path / "media",
        STATIC_ROOT=tmp_path,
        INDEX_PAGE=tmp_path / "missing.html",
    )
    with TestClient(create_app(settings)) as client:
        resp = client.get("/anything")

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_find_static_file_stays_inside_root(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (tmp_path / "outside.txt").write_text("no")
    (root / "app.js").write_text("ok")

    assert find_static_file(root, "app.js") == (root / "app.js").resolve()
    assert find_static_file(root, "../outside.txt") is None
    assert find_static_file(root, "") is None
    assert find_static_file(root, "missing.js") is None


def test_cors_headers_present(client):
    resp = client.get("/api/memories", headers={"Origin": "http://example.com"})
    assert resp.headers["access-control-allow-origin"] == "*"


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MEDIA_ROOT_PATH", str(tmp_path / "m"))

    s = Settings()
    assert s.PORT == 8080
    assert s.MEDIA_ROOT_PATH == tmp_path / "m"
    assert s.MAX_UPLOAD_BYTES == 20 * 1024 * 1024
