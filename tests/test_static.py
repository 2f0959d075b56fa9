"""
tests/test_static.py -- static_files() mount.

Covers:
  - Prefix stripped and remaining path served from the directory
  - index.html for directory requests, 404 for missing files
  - Defaults from settings and prefix validation
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from web.static import static_files


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    (root / "docs").mkdir(parents=True)
    (root / "app.css").write_text("body {}", encoding="utf-8")
    (root / "docs" / "index.html").write_text("<h1>docs</h1>", encoding="utf-8")
    return root


def _client(mount) -> TestClient:
    app = FastAPI()
    app.router.routes.append(mount)
    return TestClient(app)


def test_serves_file_below_prefix(public_dir: Path) -> None:
    """GET /assets/app.css serves public/app.css."""
    resp = _client(static_files("/assets/", public_dir)).get("/assets/app.css")
    assert resp.status_code == 200
    assert resp.text == "body {}"


def test_directory_serves_index(public_dir: Path) -> None:
    """A directory path answers with its index.html."""
    resp = _client(static_files("/assets", public_dir)).get("/assets/docs/")
    assert resp.status_code == 200
    assert "<h1>docs</h1>" in resp.text


def test_missing_file_is_404(public_dir: Path) -> None:
    """Unknown paths answer 404."""
    resp = _client(static_files("/assets", public_dir)).get("/assets/nope.js")
    assert resp.status_code == 404


def test_defaults_from_settings(public_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Prefix and directory fall back to STATIC_PREFIX / STATIC_DIR."""
    monkeypatch.setenv("STATIC_PREFIX", "/files")
    monkeypatch.setenv("STATIC_DIR", str(public_dir))
    resp = _client(static_files()).get("/files/app.css")
    assert resp.status_code == 200


def test_relative_prefix_rejected(public_dir: Path) -> None:
    """Prefixes must be absolute URL paths."""
    with pytest.raises(ValueError):
        static_files("assets", public_dir)
