"""
tests/conftest.py -- Shared fixtures for the minions test suite.

This module provides:
  - header_principal(): a principal lookup driven by X-User / X-Roles headers
  - template_dir: a temporary template tree with a.html and sub/b.html
  - guarded_client: TestClient for an app whose routes are wrapped by a Guard

Design: tests run through the real ASGI stack with TestClient rather than
calling handlers directly, so routing, the threadpool for sync callables and
response headers are all exercised.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from auth.guard import Guard
from auth.models import ANONYMOUS, Principal, User
from core.config import get_settings

# ---------------------------------------------------------------------------
# Principal lookup
# ---------------------------------------------------------------------------


def header_principal(request: Request) -> Principal:
    """Build a principal from X-User and X-Roles (comma separated) headers."""
    user_id = request.headers.get("X-User")
    if not user_id:
        return ANONYMOUS
    roles = [r.strip() for r in request.headers.get("X-Roles", "").split(",") if r.strip()]
    return User(id=user_id, roles=roles)


def secret_page(request: Request) -> PlainTextResponse:
    return PlainTextResponse(f"hello {request.state.principal.id}")


async def async_secret_page(request: Request) -> PlainTextResponse:
    return PlainTextResponse(f"async hello {request.state.principal.id}")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate every test from the developer's environment and the settings cache."""
    for var in ("DEBUG", "TEMPLATES_DIR", "TEMPLATES_RELOAD", "STATIC_PREFIX", "STATIC_DIR"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """templates/a.html and templates/sub/b.html below a temporary directory."""
    root = tmp_path / "templates"
    (root / "sub").mkdir(parents=True)
    (root / "a.html").write_text("A: {{ name }}", encoding="utf-8")
    (root / "sub" / "b.html").write_text("B: {{ name }}", encoding="utf-8")
    return root


@pytest.fixture
def guarded_client() -> Generator[TestClient, None, None]:
    """TestClient for an app using both the wrapper and the dependency form of the guard."""
    guard = Guard().principal_fn(header_principal)
    app = FastAPI()
    guard.install(app)

    app.add_route("/admin", guard.protect(secret_page, "admin"))
    app.add_route("/staff", guard.protect(async_secret_page, "admin", "staff"))
    app.add_route("/nobody", guard.protect(secret_page))

    @app.get("/reports")
    async def reports(principal: Principal = Depends(guard.requires("analyst"))):
        return {"id": principal.id}

    with TestClient(app) as client:
        yield client
