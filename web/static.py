"""
web/static.py -- Serve a directory of static files under a URL prefix.

The prefix is stripped from the request path and the rest is looked up in the
directory. Directory requests serve index.html, missing files answer 404 --
all of that is Starlette's StaticFiles.

    app.router.routes.append(static_files("/assets", "public"))
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from starlette.routing import Mount
from starlette.staticfiles import StaticFiles

from core.config import get_settings

logger = logging.getLogger("minions.static")


def static_files(
    prefix: Optional[str] = None,
    directory: Optional[str | os.PathLike[str]] = None,
    name: str = "static",
) -> Mount:
    """Return a route serving directory below prefix. Defaults come from settings."""
    if prefix is None or directory is None:
        settings = get_settings()
        prefix = settings.static_prefix if prefix is None else prefix
        directory = settings.static_dir if directory is None else directory
    if not prefix.startswith("/"):
        raise ValueError(f"static prefix must start with '/': {prefix!r}")

    logger.info("Serving %s at %s", directory, prefix)
    return Mount(prefix.rstrip("/"), app=StaticFiles(directory=directory, html=True), name=name)
