"""
web/templates.py -- Jinja2 template store with optional reload-on-render.

Every regular file below the template directory is a template. Its name is the
path relative to that directory with POSIX separators and no leading "./" or
separator, so templates/sub/b.html under root "templates" is "sub/b.html".
All templates share one Jinja2 environment, so {% include %} and
{% extends %} address each other by those names.

Lifecycle:
  - The registry is built on the first render, or explicitly with load().
  - With reload enabled it is rebuilt from disk before every render. This is a
    development mode: every request pays for a full directory walk and parse.
  - load() is all-or-nothing. A new TemplateRegistry is built off to the side
    and published with a single assignment; a failed load leaves the previous
    registry in place. Concurrent renderers always see a complete snapshot.

Usage:
    templates = Templates("templates").funcs({"upper": str.upper})
    return templates.render(200, "users/list.html", V(users=users))
"""

from __future__ import annotations

import logging
import math
import os
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TextIO

from fastapi.responses import HTMLResponse
from jinja2 import DictLoader, Environment, Template, TemplateError, TemplateNotFound

from core.config import Settings, get_settings
from core.errors import TemplateFunctionError, TemplateLoadError

logger = logging.getLogger("minions.templates")


class V(dict):
    """Variable map for template contexts: V(title="Users", users=users)."""


# ---------------------------------------------------------------------------
# Built-in template functions
# ---------------------------------------------------------------------------


def div(dividend: int, divisor: int) -> float:
    """Floating point quotient. A zero divisor gives inf, -inf or nan instead of raising."""
    if divisor == 0:
        if dividend == 0:
            return math.nan
        return math.copysign(math.inf, dividend)
    return float(dividend) / float(divisor)


def make_dict(*values: Any) -> dict[str, Any]:
    """Build a mapping from alternating keys and values: dict("a", 1, "b", 2)."""
    if len(values) % 2 != 0:
        raise TemplateFunctionError("invalid dict call")
    result: dict[str, Any] = {}
    for key, value in zip(values[::2], values[1::2]):
        if not isinstance(key, str):
            raise TemplateFunctionError("dict keys must be strings")
        result[key] = value
    return result


BUILTIN_FUNCS: dict[str, Callable[..., Any]] = {
    "div": div,
    "dict": make_dict,
}


# ---------------------------------------------------------------------------
# Registry snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateRegistry:
    """A fully loaded set of compiled templates. Never mutated after load()."""

    directory: Path
    environment: Environment
    templates: Mapping[str, Template]

    def get(self, name: str) -> Template:
        try:
            return self.templates[name]
        except KeyError:
            raise TemplateNotFound(name) from None

    def names(self) -> list[str]:
        return sorted(self.templates)


def _context(context: Any) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, Mapping):
        return dict(context)
    return {"data": context}


def template_name(path: Path, root: Path) -> str:
    """Registered name for path: relative to root, POSIX separators, no leading './' or '/'."""
    return path.relative_to(root).as_posix()


def _read_sources(root: Path) -> dict[str, str]:
    sources: dict[str, str] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            name = template_name(path, root)
            try:
                # Bytes that are not UTF-8 become U+FFFD; the file still registers.
                sources[name] = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                raise TemplateLoadError(name, str(exc)) from exc
    return sources


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class Templates:
    """Named HTML templates loaded from a directory tree."""

    def __init__(self, directory: str | os.PathLike[str], reload: bool = False) -> None:
        self.directory = Path(directory)
        self.reload = reload
        self._funcs: dict[str, Callable[..., Any]] = dict(BUILTIN_FUNCS)
        self._registry: Optional[TemplateRegistry] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Templates":
        settings = settings or get_settings()
        return cls(settings.templates_dir, reload=bool(settings.templates_reload))

    def funcs(self, funcs: Mapping[str, Callable[..., Any]]) -> "Templates":
        """Add functions to the template function table, replacing same-named ones.

        Builds a new table instead of mutating the current one. Applies from the
        next load().
        """
        merged = dict(self._funcs)
        merged.update(funcs)
        self._funcs = merged
        return self

    @property
    def registry(self) -> Optional[TemplateRegistry]:
        """The currently published registry, or None before the first load."""
        return self._registry

    def load(self) -> TemplateRegistry:
        """Read and compile every template, then publish the new registry."""
        with self._lock:
            if not self.directory.is_dir():
                raise TemplateLoadError(str(self.directory), "template directory does not exist")
            sources = _read_sources(self.directory)

            env = Environment(loader=DictLoader(sources), autoescape=True, cache_size=-1)
            env.globals.update(self._funcs)

            compiled: dict[str, Template] = {}
            for name in sources:
                try:
                    compiled[name] = env.get_template(name)
                except TemplateError as exc:
                    raise TemplateLoadError(name, str(exc)) from exc

            registry = TemplateRegistry(self.directory, env, compiled)
            self._registry = registry

        logger.info("Loaded %d templates from %s", len(compiled), self.directory)
        return registry

    def _current(self) -> TemplateRegistry:
        registry = self._registry
        if registry is None or self.reload:
            registry = self.load()
        return registry

    def names(self) -> list[str]:
        return self._current().names()

    def render(self, status_code: int, name: str, context: Any = None) -> HTMLResponse:
        """Render a template into an HTML response with the given status.

        A mapping context supplies the template variables directly; any other
        value (a dataclass, a model) is available to the template as "data".

        Raises TemplateLoadError when a (re)load fails, TemplateNotFound for an
        unknown name, and whatever the template itself raises while rendering.
        """
        template = self._current().get(name)
        body = template.render(_context(context))
        return HTMLResponse(body, status_code=status_code)

    def render_to(self, stream: TextIO, name: str, context: Any = None) -> None:
        """Stream a template into any text sink with a write() method."""
        template = self._current().get(name)
        template.stream(_context(context)).dump(stream)
