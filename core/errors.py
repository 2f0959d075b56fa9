"""
core/errors.py -- Exception hierarchy shared by auth/ and web/.

Every error is a single-shot signal to the immediate caller. Nothing in this
package retries or swallows them.

Layer rule: no imports from auth/ or web/.
"""

from __future__ import annotations

from typing import Any


class MinionsError(Exception):
    """Base class for all errors raised by this package."""


class TemplateLoadError(MinionsError):
    """A template file could not be read or parsed.

    The whole load is aborted; the previously published registry stays in use.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name


class TemplateFunctionError(MinionsError, ValueError):
    """A template helper function was called with invalid arguments."""


class EncodingError(MinionsError, ValueError):
    """Response data could not be serialized."""


class AccessDenied(MinionsError):
    """The guard refused a request. Carries the HTTP status and the principal."""

    status_code = 403

    def __init__(self, principal: Any, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.principal = principal


class Unauthenticated(AccessDenied):
    status_code = 401


class Forbidden(AccessDenied):
    status_code = 403
