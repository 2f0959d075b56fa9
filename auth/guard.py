"""
auth/guard.py -- Role based access control around request handlers.

A Guard makes one decision per request, in this order:
  1. principal not authenticated           -> unauthenticated response (401)
  2. principal holds none of the roles     -> forbidden response (403)
  3. otherwise                             -> the protected handler runs

Authentication is outside the scope of the guard. The principal is fetched by
a caller-supplied lookup function; until one is configured every request sees
the Anonymous principal and is rejected with 401.

Two ways to use it:
  Starlette endpoints -- wrap the handler:
      app.add_route("/admin", guard.protect(admin_page, "admin"))

  FastAPI routes -- declare a dependency and install the exception handlers:
      guard.install(app)
      @app.get("/reports")
      async def reports(principal = Depends(guard.requires("analyst"))): ...

Configuration is not synchronized. Finish it before the app starts serving;
afterwards the guard is only read.

Layer rule: no imports from web/.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Union

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from auth.models import ANONYMOUS, Principal
from core.errors import AccessDenied, Forbidden, Unauthenticated

logger = logging.getLogger("minions.guard")

Handler = Callable[[Request], Union[Response, Awaitable[Response]]]
PrincipalFn = Callable[[Request], Union[Principal, Awaitable[Principal]]]


async def _call(fn: Callable[[Request], Any], request: Request) -> Any:
    """Await async callables, run sync ones in the threadpool (same rule Starlette uses for endpoints)."""
    if inspect.iscoroutinefunction(fn):
        return await fn(request)
    result = await run_in_threadpool(fn, request)
    if inspect.isawaitable(result):
        result = await result
    return result


def _unauthorized(request: Request) -> Response:
    return PlainTextResponse("Unauthorized\n", status_code=401)


def _forbidden(request: Request) -> Response:
    return PlainTextResponse("Forbidden\n", status_code=403)


def _anonymous(request: Request) -> Principal:
    return ANONYMOUS


class Guard:
    """Enforces authentication and role membership before a handler runs."""

    def __init__(self) -> None:
        self._principal: PrincipalFn = _anonymous
        self._unauthorized: Handler = _unauthorized
        self._forbidden: Handler = _forbidden

    # ------------------------------------------------------------------
    # Configuration -- chainable, never fails
    # ------------------------------------------------------------------

    def principal_fn(self, fn: PrincipalFn) -> "Guard":
        """Set the function that fetches the principal for a request."""
        self._principal = fn
        return self

    def unauthorized_fn(self, fn: Handler) -> "Guard":
        """Set the response used when the principal is not authenticated."""
        self._unauthorized = fn
        return self

    def forbidden_fn(self, fn: Handler) -> "Guard":
        """Set the response used when the principal lacks every required role."""
        self._forbidden = fn
        return self

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    async def check(self, request: Request, *roles: str) -> Principal:
        """Return the principal for request or raise Unauthenticated / Forbidden.

        roles are passed to has_any_role() untouched. Calling with no roles
        asks the principal to match an empty set, which the built-in
        principals never do.
        """
        principal = await _call(self._principal, request)
        if not principal.authenticated:
            logger.info("Unauthenticated request to %s", request.url.path)
            raise Unauthenticated(principal)
        if not principal.has_any_role(*roles):
            logger.info(
                "Principal %s denied on %s (requires any of %s)",
                principal.id,
                request.url.path,
                ", ".join(roles) or "<none>",
            )
            raise Forbidden(principal)
        return principal

    async def deny(self, request: Request, exc: AccessDenied) -> Response:
        """Produce the configured response for a refused request."""
        if exc.status_code == 401:
            return await _call(self._unauthorized, request)
        return await _call(self._forbidden, request)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def protect(self, handler: Handler, *roles: str) -> Callable[[Request], Awaitable[Response]]:
        """Wrap a Starlette endpoint so it only runs for principals holding one of roles.

        The allowed principal is available to the handler as
        request.state.principal.
        """

        @functools.wraps(handler)
        async def endpoint(request: Request) -> Response:
            try:
                principal = await self.check(request, *roles)
            except AccessDenied as exc:
                return await self.deny(request, exc)
            request.state.principal = principal
            return await _call(handler, request)

        return endpoint

    def requires(self, *roles: str) -> Callable[[Request], Awaitable[Principal]]:
        """Return a FastAPI dependency that yields the allowed principal.

        Refusals are raised as Unauthenticated / Forbidden; install() turns
        them into the guard's configured responses.
        """

        async def dependency(request: Request) -> Principal:
            principal = await self.check(request, *roles)
            request.state.principal = principal
            return principal

        return dependency

    def install(self, app: FastAPI) -> "Guard":
        """Register exception handlers that answer refusals raised by requires()."""
        app.add_exception_handler(Unauthenticated, self.deny)
        app.add_exception_handler(Forbidden, self.deny)
        return self
