"""
Request context middleware.

Generates or propagates X-Request-ID and keeps the request ID and the
authenticated actor ("owner:owner_1", "staff:team_4") in ContextVars, so
every log record emitted while handling the request can be traced back to
who made it.
"""

import time
import logging
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_actor_var: ContextVar[str] = ContextVar("actor", default="")


def get_request_id() -> str:
    return _request_id_var.get()


def get_actor_label() -> str:
    return _actor_var.get()


def bind_actor(request: Request, label: str) -> None:
    """Record the authenticated actor for this request's log lines."""
    # request.state is shared with the middleware; the ContextVar only
    # reaches code running inside the endpoint task
    request.state.actor = label
    _actor_var.set(label)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        token = _request_id_var.set(request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            actor = getattr(request.state, "actor", "")
            logger.info(
                "%s %s %s %.0fms%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                f" [{actor}]" if actor else "",
                extra={"duration_ms": duration_ms, "actor": actor},
            )
        finally:
            _request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
