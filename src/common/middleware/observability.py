"""Request-scoped logging context."""

import re
import typing as t
import uuid

import structlog
from django.conf import settings
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def bind_actor(user: t.Any) -> None:
    """Attach the acting user and their box office role to the log context."""
    if not settings.ENABLE_OBSERVABILITY or user is None or not user.is_authenticated:
        return
    structlog.contextvars.bind_contextvars(user_id=str(user.id), role=getattr(user, "role", None))


class StructlogContextMiddleware:
    """Binds request metadata to every log event emitted while a request is served.

    A well-formed ``X-Request-ID`` from the proxy or a gate scanner is reused, so one
    scan can be followed from the device to the check-in log lines; anything else is
    replaced by a fresh id. The id is echoed on the response.

    API requests are authenticated inside the view, so their user is bound by the
    JWT authentication. Only admin sessions are known here.
    """

    def __init__(self, get_response: t.Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not settings.ENABLE_OBSERVABILITY:
            return self.get_response(request)

        request_id = self._get_request_id(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
            ip_address=self._get_client_ip(request),
        )
        bind_actor(getattr(request, "user", None))

        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _get_request_id(request: HttpRequest) -> str:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        if _REQUEST_ID_PATTERN.match(incoming):
            return incoming
        return str(uuid.uuid4())

    @staticmethod
    def _get_client_ip(request: HttpRequest) -> str:
        """The first address of X-Forwarded-For when proxied, REMOTE_ADDR otherwise."""
        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            return str(x_forwarded_for.split(",")[0].strip())
        return str(request.META.get("REMOTE_ADDR", "unknown"))
