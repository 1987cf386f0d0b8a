"""Request ID middleware.

Propagates the caller's X-Request-Id or assigns a UUID4 when absent, and
writes it to the response headers and to a per-request access log line.
"""

from __future__ import annotations

import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    def _incoming(self, scope) -> str | None:  # type: ignore[no-untyped-def]
        for key, value in scope.get("headers") or []:
            if key.lower() == self._header_key:
                token = value.decode("latin-1").strip()
                return token or None
        return None

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = self._incoming(scope) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.perf_counter()
        status_holder: dict[str, int] = {}

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                status_holder["status"] = int(message.get("status", 0))
                headers = [
                    (k, v) for k, v in (message.get("headers") or []) if k.lower() != self._header_key
                ]
                headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "http.request method=%s path=%s status=%s request_id=%s elapsed_ms=%.1f",
                scope.get("method"),
                scope.get("path"),
                status_holder.get("status"),
                request_id,
                (time.perf_counter() - started) * 1000.0,
            )


__all__ = ["RequestIdMiddleware"]
