"""CORS configuration helpers.

The admin UI runs on a different origin from the API and sends the
credential headers below, so they must be allowed and the request id exposed.
"""

from __future__ import annotations

from typing import Iterable
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


ALLOW_HEADERS: list[str] = ["Authorization", "Content-Type", "X-Tenant-ID", "X-Request-Id"]
EXPOSE_HEADERS: list[str] = ["X-Request-Id"]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    allow_origins = list(origins or ["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        # Browsers reject credentialed responses with a wildcard origin
        allow_credentials="*" not in allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=ALLOW_HEADERS,
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "ALLOW_HEADERS", "EXPOSE_HEADERS"]
