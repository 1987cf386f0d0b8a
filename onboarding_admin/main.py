from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from onboarding_admin.config import AppConfig, load_config
from onboarding_admin.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_store_error,
    handle_unexpected_error,
)
from onboarding_admin.http.request_id import RequestIdMiddleware
from onboarding_admin.logging_setup import configure_logging
from onboarding_admin.logic.errors import QuestionStoreError
from onboarding_admin.logic.question_store import QuestionStore, build_question_store
from onboarding_admin.middleware.cors import apply_cors
from onboarding_admin.routes import api_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _health_check(store: QuestionStore) -> Callable[[], dict]:
    def check() -> dict:
        engine = getattr(store, "engine", None)
        if engine is None:
            return {"status": "ok", "store": store.backend}
        try:
            with engine.connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return {"status": "ok", "store": store.backend, "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "store": store.backend, "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None, store: QuestionStore | None = None) -> FastAPI:
    """Build the admin API.

    ``config`` defaults to `load_config()`; ``store`` defaults to the backend
    the configuration selects. Each call gets its own store instance.
    """
    config = config or load_config()
    configure_logging(config.log_level)
    app = FastAPI(title="Onboarding Questions Admin")
    app.state.config = config
    app.state.question_store = store or build_question_store(config)

    app.add_exception_handler(QuestionStoreError, handle_store_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=config.cors.allow_origins)
    # Added last so it wraps CORS and sees every response
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix=API_PREFIX)

    health_check = _health_check(app.state.question_store)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    logger.info(
        "app.created store=%s origins=%s",
        app.state.question_store.backend,
        config.cors.allow_origins,
    )
    return app


__all__ = ["create_app", "API_PREFIX"]
