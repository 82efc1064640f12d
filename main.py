import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import (
    APP_ENV,
    CORS_ORIGINS,
    IS_PRODUCTION,
    IS_SERVERLESS,
    LOG_DIR,
    LOG_LEVEL,
    MAX_BODY_BYTES,
    UPLOAD_DIR,
)
from database import connect_db
from routers import (
    auth_router,
    users_router,
    profile_router,
    support_router,
    medicines_router,
    cart_router,
    medicine_requests_router,
    orders_router,
    donations_router,
    daily_updates_router,
    reviews_router,
    service_reviews_router,
    payments_router,
    disputes_router,
    smart_doctor_router,
    medicine_reminders_router,
    medical_profile_router,
    customer_points_router,
    revenue_adjustments_router,
)
from services.email_service import init_email_service
from services.notifications import init_firebase, shutdown_background
from services.reminders import start_notification_service, stop_notification_service

logger = logging.getLogger("medzy")
error_logger = logging.getLogger("medzy.errors")

ROUTERS = [
    auth_router,
    users_router,
    profile_router,
    support_router,
    medicines_router,
    cart_router,
    medicine_requests_router,
    orders_router,
    donations_router,
    daily_updates_router,
    reviews_router,
    service_reviews_router,
    payments_router,
    disputes_router,
    smart_doctor_router,
    medicine_reminders_router,
    medical_profile_router,
    customer_points_router,
    revenue_adjustments_router,
]


def configure_logging() -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(LOG_LEVEL)

    if not error_logger.handlers:
        os.makedirs(LOG_DIR, exist_ok=True)
        error_logger.setLevel(logging.ERROR)
        fh = logging.FileHandler(os.path.join(LOG_DIR, "errors.log"), encoding="utf-8")
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        error_logger.addHandler(fh)
        error_logger.propagate = False


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI):
    for name, start in (
        ("Email service", init_email_service),
        ("Firebase", init_firebase),
        ("Notification service", start_notification_service),
    ):
        try:
            start()
        except Exception as exc:
            logger.warning("%s initialization skipped: %s", name, exc)
    yield
    try:
        stop_notification_service()
    except Exception as exc:
        logger.warning("Notification service shutdown failed: %s", exc)
    shutdown_background(wait=True)


def create_app(serverless: bool | None = None) -> FastAPI:
    """Build the Medzy API.

    In serverless mode there is no lifespan: no reminder loop, no Firebase
    or email warm-up. Routes, middleware and error handling are identical.
    """
    if serverless is None:
        serverless = IS_SERVERLESS
    configure_logging()

    app = FastAPI(
        title="Medzy API",
        description="Healthcare e-commerce and medicine tracker backend",
        version="1.0.0",
        lifespan=None if serverless else lifespan,
    )

    @app.middleware("http")
    async def _capture_unhandled_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            error_logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
            return JSONResponse(
                status_code=500,
                content={
                    "message": "Something went wrong!",
                    "error": "Internal server error" if IS_PRODUCTION else str(exc),
                },
            )

    @app.middleware("http")
    async def _limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > MAX_BODY_BYTES:
            return JSONResponse(status_code=413, content={"message": "Request body too large"})
        return await call_next(request)

    # Added last so that it wraps error responses as well.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def _not_found(request: Request, exc: StarletteHTTPException):
        # Router-level misses carry the stock detail; a known path with no
        # handler for the method counts as a miss too. Route handlers raise
        # their own messages and keep the default shape.
        if (exc.status_code, exc.detail) in ((404, "Not Found"), (405, "Method Not Allowed")):
            return JSONResponse(status_code=404, content={"message": "Route not found", "path": request.url.path})
        return await http_exception_handler(request, exc)

    connect_db()

    for router in ROUTERS:
        app.include_router(router)

    @app.get("/", tags=["Health"])
    def root():
        return {
            "message": "Medzy Healthcare & Medicine Tracker API",
            "status": "running",
            "timestamp": _utc_timestamp(),
            "environment": APP_ENV,
        }

    @app.get("/api/health", tags=["Health"])
    def health_check():
        return {
            "message": "Medzy Backend Server is running!",
            "status": "healthy",
            "timestamp": _utc_timestamp(),
            "environment": APP_ENV,
        }

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")

    logger.info("Medzy API ready (%s, %s mode)", APP_ENV, "serverless" if serverless else "server")
    return app


app = create_app()
