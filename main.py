import os
import sys
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.errors import StoreError, error_body, handle_store_error
from core.logging_config import logger
from core.write_log import BulkWriteError

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.profiles import router as profiles_router
from routers.plan_features import router as plan_features_router
from routers.admin import router as admin_router
from routers.user_features import router as user_features_router
from routers.organization import router as organization_router
from routers.security import router as security_router
from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Profiles, permissions and plan feature gating",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup logging
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        for route in app.routes:
            path = getattr(route, "path", None)
            if path is None:
                continue
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.info(f"Route {methods:10s} {path}")

    # -------------------------------------------------
    # Error handling: every error body is {error, details?}
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(f"HTTP {exc.status_code} at {request.url}: {exc.detail}")

        if isinstance(exc.detail, dict) and "error" in exc.detail:
            content = exc.detail
        else:
            content = error_body(str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Validation error", jsonable_encoder(exc.errors())),
        )

    @app.exception_handler(BulkWriteError)
    async def handle_bulk_write(request: Request, exc: BulkWriteError):
        logger.error(f"Bulk write failed at {request.url}: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_body("Bulk update failed; earlier writes were rolled back", exc.to_details()),
        )

    @app.exception_handler(StoreError)
    async def handle_store(request: Request, exc: StoreError):
        http_exc = handle_store_error(exc, f"{request.method} {request.url.path}")
        return JSONResponse(status_code=http_exc.status_code, content=error_body(http_exc.detail))

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error"),
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Profiles & permissions
    app.include_router(profiles_router)
    app.include_router(security_router)

    # Plans & features
    app.include_router(plan_features_router)
    app.include_router(admin_router)
    app.include_router(user_features_router)

    # Subscriptions & payments
    app.include_router(organization_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
