import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, settings
from .exceptions import (
    IntakeValidationError,
    OriginRejected,
    missing_file,
    missing_identifier,
)
from .routes.intake import router as intake_router
from .services.intake_service import IntakeService
from .utils.logging import logger


def upload_form_rejection(exc: RequestValidationError) -> IntakeValidationError:
    """Map a malformed upload form onto the intake rejection it amounts to."""
    fields = {part for error in exc.errors() for part in error.get("loc", ()) if isinstance(part, str)}
    # a file part without a filename arrives as a plain string
    if "file" in fields:
        return missing_file()
    if "passportNumber" in fields:
        return missing_identifier()
    return IntakeValidationError("InvalidRequest", "Invalid upload request")


def create_app(app_settings: Settings = settings) -> FastAPI:
    intake_service = IntakeService(
        storage_root=app_settings.storage_root_path,
        temp_root=app_settings.temp_root_path,
        allowed_mime_types=app_settings.ALLOWED_MIME_TYPES,
        max_file_size_mb=app_settings.MAX_FILE_SIZE_MB,
        public_root_marker=app_settings.PUBLIC_ROOT_MARKER,
    )
    allowed_origins = set(app_settings.cors_origins_list)
    allow_any_origin = "*" in allowed_origins

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.log_step("starting_intake_service", {
            "host": app_settings.APP_HOST,
            "port": app_settings.APP_PORT,
            "debug": app_settings.DEBUG,
            "python_version": sys.version,
            "storage_root": str(app_settings.storage_root_path),
            "allowed_origins": sorted(allowed_origins)
        })

        yield

        logger.log_step("intake_service_shutdown")

    app = FastAPI(
        title=app_settings.SERVICE_NAME,
        description="Receives applicant documents and stores them under a passport-number directory.",
        version=app_settings.SERVICE_VERSION,
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.intake_service = intake_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(allowed_origins),
        allow_credentials=app_settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
    )

    @app.middleware("http")
    async def reject_unknown_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        # no Origin header means a non-browser or same-process caller
        if origin and not allow_any_origin and origin not in allowed_origins:
            rejection = OriginRejected(origin)
            logger.log_error("origin_rejected", {
                "method": request.method,
                "url": str(request.url),
                "origin": origin
            })
            return JSONResponse(
                status_code=rejection.status_code,
                content={"success": False, "message": rejection.message}
            )
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.log_step("request_completed", {
            "method": request.method,
            "url": str(request.url),
            "status_code": response.status_code,
            "process_time": process_time
        })

        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        rejection = upload_form_rejection(exc)
        logger.log_rejection(rejection.kind, "", None)
        return JSONResponse(
            status_code=rejection.status_code,
            content={"success": False, "message": rejection.message}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.log_error("unhandled_exception", {
            "method": request.method,
            "url": str(request.url),
            "error": str(exc)
        })

        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"}
        )

    app.include_router(intake_router)

    @app.get("/")
    async def root():
        return {
            "message": f"{app_settings.SERVICE_NAME} is running!",
            "status": "Active",
            "version": app_settings.SERVICE_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "upload": "/upload",
                "files": f"/{app_settings.PUBLIC_ROOT_MARKER}/{{passportNumber}}/{{fileName}}",
                "docs": "/docs"
            }
        }

    app.mount(
        f"/{app_settings.PUBLIC_ROOT_MARKER.strip('/')}",
        StaticFiles(directory=app_settings.storage_root_path),
        name="uploads",
    )

    return app


app = create_app()
