"""Main FastAPI application for the applicant portal service"""

import sys
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .exceptions import InvalidInputError, PortalError
from .routes.applicants import router as applicants_router
from .routes.auth import router as auth_router
from .routes.employer import router as employer_router
from .services.applicant_service import ApplicantService
from .services.intake_client import IntakeClient
from .services.session_service import SessionStore
from .utils.logging import logger
from .utils.mongo import MongoDBManager


def field_errors(exc: RequestValidationError) -> Dict[str, str]:
    """Flatten request validation errors into field -> message."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        names = [part for part in error.get("loc", ())
                 if isinstance(part, str) and part not in ("body", "query", "path", "header")]
        field = names[-1] if names else "body"
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return errors


def create_app(
    app_settings: Settings = settings,
    store=None,
    intake_client: Optional[IntakeClient] = None,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """Build the portal app. Collaborators default to the configured MongoDB and intake service."""
    record_store = store if store is not None else MongoDBManager(
        uri=app_settings.MONGODB_URI,
        database_name=app_settings.DATABASE_NAME,
        collection_name=app_settings.COLLECTION_NAME,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        logger.log_step("starting_portal_service", {
            "host": app_settings.APP_HOST,
            "port": app_settings.APP_PORT,
            "debug": app_settings.DEBUG,
            "python_version": sys.version,
            "intake_service_url": app_settings.INTAKE_SERVICE_URL
        })

        if isinstance(record_store, MongoDBManager):
            try:
                record_store.connect()
            except PortalError as e:
                # requests retry the connection lazily
                logger.log_error("record_store_unavailable_at_startup", {"error": e.message})

        yield

        if isinstance(record_store, MongoDBManager):
            record_store.close()
        logger.log_step("application_shutdown")

    app = FastAPI(
        title=app_settings.SERVICE_NAME,
        description="Applicant document portal: admin uploads, employer browsing and password-gated access.",
        version=app_settings.SERVICE_VERSION,
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.session_store = session_store or SessionStore(
        ttl_minutes=app_settings.SESSION_TTL_MINUTES,
        admin_email=app_settings.ADMIN_EMAIL,
        admin_password=app_settings.ADMIN_PASSWORD,
    )
    app.state.applicant_service = ApplicantService(
        store=record_store,
        intake_client=intake_client or IntakeClient(
            base_url=app_settings.INTAKE_SERVICE_URL,
            timeout=app_settings.INTAKE_TIMEOUT_SECONDS,
        ),
        file_base_url=app_settings.file_base_url,
        portal_public_url=app_settings.PORTAL_PUBLIC_URL,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=app_settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests"""
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

    @app.exception_handler(PortalError)
    async def portal_exception_handler(request: Request, exc: PortalError):
        logger.log_step("request_rejected", {
            "method": request.method,
            "url": str(request.url),
            "status_code": exc.status_code,
            "error": exc.message
        })
        content = {"success": False, "message": exc.message}
        if isinstance(exc, InvalidInputError) and exc.errors:
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = field_errors(exc)
        logger.log_step("request_rejected", {
            "method": request.method,
            "url": str(request.url),
            "status_code": 400,
            "errors": errors
        })
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Please correct the highlighted fields", "errors": errors}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.log_error("unhandled_exception", {
            "method": request.method,
            "url": str(request.url),
            "error": str(exc)
        })

        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"}
        )

    app.include_router(auth_router)
    app.include_router(applicants_router)
    app.include_router(employer_router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": app_settings.SERVICE_NAME,
            "version": app_settings.SERVICE_VERSION,
            "endpoints": {
                "health": "/api/v1/health",
                "login": "/api/v1/auth/login",
                "applicants": "/api/v1/applicants",
                "employer": "/api/v1/employer/applicants",
                "document": "/api/v1/documents/{applicant_id}",
                "docs": "/docs"
            }
        }

    @app.get("/api/v1/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "portal"
        }

    return app


app = create_app()
