"""Root API router with /api/v1 prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from studybuddy_api.api.middleware import SecurityHeadersMiddleware, setup_cors
from studybuddy_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from studybuddy_api.api.v1.admin_courses import admin_courses_router
    from studybuddy_api.api.v1.admin_experts import admin_experts_router
    from studybuddy_api.api.v1.admin_users import admin_users_router
    from studybuddy_api.api.v1.audit_logs import audit_logs_router
    from studybuddy_api.api.v1.auth import router as auth_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(auth_router)
    root_router.include_router(admin_users_router)
    root_router.include_router(admin_experts_router)
    root_router.include_router(admin_courses_router)
    root_router.include_router(audit_logs_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
