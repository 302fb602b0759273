"""
Main API router
"""
from fastapi import APIRouter, Depends

from eyemate.core.config import get_settings
from eyemate.core.dependencies import get_current_user
from eyemate.models.user import User

from . import auth, patients, medications, appointments, documents, notifications

settings = get_settings()

api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    patients.router,
    prefix="/patient",
    tags=["patient"]
)

api_router.include_router(
    medications.router,
    prefix="/patient/medications",
    tags=["medications"]
)

api_router.include_router(
    appointments.router,
    prefix="/patient",
    tags=["appointments"]
)

api_router.include_router(
    documents.router,
    prefix="/patient/documents",
    tags=["documents"]
)

api_router.include_router(
    notifications.inbox_router,
    prefix="/patient",
    tags=["notifications"]
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["push"]
)


@api_router.get("/health")
async def api_health():
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION
    }


@api_router.get("/info")
async def api_info(current_user: User = Depends(get_current_user)):
    """API information for the current user"""
    return {
        "user": {
            "id": current_user.id,
            "name": current_user.name,
            "role": current_user.role,
            "is_admin": current_user.is_admin
        },
        "api": {
            "version": settings.VERSION,
            "available_endpoints": [
                "/auth",
                "/patient",
                "/patient/medications",
                "/patient/documents",
                "/notifications"
            ]
        }
    }
