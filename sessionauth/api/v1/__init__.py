"""
API routes.
"""

from fastapi import APIRouter

from sessionauth.api.v1.auth import router as auth_router
from sessionauth.schemas.common import ErrorResponse

router = APIRouter()

router.include_router(
    auth_router,
    prefix="/auth",
    tags=["Authentication"],
    responses={401: {"model": ErrorResponse}},
)

__all__ = ["router"]
