"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.signups import router as signups_router

router = APIRouter()
router.include_router(signups_router)
router.include_router(profiles_router)
