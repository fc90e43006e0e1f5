from fastapi import APIRouter

from app.features.auth.routes.signup import router as signup_router
from app.features.auth.routes.two_factor import router as two_factor_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(two_factor_router)
api_router.include_router(signup_router)
