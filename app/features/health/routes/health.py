from fastapi import APIRouter, Request, status

from app.platform.response import api_response


router = APIRouter()

@router.get("/health", tags=["health"])
async def health_check(request: Request):
    backend = type(request.app.state.two_factor.store.backend).__name__
    return api_response(
        data={"status": "ok", "service": "Buds Auth", "store": backend},
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
    )
