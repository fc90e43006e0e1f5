from fastapi import Request

from app.features.auth.services.two_factor import TwoFactorService
from app.platform.utils.rate_limit import SlidingWindowRateLimiter


def get_two_factor_service(request: Request) -> TwoFactorService:
    """The service built in the application lifespan."""
    return request.app.state.two_factor


def get_send_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.send_limiter
