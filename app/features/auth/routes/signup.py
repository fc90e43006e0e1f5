from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from app.features.auth.dependencies.two_factor import get_send_limiter, get_two_factor_service
from app.features.auth.schemas.signup import CaptchaVerifyRequest, SignupRequest
from app.features.auth.services.captcha import generate_captcha, verify_captcha
from app.features.auth.services.two_factor import TwoFactorService, normalize_email
from app.platform.config import settings
from app.platform.exceptions import GenerationFailure
from app.platform.logger import get_logger
from app.platform.response import api_response, error_response
from app.platform.result import Err, ErrorKind
from app.platform.utils.rate_limit import SlidingWindowRateLimiter

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Signup"])


def new_captcha_payload():
    captcha = generate_captcha(settings.CAPTCHA_LENGTH)
    return {"text": captcha.text, "challenge": captcha.challenge}


@router.get("/captcha", response_model=dict, summary="Get a signup CAPTCHA")
async def get_captcha():
    """
    Bot-deterrence speed bump only: the challenge is returned to the client
    and compared there, so this is not a security boundary.
    """
    try:
        payload = new_captcha_payload()
    except GenerationFailure:
        return error_response(Err(kind=ErrorKind.GENERATION_FAILURE, message="Could not create a CAPTCHA"))
    return api_response(data=payload, message="CAPTCHA generated")


@router.post("/captcha/verify", response_model=dict, summary="Check a CAPTCHA answer")
async def check_captcha(payload: CaptchaVerifyRequest):
    if verify_captcha(payload.answer, payload.challenge):
        return api_response(data={"verified": True}, message="CAPTCHA verified")

    return api_response(
        data={"verified": False, "captcha": new_captcha_payload()},
        message="CAPTCHA verification failed. Please try again.",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@router.post(
    "/signup",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Validate the signup form and start email verification",
)
async def signup(
    payload: SignupRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
    limiter: SlidingWindowRateLimiter = Depends(get_send_limiter),
):
    """
    Checks the CAPTCHA, then emails a verification code so the client can
    continue to 2FA setup. A failed CAPTCHA returns a fresh one.
    """
    if not verify_captcha(payload.captcha_answer, payload.captcha_challenge):
        return api_response(
            data={"captcha": new_captcha_payload()},
            message="CAPTCHA verification failed. Please try again.",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    limiter.hit(normalize_email(payload.email))
    outcome = await service.send_email_code(payload.email)
    if isinstance(outcome, Err):
        return error_response(outcome)

    logger.info(f"Signup form accepted for {outcome.value.email}")
    return api_response(
        data={"company_name": payload.company_name, **asdict(outcome.value)},
        message="Account details accepted. Please check your email for the verification code.",
        status_code=status.HTTP_201_CREATED,
    )
