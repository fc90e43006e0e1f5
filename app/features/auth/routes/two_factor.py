from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr

from app.features.auth.dependencies.two_factor import get_send_limiter, get_two_factor_service
from app.features.auth.schemas.two_factor import (
    EnrollmentResponse,
    IssuedCodeResponse,
    SendCodeRequest,
    TotpCodeRequest,
    TotpSetupRequest,
    VerificationResponse,
    VerifyEmailCodeRequest,
)
from app.features.auth.services.two_factor import TwoFactorService, normalize_email
from app.features.auth.services.verifier import VerificationResult, VerificationStatus
from app.platform.config import settings
from app.platform.response import api_response, error_response
from app.platform.result import Err, Result
from app.platform.utils.rate_limit import SlidingWindowRateLimiter

router = APIRouter(prefix="/auth/2fa", tags=["Two-Factor Authentication"])

FAILURE_MESSAGES = {
    VerificationStatus.INVALID_FORMAT: "Please enter a 6-digit code",
    VerificationStatus.NOT_FOUND_OR_EXPIRED: "Invalid or expired verification code. Please request a new code.",
    VerificationStatus.MISMATCH: "Invalid verification code. Please try again.",
    VerificationStatus.REPLAYED: "Invalid verification code. Please try again.",
}


def verification_response(outcome: Result[VerificationResult], success_message: str):
    if isinstance(outcome, Err):
        return error_response(outcome)

    result = outcome.value
    if result.ok:
        return api_response(
            data=VerificationResponse(verified=True),
            message=success_message,
        )

    # REPLAYED is reported as a plain mismatch
    reason = result.error_kind
    return error_response(Err(kind=reason), message=FAILURE_MESSAGES[result.status])


@router.post(
    "/email/send",
    response_model=dict,
    summary="Send an email verification code",
    description="Generate a 6-digit code, store it for 10 minutes and hand it to the mail sender",
)
async def send_email_code(
    payload: SendCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
    limiter: SlidingWindowRateLimiter = Depends(get_send_limiter),
):
    """
    Sending again replaces any code still live for this address.
    """
    limiter.hit(normalize_email(payload.email))
    outcome = await service.send_email_code(payload.email)
    if isinstance(outcome, Err):
        return error_response(outcome)

    return api_response(
        data=IssuedCodeResponse(**asdict(outcome.value)),
        message=f"A verification code has been sent to {outcome.value.email}.",
    )


@router.post("/email/verify", response_model=dict, summary="Verify an email code")
async def verify_email_code(
    payload: VerifyEmailCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.verify_email_code(payload.email, payload.code)
    return verification_response(outcome, "Email verified successfully")


if settings.ENVIRONMENT == "local":

    @router.get("/email/peek", response_model=dict, include_in_schema=False)
    async def peek_email_code(
        email: EmailStr = Query(...),
        service: TwoFactorService = Depends(get_two_factor_service),
    ):
        outcome = await service.peek_email_code(email)
        if isinstance(outcome, Err):
            return error_response(outcome)
        if outcome.value is None:
            return api_response(message="No live code", status_code=status.HTTP_404_NOT_FOUND)
        return api_response(data={"code": outcome.value}, message="Live code (development only)")


@router.post(
    "/totp/setup",
    response_model=dict,
    summary="Start authenticator enrollment",
    description="Returns a new secret with its otpauth:// URI and QR code; confirm it with a code",
)
async def setup_totp(
    payload: TotpSetupRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.begin_totp_enrollment(payload.user_id, payload.account_label)
    if isinstance(outcome, Err):
        return error_response(outcome)

    return api_response(
        data=EnrollmentResponse(**asdict(outcome.value)),
        message="Scan the QR code with your authenticator app, then enter the code it shows",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/totp/confirm", response_model=dict, summary="Confirm authenticator enrollment")
async def confirm_totp(
    payload: TotpCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.confirm_totp_enrollment(payload.user_id, payload.code)
    return verification_response(outcome, "Two-factor authentication has been enabled for your account.")


@router.post("/totp/verify", response_model=dict, summary="Verify an authenticator code")
async def verify_totp(
    payload: TotpCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.verify_totp(payload.user_id, payload.code)
    return verification_response(outcome, "Two-factor verification successful")


@router.get("/totp/status/{user_id}", response_model=dict, summary="Is 2FA enabled")
async def totp_status(
    user_id: str,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.totp_enabled(user_id)
    if isinstance(outcome, Err):
        return error_response(outcome)
    return api_response(data={"enabled": outcome.value}, message="2FA status retrieved")


@router.post(
    "/totp/disable",
    response_model=dict,
    summary="Disable 2FA",
    description="Requires a current code from the enrolled authenticator",
)
async def disable_totp(
    payload: TotpCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
):
    outcome = await service.disable_totp(payload.user_id, payload.code)
    return verification_response(outcome, "Two-factor authentication has been disabled")
