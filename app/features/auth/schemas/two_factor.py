from pydantic import BaseModel, EmailStr, Field


class SendCodeRequest(BaseModel):
    email: EmailStr


class VerifyEmailCodeRequest(BaseModel):
    email: EmailStr
    # Format is checked by the verifier so a bad code is reported, not rejected
    code: str = Field(..., max_length=32)


class TotpSetupRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    account_label: str = Field(..., min_length=1, max_length=254)


class TotpCodeRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    code: str = Field(..., max_length=32)


class IssuedCodeResponse(BaseModel):
    email: EmailStr
    expires_in: int


class EnrollmentResponse(BaseModel):
    secret: str
    provisioning_uri: str
    qr_code: str
    expires_in: int


class VerificationResponse(BaseModel):
    verified: bool
    reason: str | None = None
