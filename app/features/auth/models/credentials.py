from pydantic import BaseModel, Field


class OneTimeCode(BaseModel):
    """An emailed verification code, stored as JSON under its subject key."""

    subject_key: str
    code: str = Field(..., min_length=6, max_length=6)
    issued_at: float
    ttl: float

    def expires_at(self) -> float:
        return self.issued_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now - self.issued_at > self.ttl

    def remaining(self, now: float) -> float:
        return max(0.0, self.expires_at() - now)


class CaptchaChallenge(BaseModel):
    text: str
    # Same value as text: the check is self-contained, not server-verified
    challenge: str
