from app.features.auth.models.credentials import CaptchaChallenge, OneTimeCode

__all__ = ["CaptchaChallenge", "OneTimeCode"]
