from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.platform.config import settings


def parse_date_of_birth(value: str) -> date:
    """Parse ``MM/DD/YYYY``, rejecting impossible dates such as 02/30/1990."""
    return datetime.strptime(value.strip(), "%m/%d/%Y").date()


def calculate_age(born: date, today: date | None = None) -> int:
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (born.month, born.day)
    return today.year - born.year - (0 if had_birthday else 1)


class CaptchaVerifyRequest(BaseModel):
    answer: str = Field(..., max_length=32)
    challenge: str = Field(..., max_length=32)


class SignupRequest(BaseModel):
    company_name: str = Field(..., max_length=120)
    email: EmailStr
    date_of_birth: str = Field(..., description="MM/DD/YYYY")
    password: str
    confirm_password: str
    captcha_answer: str = Field(..., max_length=32)
    captcha_challenge: str = Field(..., max_length=32)

    @field_validator("company_name")
    @classmethod
    def validate_company_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter your company name")
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: str) -> str:
        try:
            born = parse_date_of_birth(v)
        except ValueError:
            raise ValueError("Please enter a valid date in MM/DD/YYYY format (e.g., 01/15/1990)")
        if calculate_age(born) < settings.SIGNUP_MIN_AGE:
            raise ValueError(
                f"You must be {settings.SIGNUP_MIN_AGE} years or older to create an account"
            )
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self
