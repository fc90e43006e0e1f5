"""Signup CAPTCHA.

The challenge equals the text being checked and there is no server-side
secret, so this only slows down naive bots. It is not an anti-automation
control and must not be relied on as one.
"""

from typing import Optional

from app.features.auth.models.credentials import CaptchaChallenge
from app.features.auth.utils.generators import CAPTCHA_LENGTH, generate_captcha_text


def generate_captcha(length: int = CAPTCHA_LENGTH) -> CaptchaChallenge:
    text = generate_captcha_text(length)
    return CaptchaChallenge(text=text, challenge=text)


def verify_captcha(user_input: Optional[str], challenge: Optional[str]) -> bool:
    if not user_input or not challenge:
        return False
    return user_input.strip().upper() == challenge.strip().upper()


class CaptchaSession:
    """The challenge shown on one signup form.

    Only the current challenge can be answered; regenerating discards the
    previous one, and a wrong answer triggers a regeneration.
    """

    def __init__(self, length: int = CAPTCHA_LENGTH):
        self.length = length
        self.current = generate_captcha(length)

    def regenerate(self) -> CaptchaChallenge:
        self.current = generate_captcha(self.length)
        return self.current

    def check(self, user_input: Optional[str]) -> bool:
        if verify_captcha(user_input, self.current.challenge):
            return True
        self.regenerate()
        return False
