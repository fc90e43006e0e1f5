from typing import Protocol

from jinja2 import TemplateError
from starlette.concurrency import run_in_threadpool

from app.platform.config import Settings
from app.platform.logger import get_logger
from app.platform.services.email import EmailDeliveryError, render_template, send_email

logger = get_logger(__name__)


class MailSender(Protocol):
    async def send(self, recipient: str, code: str, ttl: float) -> bool: ...


class LoggingMailSender:
    """Demo mode: nothing is sent, the code is written to the log."""

    async def send(self, recipient: str, code: str, ttl: float) -> bool:
        logger.info("=" * 60)
        logger.info("DEMO MODE - EMAIL VERIFICATION (no email was sent)")
        logger.info(f"To: {recipient}")
        logger.info(f"Your verification code is: {code}")
        logger.info(f"This code will expire in {int(ttl // 60)} minutes.")
        logger.info("=" * 60)
        return True


class RelayMailSender:
    """Delivers the code through the relay/SMTP helpers in a worker thread."""

    subject = "Your Buds Verification Code"
    template = "verification_code.html"

    async def send(self, recipient: str, code: str, ttl: float) -> bool:
        try:
            body = render_template(self.template, code=code, expires_minutes=int(ttl // 60))
            await run_in_threadpool(send_email, recipient, self.subject, body)
        except (EmailDeliveryError, TemplateError) as e:
            logger.error(f"Failed to deliver verification code to {recipient}: {e}")
            return False
        logger.info(f"Verification code emailed to {recipient}")
        return True


def create_mail_sender(settings: Settings) -> MailSender:
    if settings.MAIL_DEMO_MODE:
        return LoggingMailSender()
    return RelayMailSender()
