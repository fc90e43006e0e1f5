from unittest.mock import patch

import pytest
from jinja2 import TemplateNotFound

from app.features.auth.services.mail_sender import (
    LoggingMailSender,
    RelayMailSender,
    create_mail_sender,
)
from app.platform.config import Settings
from app.platform.services.email import EmailDeliveryError, render_template


def test_demo_mode_selects_logging_sender():
    assert isinstance(create_mail_sender(Settings(MAIL_DEMO_MODE=True)), LoggingMailSender)
    assert isinstance(create_mail_sender(Settings(MAIL_DEMO_MODE=False)), RelayMailSender)


def test_template_contains_code_and_expiry():
    body = render_template("verification_code.html", code="482913", expires_minutes=10)

    assert "482913" in body
    assert "10 minutes" in body


@pytest.mark.asyncio
async def test_logging_sender_always_succeeds():
    assert await LoggingMailSender().send("a@b.com", "482913", 600)


@pytest.mark.asyncio
async def test_relay_sender_delivers_rendered_message():
    with patch("app.features.auth.services.mail_sender.send_email") as mock_send:
        delivered = await RelayMailSender().send("a@b.com", "482913", 600)

    assert delivered
    to_email, subject, body = mock_send.call_args.args
    assert to_email == "a@b.com"
    assert "Verification Code" in subject
    assert "482913" in body


@pytest.mark.asyncio
async def test_relay_sender_reports_delivery_failure():
    with patch(
        "app.features.auth.services.mail_sender.send_email",
        side_effect=EmailDeliveryError("relay down"),
    ):
        assert not await RelayMailSender().send("a@b.com", "482913", 600)


@pytest.mark.asyncio
async def test_relay_sender_reports_template_failure_without_sending():
    with patch(
        "app.features.auth.services.mail_sender.render_template",
        side_effect=TemplateNotFound("verification_code.html"),
    ), patch("app.features.auth.services.mail_sender.send_email") as mock_send:
        assert not await RelayMailSender().send("a@b.com", "482913", 600)

    mock_send.assert_not_called()
