import base64
import string
from unittest.mock import patch

import pytest

from app.features.auth.utils.generators import (
    CAPTCHA_ALPHABET,
    decode_totp_secret,
    generate_captcha_text,
    generate_numeric_code,
    generate_totp_secret,
)
from app.platform.exceptions import GenerationFailure


class TestNumericCode:
    def test_codes_are_six_ascii_digits_in_range(self):
        for _ in range(500):
            code = generate_numeric_code()
            assert len(code) == 6
            assert all(ch in string.digits for ch in code)
            assert 100000 <= int(code) <= 999999

    def test_codes_vary(self):
        assert len({generate_numeric_code() for _ in range(50)}) > 1

    def test_random_source_failure_is_fatal(self):
        with patch("app.features.auth.utils.generators.secrets.randbelow", side_effect=OSError("no entropy")):
            with pytest.raises(GenerationFailure):
                generate_numeric_code()


class TestTotpSecret:
    def test_secret_decodes_to_twenty_bytes(self):
        for _ in range(50):
            secret = generate_totp_secret()
            assert len(secret) == 32
            assert "=" not in secret
            assert set(secret) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")
            assert len(decode_totp_secret(secret)) == 20

    def test_decode_matches_stdlib_base32(self):
        secret = generate_totp_secret()
        assert decode_totp_secret(secret) == base64.b32decode(secret)

    def test_random_source_failure_is_fatal(self):
        with patch("app.features.auth.utils.generators.secrets.token_bytes", side_effect=OSError("no entropy")):
            with pytest.raises(GenerationFailure):
                generate_totp_secret()


class TestCaptchaText:
    def test_text_uses_unambiguous_alphabet(self):
        for _ in range(200):
            text = generate_captcha_text()
            assert len(text) == 6
            assert set(text) <= set(CAPTCHA_ALPHABET)
            assert not set(text) & set("IO01")

    def test_custom_length(self):
        assert len(generate_captcha_text(8)) == 8
