import base64

import pytest

from app.features.auth.utils.totp import (
    build_otpauth_uri,
    current_time_step,
    hotp,
    render_qr_png,
    totp_at,
)

# RFC 4226 appendix D: ASCII "12345678901234567890"
RFC_SECRET = base64.b32encode(b"12345678901234567890").decode()
RFC_HOTP = ["755224", "287082", "359152", "969429", "338314",
            "254676", "287922", "162583", "399871", "520489"]


@pytest.mark.parametrize("counter,expected", list(enumerate(RFC_HOTP)))
def test_hotp_matches_rfc_4226_vectors(counter, expected):
    assert hotp(RFC_SECRET, counter) == expected


def test_totp_is_a_pure_function_of_secret_and_step():
    assert totp_at(RFC_SECRET, 56666666) == totp_at(RFC_SECRET, 56666666)
    assert totp_at(RFC_SECRET, 3) == "969429"


def test_rfc_6238_sha1_vector_truncated_to_six_digits():
    # T = 59s -> step 1 -> 94287082 in the 8-digit table
    assert totp_at(RFC_SECRET, current_time_step(59)) == "287082"


def test_time_step_is_floor_of_thirty_second_windows():
    assert current_time_step(0) == 0
    assert current_time_step(29.999) == 0
    assert current_time_step(30) == 1
    assert current_time_step(1_700_000_000) == 56666666


def test_otpauth_uri_is_bit_exact_for_plain_labels():
    uri = build_otpauth_uri("JBSWY3DPEHPK3PXP", "a@b.com", issuer="Buds")

    assert uri == "otpauth://totp/Buds:a@b.com?secret=JBSWY3DPEHPK3PXP&issuer=Buds"


def test_otpauth_uri_escapes_reserved_characters():
    uri = build_otpauth_uri("JBSWY3DPEHPK3PXP", "jane doe", issuer="Buds & Co")

    assert uri == "otpauth://totp/Buds%20%26%20Co:jane%20doe?secret=JBSWY3DPEHPK3PXP&issuer=Buds%20%26%20Co"


def test_qr_code_is_png_data_uri():
    data_uri = render_qr_png("otpauth://totp/Buds:a@b.com?secret=JBSWY3DPEHPK3PXP&issuer=Buds")

    assert data_uri.startswith("data:image/png;base64,")
    png = base64.b64decode(data_uri.split(",", 1)[1])
    assert png[:8] == b"\x89PNG\r\n\x1a\n"
