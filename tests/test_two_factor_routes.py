import time
from unittest.mock import patch

from app.features.auth.utils.totp import current_time_step, totp_at

SECRET = "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP"


def send_code(client, email="a@b.com"):
    return client.post("/api/v1/auth/2fa/email/send", json={"email": email})


class TestEmailCodeEndpoints:
    def test_send_then_verify_is_single_use(self, client):
        with patch("app.features.auth.services.two_factor.generate_numeric_code", return_value="482913"):
            response = send_code(client)

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "success"
        assert payload["data"] == {"email": "a@b.com", "expires_in": 600}

        verified = client.post("/api/v1/auth/2fa/email/verify", json={"email": "a@b.com", "code": "482913"})
        assert verified.status_code == 200
        assert verified.json()["data"] == {"verified": True, "reason": None}

        replay = client.post("/api/v1/auth/2fa/email/verify", json={"email": "a@b.com", "code": "482913"})
        assert replay.status_code == 410
        assert replay.json()["status"] == "error"
        assert replay.json()["data"]["reason"] == "not_found_or_expired"

    def test_wrong_code_is_a_mismatch(self, client):
        with patch("app.features.auth.services.two_factor.generate_numeric_code", return_value="482913"):
            send_code(client)

        response = client.post("/api/v1/auth/2fa/email/verify", json={"email": "a@b.com", "code": "000000"})

        assert response.status_code == 400
        assert response.json()["data"] == {"reason": "mismatch", "retryable": False}

    def test_malformed_code_is_reported_not_rejected(self, client):
        response = client.post("/api/v1/auth/2fa/email/verify", json={"email": "a@b.com", "code": "12ab"})

        assert response.status_code == 400
        assert response.json()["data"]["reason"] == "invalid_format"
        assert "6-digit" in response.json()["message"]

    def test_invalid_email_fails_validation(self, client):
        response = send_code(client, email="not-an-email")

        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    def test_peek_shows_live_code_in_local_environment(self, client):
        with patch("app.features.auth.services.two_factor.generate_numeric_code", return_value="482913"):
            send_code(client)

        response = client.get("/api/v1/auth/2fa/email/peek", params={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json()["data"] == {"code": "482913"}

    def test_send_is_rate_limited_per_address(self, client):
        for _ in range(3):
            assert send_code(client).status_code == 200

        blocked = send_code(client)
        other = send_code(client, email="c@d.com")

        assert blocked.status_code == 429
        assert "Retry-After" in blocked.headers
        assert other.status_code == 200


class TestTotpEndpoints:
    def enroll(self, client, user_id="user-1"):
        response = client.post(
            "/api/v1/auth/2fa/totp/setup",
            json={"user_id": user_id, "account_label": "a@b.com"},
        )
        assert response.status_code == 201
        return response.json()["data"]

    def test_setup_returns_secret_uri_and_qr(self, client):
        data = self.enroll(client)

        assert len(data["secret"]) == 32
        assert data["provisioning_uri"] == f"otpauth://totp/Buds:a@b.com?secret={data['secret']}&issuer=Buds"
        assert data["qr_code"].startswith("data:image/png;base64,")

    def test_confirm_enables_2fa_and_code_cannot_be_reused(self, client):
        secret = self.enroll(client)["secret"]
        code = totp_at(secret, current_time_step(time.time()))

        confirmed = client.post("/api/v1/auth/2fa/totp/confirm", json={"user_id": "user-1", "code": code})
        status = client.get("/api/v1/auth/2fa/totp/status/user-1")
        reused = client.post("/api/v1/auth/2fa/totp/verify", json={"user_id": "user-1", "code": code})

        assert confirmed.status_code == 200
        assert status.json()["data"] == {"enabled": True}
        # Replays are reported exactly like a wrong code
        assert reused.status_code == 400
        assert reused.json()["data"]["reason"] == "mismatch"

    def test_verify_without_enrollment(self, client):
        response = client.post("/api/v1/auth/2fa/totp/verify", json={"user_id": "ghost", "code": "123456"})

        assert response.status_code == 410

    def seed_secret(self, client, secret, user_id="user-1"):
        store = client.app.state.two_factor.store
        client.portal.call(store.put_secret, user_id, secret)

    def test_setup_is_refused_while_2fa_is_enabled(self, client):
        first = self.enroll(client)["secret"]
        client.post(
            "/api/v1/auth/2fa/totp/confirm",
            json={"user_id": "user-1", "code": totp_at(first, current_time_step(time.time()))},
        )

        again = client.post(
            "/api/v1/auth/2fa/totp/setup",
            json={"user_id": "user-1", "account_label": "attacker@evil.com"},
        )

        assert again.status_code == 409
        assert again.json()["data"] == {"reason": "already_enabled", "retryable": False}
        assert client.portal.call(client.app.state.two_factor.store.get_secret, "user-1") == first

    def test_disable_with_current_code(self, client):
        self.seed_secret(client, SECRET)

        response = client.post(
            "/api/v1/auth/2fa/totp/disable",
            json={"user_id": "user-1", "code": totp_at(SECRET, current_time_step(time.time()))},
        )
        status = client.get("/api/v1/auth/2fa/totp/status/user-1")

        assert response.status_code == 200
        assert status.json()["data"] == {"enabled": False}

    def test_disable_without_valid_code_keeps_2fa(self, client):
        self.seed_secret(client, SECRET)
        step = current_time_step(time.time())
        valid = {totp_at(SECRET, s) for s in (step - 1, step, step + 1)}
        wrong = next(c for c in ("000000", "111111", "222222", "333333") if c not in valid)

        response = client.post("/api/v1/auth/2fa/totp/disable", json={"user_id": "user-1", "code": wrong})
        status = client.get("/api/v1/auth/2fa/totp/status/user-1")

        assert response.status_code == 400
        assert status.json()["data"] == {"enabled": True}


def test_storage_outage_is_a_retryable_503(client):
    with patch(
        "app.platform.cache.memory.InMemoryKeyValueBackend.set",
        side_effect=OSError("disk full"),
    ):
        response = send_code(client)

    assert response.status_code == 503
    assert response.json()["data"] == {"reason": "storage_failure", "retryable": True}
