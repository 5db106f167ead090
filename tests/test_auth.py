"""Tests for login/registration against the auth webhook."""

from __future__ import annotations

import hashlib

import pytest

from clinic_dashboard.domain.models import UserRole
from clinic_dashboard.errors import AuthenticationError, ConfigurationError, FormValidationError
from clinic_dashboard.services.auth import (
    LOGIN_REJECTED,
    REGISTRATION_DONE,
    REGISTRATION_REJECTED,
    AuthService,
    hash_password,
    validate_email,
)

AUTH_URL = "https://hooks.test/webhook/auth"


@pytest.fixture
def auth(webhook):
    return AuthService(webhook, url=AUTH_URL)


class TestHashPassword:
    def test_sha256_hex_digest(self):
        assert hash_password("segredo123") == hashlib.sha256(b"segredo123").hexdigest()
        assert len(hash_password("x")) == 64


class TestValidateEmail:
    def test_trims_valid_address(self):
        assert validate_email("  nova@odonto.com ") == "nova@odonto.com"

    @pytest.mark.parametrize("email", ["", "nova", "nova@", "nova@odonto", "a b@c.com"])
    def test_rejects_malformed(self, email):
        with pytest.raises(FormValidationError, match="e-mail válido"):
            validate_email(email)


class TestLogin:
    def test_accepted_login_returns_user(self, auth, webhook):
        webhook.post.return_value = {"status": "user_accept", "role": "admin"}
        user = auth.login("admin@odonto.com", "segredo123")
        assert user.email == "admin@odonto.com"
        assert user.role == UserRole.ADMIN
        url, payload = webhook.post.call_args[0]
        assert url == AUTH_URL
        assert payload == {
            "tag": "solicitando_acesso",
            "email": "admin@odonto.com",
            "password_hash": hash_password("segredo123"),
        }

    def test_plaintext_password_is_never_sent(self, auth, webhook):
        webhook.post.return_value = {"status": "user_accept", "role": "user"}
        auth.login("a@b.com", "segredo123")
        assert "segredo123" not in str(webhook.post.call_args)

    def test_remote_message_is_surfaced(self, auth, webhook):
        webhook.post.return_value = {"status": "user_denied", "message": "Usuário bloqueado."}
        with pytest.raises(AuthenticationError, match="Usuário bloqueado."):
            auth.login("a@b.com", "x")

    @pytest.mark.parametrize("body", [
        {},
        {"status": "user_accept"},
        {"status": "user_accept", "role": "root"},
    ])
    def test_unexpected_answer(self, auth, webhook, body):
        webhook.post.return_value = body
        with pytest.raises(AuthenticationError, match=LOGIN_REJECTED):
            auth.login("a@b.com", "x")

    def test_missing_url(self, webhook):
        with pytest.raises(ConfigurationError, match="AUTH_WEBHOOK_URL"):
            AuthService(webhook, url="").login("a@b.com", "x")
        webhook.post.assert_not_called()


class TestRegister:
    def _register(self, auth, **overrides):
        fields = {
            "full_name": "Nova Pessoa",
            "email": "nova@odonto.com",
            "password": "segredo123",
            "confirm_password": "segredo123",
            "release_code": "LIB-42",
            "role": UserRole.USER,
        }
        fields.update(overrides)
        return auth.register(**fields)

    def test_created(self, auth, webhook):
        webhook.post.return_value = {"status": "user_created"}
        assert self._register(auth) == REGISTRATION_DONE
        assert webhook.post.call_args[0][1] == {
            "tag": "solicitando_cadastro",
            "nome_completo": "Nova Pessoa",
            "email": "nova@odonto.com",
            "password_hash": hash_password("segredo123"),
            "codigo_liberacao": "LIB-42",
            "role": "user",
        }

    def test_refused(self, auth, webhook):
        webhook.post.return_value = {"status": "invalid_code"}
        with pytest.raises(AuthenticationError, match=REGISTRATION_REJECTED):
            self._register(auth)

    def test_short_password_checked_before_network(self, auth, webhook):
        with pytest.raises(FormValidationError, match="mínimo 8"):
            self._register(auth, password="1234567", confirm_password="1234567")
        webhook.post.assert_not_called()

    def test_bad_email_checked_before_network(self, auth, webhook):
        with pytest.raises(FormValidationError, match="e-mail válido"):
            self._register(auth, email="nova.odonto.com")
        webhook.post.assert_not_called()

    def test_mismatch_checked_before_network(self, auth, webhook):
        with pytest.raises(FormValidationError, match="não coincidem"):
            self._register(auth, confirm_password="segredo124")
        webhook.post.assert_not_called()
