"""Login and registration against the auth webhook.

Passwords never leave the process in clear text: both flows send the
SHA-256 hex digest. The remote side answers with a ``status`` field
(``user_accept`` / ``user_created``) and, on refusal, an optional
``message`` shown to the user verbatim.
"""

from __future__ import annotations

import hashlib
import logging
import re

from clinic_dashboard.config import AUTH_WEBHOOK_URL
from clinic_dashboard.domain.models import User, UserRole
from clinic_dashboard.errors import AuthenticationError, ConfigurationError, FormValidationError
from clinic_dashboard.services.webhook_client import WebhookClient, get_webhook_client

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
LOGIN_REJECTED = "Credenciais inválidas ou resposta inesperada do webhook."
REGISTRATION_REJECTED = "Não foi possível criar o usuário. Verifique o código de liberação."
REGISTRATION_DONE = "Usuário criado com sucesso! Você já pode fazer o login."

_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def validate_email(email: str) -> str:
    """Return the trimmed *email* or raise :class:`FormValidationError`."""
    email = (email or "").strip()
    if not _EMAIL_RE.match(email):
        raise FormValidationError(f'"{email}" não parece ser um e-mail válido.')
    return email


def validate_new_password(password: str, confirm_password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise FormValidationError(
            f"A senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres."
        )
    if password != confirm_password:
        raise FormValidationError("As senhas não coincidem.")


class AuthService:
    def __init__(self, client: WebhookClient | None = None, url: str = AUTH_WEBHOOK_URL):
        self._client = client
        self._url = url

    @property
    def client(self) -> WebhookClient:
        if self._client is None:
            self._client = get_webhook_client()
        return self._client

    def _require_url(self) -> str:
        if not self._url:
            raise ConfigurationError(
                "A URL de autenticação (AUTH_WEBHOOK_URL) não está configurada."
            )
        return self._url

    def login(self, email: str, password: str) -> User:
        """Ask the auth webhook to accept *email*; return the session user."""
        url = self._require_url()
        result = self.client.post(url, {
            "tag": "solicitando_acesso",
            "email": email,
            "password_hash": hash_password(password),
        })
        role = result.get("role")
        if result.get("status") != "user_accept" or not role:
            logger.info("Login refused for %s", email)
            raise AuthenticationError(result.get("message") or LOGIN_REJECTED)
        try:
            return User(email=email, role=UserRole(role))
        except ValueError as exc:
            raise AuthenticationError(LOGIN_REJECTED) from exc

    def register(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        confirm_password: str,
        release_code: str,
        role: UserRole = UserRole.USER,
    ) -> str:
        """Request a new account; returns the confirmation message."""
        email = validate_email(email)
        validate_new_password(password, confirm_password)
        url = self._require_url()
        result = self.client.post(url, {
            "tag": "solicitando_cadastro",
            "nome_completo": full_name,
            "email": email,
            "password_hash": hash_password(password),
            "codigo_liberacao": release_code,
            "role": UserRole(role).value,
        })
        if result.get("status") != "user_created":
            logger.info("Registration refused for %s", email)
            raise AuthenticationError(result.get("message") or REGISTRATION_REJECTED)
        logger.info("Registered %s as %s", email, UserRole(role).value)
        return REGISTRATION_DONE
