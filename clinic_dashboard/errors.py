"""Exceptions shared by the domain and service layers.

Remote-call failures live next to the HTTP client
(:class:`clinic_dashboard.services.webhook_client.WebhookError`).
"""

from __future__ import annotations


class FormValidationError(ValueError):
    """Raised when submitted form data fails a client-side rule.

    The message is shown to the user as-is, next to the form.
    """


class NotFoundError(LookupError):
    """Raised when an id does not exist inside the selected clinic."""


class ConfigurationError(RuntimeError):
    """Raised when a user action needs a setting that is not configured."""


class AccessDeniedError(PermissionError):
    """Raised when a section is not in the current user's menu."""


class AuthenticationError(Exception):
    """Raised when the auth webhook rejects a login or registration."""
