"""AI prompt panel and the embedded chat console."""

from __future__ import annotations

import logging

from clinic_dashboard.config import CHAT_CONSOLE_URL
from clinic_dashboard.domain.models import ChatMessage
from clinic_dashboard.errors import ConfigurationError, FormValidationError
from clinic_dashboard.services.store import DashboardStore
from clinic_dashboard.services.webhook_client import WebhookClient, WebhookError, get_webhook_client

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REPLY = (
    "Desculpe, a conexão com a IA não está configurada. Verifique as configurações."
)
MISSING_OUTPUT = "A resposta da IA não continha o campo 'output'."


def chat_console_url(url: str = CHAT_CONSOLE_URL) -> str:
    if not url:
        raise ConfigurationError("O console de chat (CHAT_CONSOLE_URL) não está configurado.")
    return url


class AssistantService:
    """Keeps the conversation and relays prompts to the automation."""

    def __init__(self, store: DashboardStore, client: WebhookClient | None = None):
        self._store = store
        self._client = client

    @property
    def client(self) -> WebhookClient:
        if self._client is None:
            self._client = get_webhook_client()
        return self._client

    def messages(self) -> list[ChatMessage]:
        with self._store.lock:
            return list(self._store.assistant_messages)

    def ask(self, prompt: str) -> ChatMessage:
        """Append *prompt* and the assistant's reply; return the reply.

        Remote failures do not raise: they come back as an assistant message
        so the conversation keeps a record of them.
        """
        if not prompt or not prompt.strip():
            raise FormValidationError("Digite uma mensagem.")
        self._append(ChatMessage(role="user", content=prompt))

        url = self._store.webhook_url()
        if url is None:
            return self._append(ChatMessage(role="ai", content=NOT_CONFIGURED_REPLY))

        try:
            result = self.client.post(url, {"tag": "aiia_ia", "prompt": prompt})
            output = result.get("output")
            if not output:
                raise WebhookError(MISSING_OUTPUT)
        except WebhookError as exc:
            logger.warning("Assistant prompt failed: %s", exc)
            if exc.status_code is not None:
                detail = f"O servidor respondeu com o status: {exc.status_code}"
            else:
                detail = str(exc)
            return self._append(
                ChatMessage(role="ai", content=f"Desculpe, ocorreu um erro: {detail}")
            )
        return self._append(ChatMessage(role="ai", content=str(output)))

    def _append(self, message: ChatMessage) -> ChatMessage:
        with self._store.lock:
            self._store.assistant_messages.append(message)
        return message
