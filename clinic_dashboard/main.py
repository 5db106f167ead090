"""CLI entry point: talk to the AIIA assistant from a terminal.

Uses the same prompt panel as the dashboard, so the automation webhook must
be configured (``WEBHOOK_URL`` with ``WEBHOOK_CONNECTED=true``) or passed
with ``--webhook-url``. For the dashboard itself, run the FastAPI server
(``clinic_dashboard/server.py``).

Usage:
    python -m clinic_dashboard.main            # normal mode (quiet)
    python -m clinic_dashboard.main --debug    # debug mode (shows HTTP calls)
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from clinic_dashboard.services.assistant import AssistantService
from clinic_dashboard.services.store import WEBHOOK_SERVICE, DashboardStore

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    root_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("clinic_dashboard").setLevel(logging.DEBUG if debug else logging.INFO)


def _new_assistant(webhook_url: str | None) -> AssistantService:
    """A fresh conversation over a freshly seeded store."""
    store = DashboardStore()
    if webhook_url:
        store.update_service(WEBHOOK_SERVICE, connected=True, webhook_url=webhook_url)
    return AssistantService(store)


def main():
    """Run the interactive assistant loop."""
    parser = argparse.ArgumentParser(description="AIIA assistant CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    parser.add_argument(
        "--webhook-url",
        help="Automation webhook to use instead of WEBHOOK_URL",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    assistant = _new_assistant(args.webhook_url)

    print("\n" + "=" * 60)
    print("  AIIA - Inteligência Artificial")
    print("=" * 60)
    print("  Digite sua mensagem e pressione Enter.")
    print("  Comandos: 'sair' para encerrar, 'limpar' para nova conversa.")
    print("=" * 60 + "\n")
    print(f"AIIA: {assistant.messages()[0].content}\n")

    while True:
        try:
            user_input = input("Você: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nAté logo!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("sair", "exit", "quit", "q"):
            print("\nAté logo!")
            break

        if user_input.lower() == "limpar":
            assistant = _new_assistant(args.webhook_url)
            print("\n>> Nova conversa iniciada.\n")
            continue

        try:
            reply = assistant.ask(user_input)
            print(f"\nAIIA: {reply.content}\n")
        except KeyboardInterrupt:
            print("\n\nAté logo!")
            break
        except Exception as e:
            logger.exception("Error processing message")
            print(f"\nAIIA: Desculpe, algo deu errado: {e}\n")


if __name__ == "__main__":
    main()
