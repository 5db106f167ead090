"""Thread-safe in-memory state of the dashboard.

Everything the dashboard knows lives here: the clinic-scoped collections,
the clinic list, which clinic and section are selected, the session user,
the theme, the integration settings and the AI conversation. Nothing is
persisted; a restart re-seeds from :mod:`clinic_dashboard.seed`.

Writers go through the small set of mutation helpers below, which take the
store lock. Reads of the selected clinic's data go through
:meth:`DashboardStore.current_slice`, so cross-clinic rows never leak into a
list.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import date
from typing import Any

from clinic_dashboard.config import (
    BYPASS_USER_EMAIL,
    DEFAULT_THEME,
    LOGIN_BYPASS,
    WEBHOOK_CONNECTED,
    WEBHOOK_URL,
)
from clinic_dashboard.domain.models import (
    Appointment,
    AppointmentStatus,
    ChatMessage,
    Clinic,
    IntegrationService,
    Theme,
    User,
    UserRole,
)
from clinic_dashboard.domain.navigation import View, can_open
from clinic_dashboard.domain.tenancy import ClinicSlice, Collections, find_by_id, slice_for_clinic
from clinic_dashboard.errors import AccessDeniedError, NotFoundError
from clinic_dashboard.seed import seed_clinics, seed_collections

logger = logging.getLogger(__name__)

ASSISTANT_GREETING = (
    "Olá! Sou a AIIA, sua assistente de inteligência artificial. "
    "Como posso ajudar hoje?"
)
WEBHOOK_SERVICE = "n8n"


def _default_services() -> list[IntegrationService]:
    return [
        IntegrationService(
            name=WEBHOOK_SERVICE,
            description="Automatize fluxos com n8n.",
            connected=WEBHOOK_CONNECTED,
            webhook_url=WEBHOOK_URL,
        )
    ]


def _default_theme() -> Theme:
    try:
        return Theme(DEFAULT_THEME)
    except ValueError:
        return Theme.LIGHT


class DashboardStore:
    """Holds the dashboard state and serialises writes to it."""

    def __init__(
        self,
        today: date | None = None,
        *,
        clinics: list[Clinic] | None = None,
        collections: Collections | None = None,
        user: User | None = None,
        services: list[IntegrationService] | None = None,
    ) -> None:
        # A fixed *today* pins the clock (demo data and "today" figures)
        self.clock: Callable[[], date] = (lambda: today) if today else date.today
        self._lock = threading.RLock()
        self.clinics: list[Clinic] = clinics if clinics is not None else seed_clinics()
        self.collections: Collections = (
            collections if collections is not None else seed_collections(self.clock())
        )
        self.selected_clinic_id: str | None = self.clinics[0].id if self.clinics else None
        self.active_view: View = View.DASHBOARD
        if user is None and LOGIN_BYPASS:
            # Login screen stand-in: start as the pre-authenticated super-admin
            user = User(email=BYPASS_USER_EMAIL, role=UserRole.SUPERADMIN)
        self.user: User | None = user
        self.theme: Theme = _default_theme()
        self.services: list[IntegrationService] = (
            services if services is not None else _default_services()
        )
        self.assistant_messages: list[ChatMessage] = [
            ChatMessage(role="ai", content=ASSISTANT_GREETING)
        ]

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # ── Reads ────────────────────────────────────────────────────────

    def current_slice(self) -> ClinicSlice:
        with self._lock:
            return slice_for_clinic(self.collections, self.selected_clinic_id)

    def webhook_url(self) -> str | None:
        """URL of the automation webhook, or ``None`` while not connected."""
        with self._lock:
            service = next((s for s in self.services if s.name == WEBHOOK_SERVICE), None)
            return service.effective_url if service else None

    # ── Session / shell ──────────────────────────────────────────────

    def select_clinic(self, clinic_id: str) -> None:
        """Switch tenant.  The active section falls back to the overview."""
        with self._lock:
            find_by_id(self.clinics, clinic_id, "Clínica")
            self.selected_clinic_id = clinic_id
            self.active_view = View.DASHBOARD
        logger.info("Selected clinic %s", clinic_id)

    def navigate(self, view: View) -> None:
        with self._lock:
            if self.user is None or not can_open(self.user.role, view):
                raise AccessDeniedError(f"Seção indisponível: {view.value}")
            self.active_view = view

    def toggle_theme(self) -> Theme:
        with self._lock:
            self.theme = Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT
            return self.theme

    def login(self, user: User) -> None:
        with self._lock:
            self.user = user
            self.active_view = View.DASHBOARD

    def logout(self) -> None:
        with self._lock:
            self.user = None

    def update_service(
        self, name: str, *, connected: bool | None = None, webhook_url: str | None = None,
    ) -> IntegrationService:
        with self._lock:
            for index, service in enumerate(self.services):
                if service.name != name:
                    continue
                changes: dict[str, Any] = {}
                if connected is not None:
                    changes["connected"] = connected
                if webhook_url is not None:
                    changes["webhook_url"] = webhook_url.strip()
                self.services[index] = service.model_copy(update=changes)
                return self.services[index]
        raise NotFoundError(f"Serviço não encontrado: {name}")

    # ── Collection mutations ─────────────────────────────────────────

    @staticmethod
    def new_id(prefix: str = "") -> str:
        return f"{prefix}{uuid.uuid4().hex[:12]}"

    def _rows(self, name: str) -> list:
        if name == "clinics":
            return self.clinics
        return getattr(self.collections, name)

    def prepend(self, name: str, record) -> None:
        """Insert a newly created record at the top of its list."""
        with self._lock:
            self._rows(name).insert(0, record)

    def replace(self, name: str, record) -> None:
        """Swap the record with the same id in place."""
        with self._lock:
            rows = self._rows(name)
            for index, row in enumerate(rows):
                if row.id == record.id:
                    rows[index] = record
                    return
        raise NotFoundError(f"Registro não encontrado: {record.id}")

    def revert_status(
        self,
        appointment_id: str,
        *,
        expected: AppointmentStatus,
        previous: AppointmentStatus,
    ) -> Appointment | None:
        """Put *previous* back on one appointment if it still shows *expected*.

        Returns the reverted record, or ``None`` when the appointment was
        removed or changed again in the meantime and is left untouched.
        """
        with self._lock:
            current = next(
                (at for at in self.collections.appointments if at.id == appointment_id), None,
            )
            if current is None or current.status != expected:
                return None
            reverted = current.model_copy(update={"status": previous})
            self.replace("appointments", reverted)
            return reverted

    def set_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        with self._lock:
            current = find_by_id(self.collections.appointments, appointment_id, "Atendimento")
            updated = current.model_copy(update={"status": status})
            self.replace("appointments", updated)
            return updated
