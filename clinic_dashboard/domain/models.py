"""Pydantic models for every record the dashboard holds.

Every entity except :class:`Clinic` carries a ``clinic_id`` so that lists can
be partitioned per tenant (see :mod:`clinic_dashboard.domain.tenancy`).
Appointments embed *snapshots* of their patient and doctor rather than ids.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states, in kanban column order."""

    AGENDADO = "agendado"
    CONFIRMADO = "confirmado"
    COMPARECEU = "compareceu"
    ATENDIDO = "atendido"
    FALTOU = "faltou"
    NAO_ATENDIDO = "não atendido"
    FALTA_JUSTIFICADA = "falta justificada"

    @property
    def title(self) -> str:
        return STATUS_TITLES[self]


STATUS_TITLES: dict[AppointmentStatus, str] = {
    AppointmentStatus.AGENDADO: "Agendado",
    AppointmentStatus.CONFIRMADO: "Confirmado",
    AppointmentStatus.COMPARECEU: "Compareceu",
    AppointmentStatus.ATENDIDO: "Atendido",
    AppointmentStatus.FALTOU: "Faltou",
    AppointmentStatus.NAO_ATENDIDO: "Não Atendido",
    AppointmentStatus.FALTA_JUSTIFICADA: "Falta Justificada",
}


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AgentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TransactionType(str, Enum):
    RECEITA = "receita"
    DESPESA = "despesa"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# ── Catalog entities ─────────────────────────────────────────────────


class Clinic(BaseModel):
    """Tenant root: every other record belongs to exactly one clinic."""

    id: str
    name: str
    cnpj: str
    address: str
    phone: str


class Specialty(BaseModel):
    id: str
    name: str
    description: str
    clinic_id: str


class Procedure(BaseModel):
    id: str
    name: str
    description: str
    specialty_id: str
    clinic_id: str


class DoctorProcedure(BaseModel):
    """A procedure a doctor performs.

    With ``orcar`` (quote on demand) the price is decided per appointment and
    ``valor`` is dropped; otherwise ``valor`` is the doctor's fixed price and
    must be positive.
    """

    procedure_id: str
    orcar: bool = False
    valor: float | None = None

    @model_validator(mode="after")
    def _check_price(self) -> DoctorProcedure:
        if self.orcar:
            self.valor = None
        elif self.valor is None or self.valor <= 0:
            raise ValueError(
                "O valor para o procedimento selecionado deve ser um número positivo."
            )
        return self


class Doctor(BaseModel):
    id: str
    name: str
    avatar_url: str = ""
    # Denormalized copy, not just an id
    specialty: Specialty
    procedures: list[DoctorProcedure] = Field(default_factory=list)
    clinic_id: str

    def procedure_config(self, procedure_id: str) -> DoctorProcedure | None:
        """Return this doctor's configuration for *procedure_id*, if any."""
        return next(
            (dp for dp in self.procedures if dp.procedure_id == procedure_id), None,
        )


class Patient(BaseModel):
    id: str
    name: str
    phone: str
    cpf: str | None = None
    address: str | None = None
    last_visit: str = "-"
    clinic_id: str


class AppointmentProcedure(BaseModel):
    procedure_id: str
    valor_final: float = Field(..., ge=0)


class Appointment(BaseModel):
    """A scheduled visit.

    ``valor_final`` is always the sum of the line items: it is computed when
    omitted and rejected when it disagrees.
    """

    id: str
    patient: Patient
    doctor: Doctor
    procedures: list[AppointmentProcedure]
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.AGENDADO
    valor_final: float | None = None
    clinic_id: str

    @model_validator(mode="after")
    def _check_consistency(self) -> Appointment:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        total = sum(p.valor_final for p in self.procedures)
        if self.valor_final is None:
            self.valor_final = total
        elif abs(self.valor_final - total) > 1e-9:
            raise ValueError(
                f"valor_final {self.valor_final} does not match line total {total}"
            )
        return self


class Agent(BaseModel):
    """A named system login identity, distinct from the session :class:`User`."""

    id: str
    full_name: str
    email: str
    role: UserRole = UserRole.USER
    status: AgentStatus = AgentStatus.ACTIVE
    clinic_id: str


class Transaction(BaseModel):
    id: str
    descricao: str
    valor: float
    tipo: TransactionType
    data: datetime
    categoria: str
    appointment_id: str | None = None
    clinic_id: str


# ── Session & settings ───────────────────────────────────────────────


class User(BaseModel):
    """The logged-in session user (email + role only)."""

    email: str
    role: UserRole


class IntegrationService(BaseModel):
    """An integration card on the settings screen."""

    name: str
    description: str
    connected: bool = False
    webhook_url: str = ""

    @property
    def effective_url(self) -> str | None:
        """The URL to call, or ``None`` while disconnected or unset."""
        if self.connected and self.webhook_url:
            return self.webhook_url
        return None


class ChatMessage(BaseModel):
    role: str  # "user" | "ai"
    content: str
