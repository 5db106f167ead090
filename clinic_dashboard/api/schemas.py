"""Pydantic schemas for the FastAPI endpoints.

Stored records (clinics, doctors, appointments, ...) are returned as their
domain models; the schemas here cover form bodies and the derived views.
"""

from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from clinic_dashboard.domain.models import (
    Agent,
    Appointment,
    AppointmentStatus,
    Clinic,
    Doctor,
    Patient,
    Procedure,
    Specialty,
    Theme,
    Transaction,
    TransactionType,
    User,
    UserRole,
)
from clinic_dashboard.domain.navigation import View


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "clinic-dashboard"


class MessageResponse(BaseModel):
    message: str


# ── Session & shell ──────────────────────────────────────────────────


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str
    confirm_password: str
    release_code: str = Field(..., min_length=1, description="Código de liberação")
    role: UserRole = UserRole.USER


class NavItemResponse(BaseModel):
    view: View
    label: str
    title: str


class SessionResponse(BaseModel):
    """Everything the shell (sidebar and header) needs to render."""

    user: User | None
    theme: Theme
    active_view: View
    title: str
    clinics: list[Clinic]
    selected_clinic_id: str | None
    needs_clinic_selection: bool
    menu: list[NavItemResponse]


class SelectClinicRequest(BaseModel):
    clinic_id: str


class NavigateRequest(BaseModel):
    view: View


class ServiceUpdateRequest(BaseModel):
    connected: bool | None = None
    webhook_url: str | None = None


# ── Catalog forms ────────────────────────────────────────────────────


class ClinicForm(BaseModel):
    name: str = ""
    cnpj: str = ""
    address: str = ""
    phone: str = ""


class SpecialtyForm(BaseModel):
    name: str = ""
    description: str = ""


class ProcedureForm(BaseModel):
    name: str = ""
    description: str = ""
    specialty_id: str = ""


class DoctorProcedureForm(BaseModel):
    procedure_id: str
    orcar: bool = False
    valor: float | None = None


class DoctorForm(BaseModel):
    name: str = ""
    avatar_url: str = ""
    specialty_id: str = ""
    procedures: list[DoctorProcedureForm] = Field(default_factory=list)


class PatientForm(BaseModel):
    name: str = ""
    phone: str = ""
    cpf: str | None = None
    address: str | None = None


class AgentForm(BaseModel):
    full_name: str = ""
    email: str = ""
    role: UserRole = UserRole.USER
    password: str = ""
    confirm_password: str = ""


class ClinicSaved(BaseModel):
    record: Clinic
    notice: str


class SpecialtySaved(BaseModel):
    record: Specialty
    notice: str


class ProcedureSaved(BaseModel):
    record: Procedure
    notice: str


class DoctorSaved(BaseModel):
    record: Doctor
    notice: str


class PatientSaved(BaseModel):
    record: Patient
    notice: str


class AgentSaved(BaseModel):
    record: Agent
    notice: str


# ── Appointments ─────────────────────────────────────────────────────


class AppointmentLineForm(BaseModel):
    procedure_id: str
    # Free text from the price input; anything non-numeric counts as 0
    valor_final: float | str | None = None


class AppointmentForm(BaseModel):
    patient_id: str | None = None
    doctor_id: str | None = None
    day: date | None = None
    start: time | None = None
    status: AppointmentStatus = AppointmentStatus.AGENDADO
    procedures: list[AppointmentLineForm] = Field(default_factory=list)


class AppointmentSaved(BaseModel):
    record: Appointment
    notice: str


class StatusChangeRequest(BaseModel):
    status: AppointmentStatus


class KanbanCardResponse(BaseModel):
    appointment: Appointment
    procedures: str = Field(..., description="First procedure name and how many more")


class KanbanColumnResponse(BaseModel):
    status: AppointmentStatus
    title: str
    count: int
    cards: list[KanbanCardResponse]


class CalendarEntryResponse(BaseModel):
    appointment: Appointment
    day_index: int = Field(..., ge=0, le=6)
    top: float = Field(..., description="Start, in hours from midnight")
    height: float = Field(..., description="Duration in hours")


class WeekCalendarResponse(BaseModel):
    start: date
    end: date
    days: list[date]
    slots: list[str]
    entries: list[CalendarEntryResponse]


# ── Finance ──────────────────────────────────────────────────────────


class TransactionForm(BaseModel):
    descricao: str = ""
    valor: float | None = None
    tipo: TransactionType = TransactionType.RECEITA
    data: datetime | None = None
    categoria: str = ""


class TotalsResponse(BaseModel):
    receitas: float
    despesas: float
    saldo: float


class MonthBucketResponse(BaseModel):
    label: str
    receitas: float
    despesas: float


class FinanceResponse(BaseModel):
    transactions: list[Transaction]
    totals: TotalsResponse
    monthly: list[MonthBucketResponse]


# ── Overview ─────────────────────────────────────────────────────────


class ChartPoint(BaseModel):
    label: str
    value: int


class OverviewResponse(BaseModel):
    appointments_today: int
    completed_today: int
    revenue_today: float
    total_patients: int
    week: list[ChartPoint]
    history: list[ChartPoint]
    quick_links: list[NavItemResponse]


# ── Assistant ────────────────────────────────────────────────────────


class PromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=4000)


class ChatConsoleResponse(BaseModel):
    url: str
