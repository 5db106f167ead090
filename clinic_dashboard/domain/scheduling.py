"""Appointment projections and the appointment form logic.

One filtered appointment collection is presented three ways:

* **kanban**: seven status columns in fixed order, cards by start time;
* **table**: a flat list, most recent first;
* **week calendar**: a Monday-based, seven-day grid with a 24-slot hour
  axis. Entries are placed by their literal hour offset.

:class:`AppointmentDraft` mirrors the create/edit form: it knows which
procedures the chosen doctor can still add, how each line is priced and
what a valid submission looks like.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from clinic_dashboard.domain.models import (
    Appointment,
    AppointmentProcedure,
    AppointmentStatus,
    Doctor,
    Procedure,
)
from clinic_dashboard.errors import FormValidationError

UNKNOWN_PROCEDURE = "Desconhecido"
DEFAULT_DURATION = timedelta(minutes=30)
HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7


# ── Procedure names ──────────────────────────────────────────────────


def procedure_names(
    appointment: Appointment,
    procedures: Iterable[Procedure],
    unknown: str = UNKNOWN_PROCEDURE,
) -> list[str]:
    by_id = {p.id: p.name for p in procedures}
    return [by_id.get(line.procedure_id, unknown) for line in appointment.procedures]


def procedure_summary(names: list[str], limit: int = 1) -> str:
    """Short label for a card: ``"Limpeza +1 outro(s)"``."""
    if not names:
        return "Nenhum procedimento"
    if len(names) > limit:
        return f"{', '.join(names[:limit])} +{len(names) - limit} outro(s)"
    return ", ".join(names)


# ── Search ───────────────────────────────────────────────────────────


def search_appointments(
    appointments: Iterable[Appointment],
    procedures: Iterable[Procedure],
    term: str,
) -> list[Appointment]:
    """Case-insensitive match on patient, doctor or procedure names."""
    appointments = list(appointments)
    term = (term or "").strip().lower()
    if not term:
        return appointments
    procedures = list(procedures)
    results = []
    for at in appointments:
        names = " ".join(procedure_names(at, procedures, unknown="")).lower()
        if (
            term in at.patient.name.lower()
            or term in at.doctor.name.lower()
            or term in names
        ):
            results.append(at)
    return results


# ── Kanban & table ───────────────────────────────────────────────────


@dataclass
class KanbanColumn:
    status: AppointmentStatus
    title: str
    cards: list[Appointment] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cards)


def kanban_columns(appointments: Iterable[Appointment]) -> list[KanbanColumn]:
    """Bucket appointments by status; every status gets a column."""
    columns = {s: KanbanColumn(status=s, title=s.title) for s in AppointmentStatus}
    for at in appointments:
        columns[at.status].cards.append(at)
    for column in columns.values():
        column.cards.sort(key=lambda at: at.start_time)
    return list(columns.values())


def table_rows(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(appointments, key=lambda at: at.start_time, reverse=True)


# ── Week calendar ────────────────────────────────────────────────────


def start_of_week(day: date) -> date:
    """Monday of the week containing *day*."""
    return day - timedelta(days=day.weekday())


def shift_week(day: date, steps: int) -> date:
    """Move *day* by *steps* whole weeks (negative goes back)."""
    return day + timedelta(days=DAYS_PER_WEEK * steps)


def time_slots() -> list[str]:
    return [f"{hour:02d}:00" for hour in range(HOURS_PER_DAY)]


def _fractional_hour(moment: datetime) -> float:
    return moment.hour + moment.minute / 60


@dataclass
class CalendarEntry:
    appointment: Appointment
    day_index: int
    top: float
    height: float


@dataclass
class WeekCalendar:
    start: date
    days: list[date]
    slots: list[str]
    entries: list[CalendarEntry]

    @property
    def end(self) -> date:
        return self.days[-1]


def week_calendar(appointments: Iterable[Appointment], reference: date) -> WeekCalendar:
    """Lay out the week containing *reference*.

    ``top`` and ``height`` are in hours from midnight, so a 09:30 to 10:00
    visit sits at 9.5 with a height of 0.5.
    """
    monday = start_of_week(reference)
    days = [monday + timedelta(days=i) for i in range(DAYS_PER_WEEK)]
    entries = []
    for at in appointments:
        start_day = at.start_time.date()
        if not days[0] <= start_day <= days[-1]:
            continue
        top = _fractional_hour(at.start_time)
        entries.append(
            CalendarEntry(
                appointment=at,
                day_index=(start_day - monday).days,
                top=top,
                height=_fractional_hour(at.end_time) - top,
            )
        )
    entries.sort(key=lambda e: (e.day_index, e.top))
    return WeekCalendar(start=monday, days=days, slots=time_slots(), entries=entries)


# ── Appointment form ─────────────────────────────────────────────────


@dataclass
class DraftLine:
    procedure_id: str
    name: str
    orcar: bool
    valor_fixo: float | None
    valor_final: float


def parse_price(raw: object) -> float:
    """Form price input: anything non-numeric counts as 0."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(value) else value


@dataclass
class AppointmentDraft:
    """State of the appointment form for one doctor."""

    doctor: Doctor | None
    procedures: list[Procedure]
    lines: list[DraftLine] = field(default_factory=list)

    @classmethod
    def from_appointment(
        cls, appointment: Appointment, doctor: Doctor | None, procedures: list[Procedure],
    ) -> AppointmentDraft:
        """Rebuild the form from a saved appointment, keeping its prices."""
        draft = cls(doctor=doctor, procedures=procedures)
        names = {p.id: p.name for p in procedures}
        for line in appointment.procedures:
            config = doctor.procedure_config(line.procedure_id) if doctor else None
            draft.lines.append(
                DraftLine(
                    procedure_id=line.procedure_id,
                    name=names.get(line.procedure_id, UNKNOWN_PROCEDURE),
                    orcar=config.orcar if config else False,
                    valor_fixo=config.valor if config else None,
                    valor_final=line.valor_final,
                )
            )
        return draft

    def available_procedures(self) -> list[Procedure]:
        """Procedures the doctor performs that are not on the form yet."""
        if self.doctor is None:
            return []
        taken = {line.procedure_id for line in self.lines}
        by_id = {p.id: p for p in self.procedures}
        return [
            by_id[dp.procedure_id]
            for dp in self.doctor.procedures
            if dp.procedure_id in by_id and dp.procedure_id not in taken
        ]

    def add_procedure(self, procedure_id: str, valor_final: object = None) -> DraftLine:
        """Add a line; its price defaults to the doctor's fixed price (0 when quoted)."""
        candidate = next(
            (p for p in self.available_procedures() if p.id == procedure_id), None,
        )
        if candidate is None:
            raise FormValidationError(
                "Procedimento não disponível para o doutor selecionado."
            )
        config = self.doctor.procedure_config(procedure_id)
        default = 0.0 if config.orcar else (config.valor or 0.0)
        line = DraftLine(
            procedure_id=procedure_id,
            name=candidate.name,
            orcar=config.orcar,
            valor_fixo=config.valor,
            valor_final=default if valor_final is None else parse_price(valor_final),
        )
        self.lines.append(line)
        return line

    def remove_procedure(self, procedure_id: str) -> None:
        self.lines = [line for line in self.lines if line.procedure_id != procedure_id]

    def set_price(self, procedure_id: str, raw: object) -> None:
        for line in self.lines:
            if line.procedure_id == procedure_id:
                line.valor_final = parse_price(raw)

    @property
    def total(self) -> float:
        return sum(line.valor_final for line in self.lines)

    def to_lines(self) -> list[AppointmentProcedure]:
        return [
            AppointmentProcedure(procedure_id=line.procedure_id, valor_final=line.valor_final)
            for line in self.lines
        ]


@dataclass
class AppointmentSubmission:
    patient_id: str
    doctor_id: str
    procedures: list[AppointmentProcedure]
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus

    @property
    def valor_final(self) -> float:
        return sum(p.valor_final for p in self.procedures)


def validate_submission(
    *,
    patient_id: str | None,
    doctor_id: str | None,
    day: date | None,
    start: time | None,
    draft: AppointmentDraft,
    status: AppointmentStatus = AppointmentStatus.AGENDADO,
) -> AppointmentSubmission:
    """Apply the form rules and build the submission (30-minute slot)."""
    if not patient_id or not doctor_id or day is None or start is None:
        raise FormValidationError(
            "Por favor, selecione um paciente da lista ou cadastre um novo."
        )
    if not draft.lines:
        raise FormValidationError("Adicione pelo menos um procedimento ao atendimento.")
    if any(line.valor_final < 0 for line in draft.lines):
        raise FormValidationError(
            "Todos os procedimentos devem ter um valor final válido e positivo."
        )
    start_time = datetime.combine(day, start)
    return AppointmentSubmission(
        patient_id=patient_id,
        doctor_id=doctor_id,
        procedures=draft.to_lines(),
        start_time=start_time,
        end_time=start_time + DEFAULT_DURATION,
        status=status,
    )
