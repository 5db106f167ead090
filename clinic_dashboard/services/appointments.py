"""Appointment reads, saves and status changes for the selected clinic."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time
from typing import Any

from clinic_dashboard.domain.models import Appointment, AppointmentStatus, Procedure
from clinic_dashboard.domain.scheduling import (
    AppointmentDraft,
    DraftLine,
    KanbanColumn,
    WeekCalendar,
    kanban_columns,
    parse_price,
    procedure_names,
    procedure_summary,
    search_appointments,
    table_rows,
    validate_submission,
    week_calendar,
)
from clinic_dashboard.domain.tenancy import find_by_id
from clinic_dashboard.errors import FormValidationError
from clinic_dashboard.services.catalog import SaveResult, WebhookWriter
from clinic_dashboard.services.webhook_client import WebhookError

logger = logging.getLogger(__name__)

STATUS_ROLLBACK_MESSAGE = "Ocorreu um erro ao atualizar o status. Revertendo alteração."


@dataclass
class LineInput:
    procedure_id: str
    valor_final: Any = None


class AppointmentService(WebhookWriter):
    # ── Views ────────────────────────────────────────────────────────

    def search(self, term: str = "") -> list[Appointment]:
        current = self._store.current_slice()
        return search_appointments(current.appointments, current.procedures, term)

    def kanban(self, term: str = "") -> list[KanbanColumn]:
        return kanban_columns(self.search(term))

    def card_label(self, appointment: Appointment) -> str:
        """Procedure line shown on a kanban card."""
        names = procedure_names(appointment, self._store.current_slice().procedures)
        return procedure_summary(names)

    def table(self, term: str = "") -> list[Appointment]:
        return table_rows(self.search(term))

    def calendar(self, reference: date | None = None, term: str = "") -> WeekCalendar:
        return week_calendar(self.search(term), reference or self._clock())

    def procedure_options(
        self, doctor_id: str, selected: Iterable[str] = (),
    ) -> list[Procedure]:
        """Procedures *doctor_id* offers that are not already on the form."""
        draft = self._draft(doctor_id)
        for procedure_id in selected:
            draft.add_procedure(procedure_id)
        return draft.available_procedures()

    # ── Writes ───────────────────────────────────────────────────────

    def save_appointment(
        self,
        *,
        patient_id: str | None,
        doctor_id: str | None,
        day: date | None,
        start: time | None,
        lines: Iterable[LineInput],
        status: AppointmentStatus = AppointmentStatus.AGENDADO,
        id: str | None = None,
    ) -> SaveResult[Appointment]:
        clinic_id = self._require_clinic()
        updating = bool(id)
        existing = (
            find_by_id(self._store.current_slice().appointments, id, "Atendimento")
            if updating else None
        )
        draft = self._draft(doctor_id) if doctor_id else AppointmentDraft(None, [])
        if draft.doctor is not None:
            _fill_lines(draft, lines, existing)
        submission = validate_submission(
            patient_id=patient_id,
            doctor_id=doctor_id,
            day=day,
            start=start,
            draft=draft,
            status=status,
        )

        current = self._store.current_slice()
        patient = next((p for p in current.patients if p.id == submission.patient_id), None)
        if patient is None:
            raise FormValidationError("Paciente selecionado é inválido.")

        appointment = Appointment(
            id=id if updating else self._store.new_id("at-"),
            patient=patient,
            doctor=draft.doctor,
            procedures=submission.procedures,
            start_time=submission.start_time,
            end_time=submission.end_time,
            status=submission.status,
            clinic_id=clinic_id,
        )

        payload: dict[str, Any] = {
            "tag": "atualizar_atendimento" if updating else "novo_atendimento",
        }
        if updating:
            payload["id"] = id
        payload.update(
            patientId=patient.id,
            doctorId=draft.doctor.id,
            procedures=[
                {"procedimentoId": p.procedure_id, "valorFinal": p.valor_final}
                for p in appointment.procedures
            ],
            startTime=appointment.start_time.isoformat(),
            endTime=appointment.end_time.isoformat(),
            status=appointment.status.value,
            valorFinal=appointment.valor_final,
            clinicaId=clinic_id,
        )
        notice = self._notify(
            payload,
            saved=f"Atendimento {'atualizado' if updating else 'criado'} com sucesso!",
            failed="Ocorreu um erro ao salvar o atendimento. A alteração pode não ter sido salva.",
        )

        if updating:
            self._store.replace("appointments", appointment)
        else:
            self._store.prepend("appointments", appointment)
        logger.info("Appointment %s %s", appointment.id, "updated" if updating else "created")
        return SaveResult(appointment, notice)

    def change_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Move a card to another column.

        The change is shown immediately and the webhook is told afterwards.
        If that call fails only this card goes back to its previous status,
        and only while it still shows the new one; other appointments saved
        meanwhile are kept. :class:`WebhookError` is raised either way.
        """
        status = AppointmentStatus(status)
        current = find_by_id(
            self._store.current_slice().appointments, appointment_id, "Atendimento",
        )
        if current.status == status:
            return current

        previous = current.status
        updated = self._store.set_appointment_status(appointment_id, status)
        url = self._store.webhook_url()
        if url is None:
            logger.info("Webhook not connected; status of %s changed locally", appointment_id)
            return updated
        try:
            self.client.post(url, {
                "tag": "atualizar_status_atendimento",
                "atendimento_id": appointment_id,
                "novo_status": status.value,
            })
        except WebhookError as exc:
            logger.error("Status change of %s failed, rolling back: %s", appointment_id, exc)
            self._store.revert_status(appointment_id, expected=status, previous=previous)
            raise WebhookError(STATUS_ROLLBACK_MESSAGE, status_code=exc.status_code) from exc
        return updated

    # ── Internal ─────────────────────────────────────────────────────

    def _draft(self, doctor_id: str) -> AppointmentDraft:
        current = self._store.current_slice()
        doctor = next((d for d in current.doctors if d.id == doctor_id), None)
        if doctor is None:
            raise FormValidationError("Doutor inválido.")
        return AppointmentDraft(doctor=doctor, procedures=list(current.procedures))


def _fill_lines(
    draft: AppointmentDraft, lines: Iterable[LineInput], existing: Appointment | None,
) -> None:
    """Put the submitted lines on *draft*.

    When editing with the same doctor, lines already saved on the appointment
    are kept even if the doctor no longer offers that procedure; only new
    lines must be on the doctor's current list.
    """
    saved: dict[str, DraftLine] = {}
    if existing is not None and existing.doctor.id == draft.doctor.id:
        restored = AppointmentDraft.from_appointment(existing, draft.doctor, draft.procedures)
        saved = {line.procedure_id: line for line in restored.lines}
    for line in lines:
        kept = saved.pop(line.procedure_id, None)
        if kept is None:
            draft.add_procedure(line.procedure_id, line.valor_final)
            continue
        if line.valor_final is not None:
            kept.valor_final = parse_price(line.valor_final)
        draft.lines.append(kept)
