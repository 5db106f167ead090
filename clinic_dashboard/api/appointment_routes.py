"""Appointment endpoints: the three board views, the form and status moves."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from clinic_dashboard.api.deps import appointment_service, require_user, run_service
from clinic_dashboard.api.schemas import (
    AppointmentForm,
    AppointmentSaved,
    CalendarEntryResponse,
    KanbanCardResponse,
    KanbanColumnResponse,
    StatusChangeRequest,
    WeekCalendarResponse,
)
from clinic_dashboard.domain.models import Appointment, Procedure
from clinic_dashboard.domain.scheduling import shift_week
from clinic_dashboard.services.appointments import AppointmentService, LineInput

router = APIRouter(prefix="/appointments", dependencies=[Depends(require_user)])


def _save_kwargs(body: AppointmentForm) -> dict:
    return {
        "patient_id": body.patient_id,
        "doctor_id": body.doctor_id,
        "day": body.day,
        "start": body.start,
        "status": body.status,
        "lines": [LineInput(p.procedure_id, p.valor_final) for p in body.procedures],
    }


@router.get("", response_model=list[Appointment])
async def list_appointments(
    search: str = "", appointments: AppointmentService = Depends(appointment_service),
):
    return appointments.search(search)


@router.get("/kanban", response_model=list[KanbanColumnResponse])
async def kanban(
    search: str = "", appointments: AppointmentService = Depends(appointment_service),
):
    return [
        KanbanColumnResponse(
            status=column.status,
            title=column.title,
            count=column.count,
            cards=[
                KanbanCardResponse(appointment=at, procedures=appointments.card_label(at))
                for at in column.cards
            ],
        )
        for column in appointments.kanban(search)
    ]


@router.get("/table", response_model=list[Appointment])
async def table(
    search: str = "", appointments: AppointmentService = Depends(appointment_service),
):
    return appointments.table(search)


@router.get("/calendar", response_model=WeekCalendarResponse)
async def calendar(
    search: str = "",
    reference: date | None = None,
    offset: int = Query(0, description="Whole weeks to move from the reference day"),
    appointments: AppointmentService = Depends(appointment_service),
):
    """Week view; ``reference`` defaults to today, ``offset`` pages by week."""
    if reference is not None or offset:
        reference = shift_week(reference or appointments.today(), offset)
    week = appointments.calendar(reference, search)
    return WeekCalendarResponse(
        start=week.start,
        end=week.end,
        days=week.days,
        slots=week.slots,
        entries=[
            CalendarEntryResponse(
                appointment=e.appointment, day_index=e.day_index, top=e.top, height=e.height,
            )
            for e in week.entries
        ],
    )


@router.get("/procedure-options", response_model=list[Procedure])
async def procedure_options(
    request: Request,
    doctor_id: str,
    selected: list[str] = Query([]),
    appointments: AppointmentService = Depends(appointment_service),
):
    """Procedures the doctor offers that are not on the form yet."""
    return await run_service(request, appointments.procedure_options, doctor_id, selected)


@router.post("", response_model=AppointmentSaved, status_code=201)
async def create_appointment(
    body: AppointmentForm,
    request: Request,
    appointments: AppointmentService = Depends(appointment_service),
):
    result = await run_service(request, appointments.save_appointment, **_save_kwargs(body))
    return AppointmentSaved(record=result.record, notice=result.notice)


@router.put("/{appointment_id}", response_model=AppointmentSaved)
async def update_appointment(
    appointment_id: str,
    body: AppointmentForm,
    request: Request,
    appointments: AppointmentService = Depends(appointment_service),
):
    result = await run_service(
        request, appointments.save_appointment, id=appointment_id, **_save_kwargs(body),
    )
    return AppointmentSaved(record=result.record, notice=result.notice)


@router.patch("/{appointment_id}/status", response_model=Appointment)
async def change_status(
    appointment_id: str,
    body: StatusChangeRequest,
    request: Request,
    appointments: AppointmentService = Depends(appointment_service),
):
    """Drag a card to another column; rolled back if the webhook fails."""
    return await run_service(request, appointments.change_status, appointment_id, body.status)
