"""Multi-tenant partitioning of the dashboard collections.

Every list the dashboard shows goes through :func:`slice_for_clinic`, which
keeps only the rows whose ``clinic_id`` equals the selected clinic. With no
clinic selected every slice is empty. Slices are recomputed on each read, so
they always reflect the current collections.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypeVar

from clinic_dashboard.domain.models import (
    Agent,
    Appointment,
    Doctor,
    Patient,
    Procedure,
    Specialty,
    Transaction,
)
from clinic_dashboard.errors import NotFoundError

T = TypeVar("T")


@dataclass
class Collections:
    """The full, unfiltered clinic-scoped collections."""

    specialties: list[Specialty] = field(default_factory=list)
    procedures: list[Procedure] = field(default_factory=list)
    doctors: list[Doctor] = field(default_factory=list)
    patients: list[Patient] = field(default_factory=list)
    appointments: list[Appointment] = field(default_factory=list)
    agents: list[Agent] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class ClinicSlice:
    """Per-entity views of one clinic's data."""

    clinic_id: str | None
    specialties: list[Specialty]
    procedures: list[Procedure]
    doctors: list[Doctor]
    patients: list[Patient]
    appointments: list[Appointment]
    agents: list[Agent]
    transactions: list[Transaction]


def filter_by_clinic(rows: Iterable[T], clinic_id: str | None) -> list[T]:
    """Return the rows of *rows* whose ``clinic_id`` equals *clinic_id*."""
    if not clinic_id:
        return []
    return [row for row in rows if row.clinic_id == clinic_id]


def slice_for_clinic(collections: Collections, clinic_id: str | None) -> ClinicSlice:
    """Partition *collections* down to the rows owned by *clinic_id*."""
    return ClinicSlice(
        clinic_id=clinic_id,
        specialties=filter_by_clinic(collections.specialties, clinic_id),
        procedures=filter_by_clinic(collections.procedures, clinic_id),
        doctors=filter_by_clinic(collections.doctors, clinic_id),
        patients=filter_by_clinic(collections.patients, clinic_id),
        appointments=filter_by_clinic(collections.appointments, clinic_id),
        agents=filter_by_clinic(collections.agents, clinic_id),
        transactions=filter_by_clinic(collections.transactions, clinic_id),
    )


def find_by_id(rows: Iterable[T], record_id: str, label: str = "Registro") -> T:
    """Return the row with *record_id* or raise :class:`NotFoundError`.

    Callers pass an already-filtered slice, so ids belonging to another clinic
    are reported as missing.
    """
    for row in rows:
        if row.id == record_id:
            return row
    raise NotFoundError(f"{label} não encontrado(a): {record_id}")
