"""Financial ledger derived from appointments and manual entries.

Revenue from completed appointments is never stored: each ``atendido``
appointment with a positive total becomes a synthetic ``receita`` row on
every read. Manual rows are stored as-is.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from clinic_dashboard.domain.models import (
    Appointment,
    AppointmentStatus,
    Procedure,
    Transaction,
    TransactionType,
)
from clinic_dashboard.domain.scheduling import procedure_names
from clinic_dashboard.errors import FormValidationError

APPOINTMENT_CATEGORY = "Atendimento Odontológico"
MONTH_ABBREVIATIONS = (
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
)
CHART_MONTHS = 6


def revenue_from_appointments(
    appointments: Iterable[Appointment],
    procedures: Iterable[Procedure],
) -> list[Transaction]:
    procedures = list(procedures)
    rows = []
    for at in appointments:
        if at.status != AppointmentStatus.ATENDIDO or not at.valor_final > 0:
            continue
        names = ", ".join(procedure_names(at, procedures))
        rows.append(
            Transaction(
                id=f"at-{at.id}",
                descricao=f"Atendimento: {names} - {at.patient.name}",
                valor=at.valor_final,
                tipo=TransactionType.RECEITA,
                data=at.end_time,
                categoria=APPOINTMENT_CATEGORY,
                appointment_id=at.id,
                clinic_id=at.clinic_id,
            )
        )
    return rows


def ledger(
    appointments: Iterable[Appointment],
    manual: Iterable[Transaction],
    procedures: Iterable[Procedure],
) -> list[Transaction]:
    """All transactions, newest first."""
    rows = revenue_from_appointments(appointments, procedures) + list(manual)
    return sorted(rows, key=lambda t: t.data, reverse=True)


@dataclass
class Totals:
    receitas: float = 0.0
    despesas: float = 0.0

    @property
    def saldo(self) -> float:
        return self.receitas - self.despesas


def totals(transactions: Iterable[Transaction]) -> Totals:
    result = Totals()
    for t in transactions:
        if t.tipo == TransactionType.RECEITA:
            result.receitas += t.valor
        else:
            result.despesas += t.valor
    return result


@dataclass
class MonthBucket:
    year: int
    month: int
    receitas: float = 0.0
    despesas: float = 0.0

    @property
    def label(self) -> str:
        return f"{MONTH_ABBREVIATIONS[self.month - 1]}/{self.year % 100:02d}"


def monthly_series(
    transactions: Iterable[Transaction], months: int = CHART_MONTHS,
) -> list[MonthBucket]:
    """Income/expense per (year, month), oldest first, last *months* buckets."""
    buckets: dict[tuple[int, int], MonthBucket] = {}
    for t in transactions:
        key = (t.data.year, t.data.month)
        bucket = buckets.setdefault(key, MonthBucket(year=key[0], month=key[1]))
        if t.tipo == TransactionType.RECEITA:
            bucket.receitas += t.valor
        else:
            bucket.despesas += t.valor
    ordered = [buckets[key] for key in sorted(buckets)]
    return ordered[-months:] if months > 0 else []


def validate_manual_transaction(
    *,
    descricao: str | None,
    valor: float | None,
    data: datetime | None,
    categoria: str | None,
) -> None:
    if (
        not descricao
        or valor is None
        or not valor > 0
        or data is None
        or not categoria
    ):
        raise FormValidationError(
            "Todos os campos são obrigatórios e o valor deve ser positivo."
        )
