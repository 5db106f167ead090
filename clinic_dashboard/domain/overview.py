"""Figures for the landing page of the dashboard."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from clinic_dashboard.domain.finance import MONTH_ABBREVIATIONS
from clinic_dashboard.domain.models import Appointment, AppointmentStatus
from clinic_dashboard.domain.navigation import NavItem, View
from clinic_dashboard.domain.scheduling import start_of_week

WEEKDAY_LABELS = ("Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom")
HISTORY_MONTHS = 6


@dataclass
class Overview:
    appointments_today: int
    completed_today: int
    revenue_today: float
    total_patients: int
    week: list[tuple[str, int]]
    history: list[tuple[str, int]]
    quick_links: list[NavItem]


def _week_counts(appointments: list[Appointment], today: date) -> list[tuple[str, int]]:
    monday = start_of_week(today)
    sunday = monday + timedelta(days=6)
    counts = [0] * 7
    for at in appointments:
        day = at.start_time.date()
        if monday <= day <= sunday:
            counts[day.weekday()] += 1
    return list(zip(WEEKDAY_LABELS, counts))


def _month_history(appointments: list[Appointment], today: date) -> list[tuple[str, int]]:
    history = []
    for back in range(HISTORY_MONTHS - 1, -1, -1):
        # Walk back whole months from the current one
        index = today.year * 12 + (today.month - 1) - back
        year, month = divmod(index, 12)
        count = sum(
            1 for at in appointments
            if at.start_time.year == year and at.start_time.month == month + 1
        )
        history.append((f"{MONTH_ABBREVIATIONS[month]}/{year % 100:02d}", count))
    return history


def build_overview(
    appointments: Iterable[Appointment],
    patient_count: int,
    nav_items: Iterable[NavItem],
    today: date,
) -> Overview:
    appointments = list(appointments)
    todays = [at for at in appointments if at.start_time.date() == today]
    completed = [at for at in todays if at.status == AppointmentStatus.ATENDIDO]
    return Overview(
        appointments_today=len(todays),
        completed_today=len(completed),
        revenue_today=sum(at.valor_final or 0 for at in completed),
        total_patients=patient_count,
        week=_week_counts(appointments, today),
        history=_month_history(appointments, today),
        quick_links=[item for item in nav_items if item.view != View.DASHBOARD],
    )
