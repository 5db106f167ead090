"""Tests for the landing-page figures and the role-filtered menu."""

from __future__ import annotations

from datetime import date

import pytest

from clinic_dashboard.domain.models import UserRole
from clinic_dashboard.domain.navigation import (
    NAV_ITEMS,
    View,
    can_open,
    nav_items_for,
    needs_clinic_selection,
    title_for,
)
from clinic_dashboard.domain.overview import build_overview
from clinic_dashboard.domain.tenancy import slice_for_clinic
from clinic_dashboard.seed import seed_collections


class TestNavigation:
    def test_user_sees_the_shared_sections(self):
        views = [item.view for item in nav_items_for(UserRole.USER)]
        assert views == [
            View.DASHBOARD, View.ATENDIMENTOS, View.PACIENTES, View.AIIA_CHAT, View.AIIA_IA,
        ]

    def test_admin_adds_management_sections(self):
        views = {item.view for item in nav_items_for(UserRole.ADMIN)}
        assert {View.FINANCEIRO, View.DOUTORES, View.AGENTES} <= views
        assert View.CLINICA not in views
        assert View.SETTINGS not in views

    def test_superadmin_sees_everything(self):
        assert nav_items_for(UserRole.SUPERADMIN) == list(NAV_ITEMS)

    def test_can_open(self):
        assert can_open(UserRole.ADMIN, View.FINANCEIRO)
        assert not can_open(UserRole.USER, View.FINANCEIRO)

    def test_titles(self):
        assert title_for(View.ATENDIMENTOS) == "Kanban de Atendimentos"
        assert title_for(View.SETTINGS) == "Configurações e Integrações"

    @pytest.mark.parametrize("role, selected, expected", [
        (UserRole.USER, None, True),
        (UserRole.ADMIN, None, True),
        (UserRole.SUPERADMIN, None, False),
        (UserRole.USER, "cli1", False),
    ])
    def test_needs_clinic_selection(self, role, selected, expected):
        assert needs_clinic_selection(role, selected) is expected


class TestBuildOverview:
    @pytest.fixture
    def overview(self, today):
        cli1 = slice_for_clinic(seed_collections(today), "cli1")
        return build_overview(
            cli1.appointments, len(cli1.patients), nav_items_for(UserRole.SUPERADMIN), today,
        )

    def test_today_figures(self, overview):
        assert overview.appointments_today == 3
        assert overview.completed_today == 1
        assert overview.revenue_today == 700.0
        assert overview.total_patients == 2

    def test_week_counts_by_weekday(self, overview):
        assert overview.week == [
            ("Seg", 0), ("Ter", 0), ("Qua", 3), ("Qui", 0),
            ("Sex", 0), ("Sáb", 0), ("Dom", 0),
        ]

    def test_history_covers_six_months(self, overview):
        assert [label for label, _ in overview.history] == [
            "Jan/24", "Fev/24", "Mar/24", "Abr/24", "Mai/24", "Jun/24",
        ]
        assert overview.history[-1] == ("Jun/24", 4)

    def test_quick_links_skip_the_overview_itself(self, overview):
        views = [item.view for item in overview.quick_links]
        assert View.DASHBOARD not in views
        assert len(views) == len(NAV_ITEMS) - 1

    def test_history_crosses_year_boundary(self):
        result = build_overview([], 0, [], date(2024, 2, 10))
        assert [label for label, _ in result.history] == [
            "Set/23", "Out/23", "Nov/23", "Dez/23", "Jan/24", "Fev/24",
        ]
