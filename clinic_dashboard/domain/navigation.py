"""Sections of the dashboard and the role-filtered menu."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from clinic_dashboard.domain.models import UserRole

_ALL = (UserRole.USER, UserRole.ADMIN, UserRole.SUPERADMIN)
_ADMINS = (UserRole.ADMIN, UserRole.SUPERADMIN)
_SUPER = (UserRole.SUPERADMIN,)


class View(str, Enum):
    DASHBOARD = "DASHBOARD"
    ATENDIMENTOS = "ATENDIMENTOS"
    PACIENTES = "PACIENTES"
    DOUTORES = "DOUTORES"
    PROCEDIMENTOS = "PROCEDIMENTOS"
    ESPECIALIDADES = "ESPECIALIDADES"
    FINANCEIRO = "FINANCEIRO"
    AGENTES = "AGENTES"
    CLINICA = "CLINICA"
    SETTINGS = "SETTINGS"
    AIIA_CHAT = "AIIA_CHAT"
    AIIA_IA = "AIIA_IA"


@dataclass(frozen=True)
class NavItem:
    view: View
    label: str
    title: str
    roles: tuple[UserRole, ...]


# Menu order as shown in the sidebar
NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem(View.DASHBOARD, "Início", "Início", _ALL),
    NavItem(View.ATENDIMENTOS, "Atendimentos", "Kanban de Atendimentos", _ALL),
    NavItem(View.PACIENTES, "Pacientes", "Lista de Pacientes", _ALL),
    NavItem(View.AIIA_CHAT, "AIIA Chat", "AIIA - Central de Atendimento", _ALL),
    NavItem(View.AIIA_IA, "AIIA IA", "AIIA - Inteligência Artificial", _ALL),
    NavItem(View.FINANCEIRO, "Financeiro", "Gestão Financeira", _ADMINS),
    NavItem(View.DOUTORES, "Doutores", "Gestão de Doutores", _ADMINS),
    NavItem(View.PROCEDIMENTOS, "Procedimentos", "Gestão de Procedimentos", _ADMINS),
    NavItem(View.ESPECIALIDADES, "Especialidades", "Gestão de Especialidades", _ADMINS),
    NavItem(View.AGENTES, "Agentes", "Gestão de Agentes", _ADMINS),
    NavItem(View.CLINICA, "Clínicas", "Gestão de Clínicas", _SUPER),
    NavItem(View.SETTINGS, "Configurações", "Configurações e Integrações", _SUPER),
)


def nav_items_for(role: UserRole) -> list[NavItem]:
    """Menu entries visible to *role*, in sidebar order."""
    return [item for item in NAV_ITEMS if role in item.roles]


def can_open(role: UserRole, view: View) -> bool:
    return any(item.view == view for item in nav_items_for(role))


def title_for(view: View) -> str:
    return next(item.title for item in NAV_ITEMS if item.view == view)


def needs_clinic_selection(role: UserRole, selected_clinic_id: str | None) -> bool:
    """True when the shell must ask the user to pick a clinic first."""
    return not selected_clinic_id and role != UserRole.SUPERADMIN
