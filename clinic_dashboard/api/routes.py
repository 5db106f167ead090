"""FastAPI routes for the dashboard shell, overview, finance and assistant."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from clinic_dashboard.api.deps import (
    assistant_service,
    auth_service,
    get_store,
    require_user,
    run_service,
)
from clinic_dashboard.api.schemas import (
    ChartPoint,
    ChatConsoleResponse,
    FinanceResponse,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    MonthBucketResponse,
    NavigateRequest,
    NavItemResponse,
    OverviewResponse,
    PromptRequest,
    RegisterRequest,
    SelectClinicRequest,
    ServiceUpdateRequest,
    SessionResponse,
    TotalsResponse,
    TransactionForm,
)
from clinic_dashboard.domain.models import ChatMessage, IntegrationService, Transaction, User
from clinic_dashboard.domain.navigation import NavItem, nav_items_for, needs_clinic_selection, title_for
from clinic_dashboard.domain.overview import build_overview
from clinic_dashboard.services.assistant import AssistantService, chat_console_url
from clinic_dashboard.services.auth import AuthService
from clinic_dashboard.services.finance import FinanceService
from clinic_dashboard.services.store import DashboardStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _nav(item: NavItem) -> NavItemResponse:
    return NavItemResponse(view=item.view, label=item.label, title=item.title)


def _session(store: DashboardStore) -> SessionResponse:
    with store.lock:
        user = store.user
        return SessionResponse(
            user=user,
            theme=store.theme,
            active_view=store.active_view,
            title=title_for(store.active_view),
            clinics=list(store.clinics),
            selected_clinic_id=store.selected_clinic_id,
            needs_clinic_selection=(
                user is not None and needs_clinic_selection(user.role, store.selected_clinic_id)
            ),
            menu=[_nav(item) for item in nav_items_for(user.role)] if user else [],
        )


# ── Health ───────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


# ── Session ──────────────────────────────────────────────────────────


@router.get("/session", response_model=SessionResponse)
async def get_session(store: DashboardStore = Depends(get_store)):
    return _session(store)


@router.post("/session/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    request: Request,
    store: DashboardStore = Depends(get_store),
    auth: AuthService = Depends(auth_service),
):
    """Exchange credentials for a session user via the auth webhook."""
    user = await run_service(request, auth.login, body.email, body.password)
    store.login(user)
    logger.info("User %s logged in as %s", user.email, user.role.value)
    return _session(store)


@router.post("/session/register", response_model=MessageResponse)
async def register(
    body: RegisterRequest,
    request: Request,
    auth: AuthService = Depends(auth_service),
):
    message = await run_service(
        request,
        auth.register,
        full_name=body.full_name,
        email=body.email,
        password=body.password,
        confirm_password=body.confirm_password,
        release_code=body.release_code,
        role=body.role,
    )
    return MessageResponse(message=message)


@router.post("/session/logout", response_model=SessionResponse)
async def logout(store: DashboardStore = Depends(get_store)):
    store.logout()
    return _session(store)


@router.post("/session/theme", response_model=SessionResponse)
async def toggle_theme(store: DashboardStore = Depends(get_store)):
    store.toggle_theme()
    return _session(store)


@router.post(
    "/session/clinic", response_model=SessionResponse, dependencies=[Depends(require_user)],
)
async def select_clinic(
    body: SelectClinicRequest, request: Request, store: DashboardStore = Depends(get_store),
):
    await run_service(request, store.select_clinic, body.clinic_id)
    return _session(store)


@router.post(
    "/session/view", response_model=SessionResponse, dependencies=[Depends(require_user)],
)
async def navigate(
    body: NavigateRequest, request: Request, store: DashboardStore = Depends(get_store),
):
    await run_service(request, store.navigate, body.view)
    return _session(store)


# ── Settings ─────────────────────────────────────────────────────────


@router.get(
    "/settings/services",
    response_model=list[IntegrationService],
    dependencies=[Depends(require_user)],
)
async def list_services(store: DashboardStore = Depends(get_store)):
    with store.lock:
        return list(store.services)


@router.put(
    "/settings/services/{name}",
    response_model=IntegrationService,
    dependencies=[Depends(require_user)],
)
async def update_service(
    name: str,
    body: ServiceUpdateRequest,
    request: Request,
    store: DashboardStore = Depends(get_store),
):
    """Connect/disconnect an integration or change its webhook URL."""
    return await run_service(
        request, store.update_service, name,
        connected=body.connected, webhook_url=body.webhook_url,
    )


# ── Overview ─────────────────────────────────────────────────────────


@router.get("/overview", response_model=OverviewResponse)
async def overview(store: DashboardStore = Depends(get_store), user: User = Depends(require_user)):
    current = store.current_slice()
    result = build_overview(
        current.appointments,
        len(current.patients),
        nav_items_for(user.role),
        store.clock(),
    )
    return OverviewResponse(
        appointments_today=result.appointments_today,
        completed_today=result.completed_today,
        revenue_today=result.revenue_today,
        total_patients=result.total_patients,
        week=[ChartPoint(label=label, value=value) for label, value in result.week],
        history=[ChartPoint(label=label, value=value) for label, value in result.history],
        quick_links=[_nav(item) for item in result.quick_links],
    )


# ── Finance ──────────────────────────────────────────────────────────


@router.get(
    "/finance", response_model=FinanceResponse, dependencies=[Depends(require_user)],
)
async def finance_summary(store: DashboardStore = Depends(get_store)):
    summary = FinanceService(store).summary()
    return FinanceResponse(
        transactions=summary.transactions,
        totals=TotalsResponse(
            receitas=summary.totals.receitas,
            despesas=summary.totals.despesas,
            saldo=summary.totals.saldo,
        ),
        monthly=[
            MonthBucketResponse(label=b.label, receitas=b.receitas, despesas=b.despesas)
            for b in summary.monthly
        ],
    )


@router.post(
    "/finance/transactions",
    response_model=Transaction,
    status_code=201,
    dependencies=[Depends(require_user)],
)
async def create_transaction(
    body: TransactionForm, request: Request, store: DashboardStore = Depends(get_store),
):
    return await run_service(request, FinanceService(store).save_transaction, **body.model_dump())


@router.put(
    "/finance/transactions/{transaction_id}",
    response_model=Transaction,
    dependencies=[Depends(require_user)],
)
async def update_transaction(
    transaction_id: str,
    body: TransactionForm,
    request: Request,
    store: DashboardStore = Depends(get_store),
):
    return await run_service(
        request, FinanceService(store).save_transaction, id=transaction_id, **body.model_dump(),
    )


# ── Assistant ────────────────────────────────────────────────────────


@router.get(
    "/assistant/messages",
    response_model=list[ChatMessage],
    dependencies=[Depends(require_user)],
)
async def assistant_messages(assistant: AssistantService = Depends(assistant_service)):
    return assistant.messages()


@router.post(
    "/assistant/messages",
    response_model=ChatMessage,
    dependencies=[Depends(require_user)],
)
async def ask_assistant(
    body: PromptRequest,
    request: Request,
    assistant: AssistantService = Depends(assistant_service),
):
    """Send a prompt to the AI; failures come back as an assistant reply."""
    return await run_service(request, assistant.ask, body.prompt)


@router.get(
    "/assistant/console",
    response_model=ChatConsoleResponse,
    dependencies=[Depends(require_user)],
)
async def chat_console(request: Request):
    return ChatConsoleResponse(url=await run_service(request, chat_console_url))
