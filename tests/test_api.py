"""Tests for the FastAPI endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from clinic_dashboard.api.deps import auth_service
from clinic_dashboard.domain.models import User, UserRole
from clinic_dashboard.server import app
from clinic_dashboard.services.auth import AuthService
from clinic_dashboard.services.webhook_client import WebhookError


@pytest.fixture
def client(connected_store, webhook):
    """Test client whose app state holds the seeded store and a mock webhook."""
    with TestClient(app) as test_client:
        # Replace what the lifespan created
        app.state.store = connected_store
        app.state.webhook_client = webhook
        yield test_client
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "clinic-dashboard"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/api/health").headers["X-Request-ID"]

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/health"


class TestSession:
    def test_session_lists_menu_and_clinics(self, client):
        data = client.get("/api/session").json()
        assert data["user"]["role"] == "superadmin"
        assert data["selected_clinic_id"] == "cli1"
        assert len(data["clinics"]) == 2
        assert len(data["menu"]) == 12
        assert data["title"] == "Início"

    def test_logout_then_protected_endpoint(self, client):
        client.post("/api/session/logout")
        assert client.get("/api/patients").status_code == 401
        assert client.get("/api/session").json()["menu"] == []

    def test_select_clinic(self, client):
        data = client.post("/api/session/clinic", json={"clinic_id": "cli2"}).json()
        assert data["selected_clinic_id"] == "cli2"
        patients = client.get("/api/patients").json()
        assert [p["id"] for p in patients] == ["pat3"]

    def test_select_unknown_clinic(self, client):
        assert client.post("/api/session/clinic", json={"clinic_id": "x"}).status_code == 404

    def test_navigate_outside_menu(self, client, connected_store):
        connected_store.login(User(email="sec@odonto.com", role=UserRole.USER))
        response = client.post("/api/session/view", json={"view": "FINANCEIRO"})
        assert response.status_code == 403

    def test_navigate(self, client):
        data = client.post("/api/session/view", json={"view": "ATENDIMENTOS"}).json()
        assert data["active_view"] == "ATENDIMENTOS"
        assert data["title"] == "Kanban de Atendimentos"

    def test_toggle_theme(self, client):
        assert client.post("/api/session/theme").json()["theme"] == "dark"

    def test_login(self, client, webhook):
        auth = MagicMock(spec=AuthService)
        auth.login.return_value = User(email="admin@odonto.com", role=UserRole.ADMIN)
        app.dependency_overrides[auth_service] = lambda: auth
        response = client.post(
            "/api/session/login", json={"email": "admin@odonto.com", "password": "segredo123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"
        assert len(response.json()["menu"]) == 10

    def test_login_refused(self, client, webhook):
        webhook.post.return_value = {"status": "nope"}
        app.dependency_overrides[auth_service] = lambda: AuthService(webhook, url="https://a")
        response = client.post("/api/session/login", json={"email": "a@b.com", "password": "x"})
        assert response.status_code == 401
        assert "Credenciais inválidas" in response.json()["detail"]

    def test_login_without_auth_url(self, client, webhook):
        app.dependency_overrides[auth_service] = lambda: AuthService(webhook, url="")
        response = client.post("/api/session/login", json={"email": "a@b.com", "password": "x"})
        assert response.status_code == 503

    def test_register_validation(self, client, webhook):
        app.dependency_overrides[auth_service] = lambda: AuthService(webhook, url="https://a")
        response = client.post("/api/session/register", json={
            "full_name": "X", "email": "x@y.com", "password": "curta",
            "confirm_password": "curta", "release_code": "L1",
        })
        assert response.status_code == 422
        assert "mínimo 8" in response.json()["detail"]


class TestSettings:
    def test_disconnect_service(self, client, connected_store):
        response = client.put("/api/settings/services/n8n", json={"connected": False})
        assert response.status_code == 200
        assert response.json()["connected"] is False
        assert connected_store.webhook_url() is None

    def test_unknown_service(self, client):
        assert client.put("/api/settings/services/zapier", json={}).status_code == 404


class TestCatalogEndpoints:
    def test_create_patient(self, client, webhook):
        response = client.post("/api/patients", json={"name": "Ana", "phone": "(11) 9"})
        assert response.status_code == 201
        body = response.json()
        assert body["notice"] == "Paciente criado com sucesso!"
        assert body["record"]["clinic_id"] == "cli1"
        assert webhook.post.call_args[0][1]["tag"] == "paciente"

    def test_validation_error_maps_to_422(self, client):
        response = client.post("/api/patients", json={"name": "Ana"})
        assert response.status_code == 422
        assert response.json()["detail"] == "Nome e telefone são obrigatórios."

    def test_webhook_failure_maps_to_502(self, client, webhook):
        webhook.post.side_effect = WebhookError("down", status_code=500)
        response = client.post("/api/specialties", json={"name": "X", "description": "Y"})
        assert response.status_code == 502
        assert "erro ao salvar a especialidade" in response.json()["detail"]

    def test_update_doctor(self, client, webhook):
        response = client.put("/api/doctors/doc1", json={
            "name": "Dra. Ana Silva",
            "specialty_id": "esp1",
            "procedures": [
                {"procedure_id": "proc3", "valor": 170},
                {"procedure_id": "proc4", "orcar": True},
            ],
        })
        assert response.status_code == 200
        assert response.json()["record"]["procedures"][0]["valor"] == 170
        assert webhook.post.call_args[0][1]["tag"] == "atualizar_doutor"

    def test_lists_are_scoped(self, client):
        assert [d["id"] for d in client.get("/api/doctors").json()] == ["doc1", "doc2"]
        assert [a["id"] for a in client.get("/api/agents").json()] == ["age1", "age2"]
        assert len(client.get("/api/clinics").json()) == 2

    def test_unexpected_error_is_generic_500(self, client, webhook):
        webhook.post.side_effect = RuntimeError("secret stack detail")
        response = client.post("/api/specialties", json={"name": "X", "description": "Y"})
        assert response.status_code == 500
        assert "secret" not in response.json()["detail"]


class TestAppointmentEndpoints:
    def test_kanban(self, client):
        columns = client.get("/api/appointments/kanban").json()
        assert [c["title"] for c in columns][:2] == ["Agendado", "Confirmado"]
        assert sum(c["count"] for c in columns) == 4
        atendido = next(c for c in columns if c["status"] == "atendido")
        assert atendido["cards"][0]["appointment"]["id"] == "at5"
        assert atendido["cards"][0]["procedures"] == "Limpeza e Profilaxia +1 outro(s)"

    def test_table_search(self, client):
        rows = client.get("/api/appointments/table", params={"search": "maria"}).json()
        assert [r["id"] for r in rows] == ["at2", "at4"]

    def test_calendar_paging(self, client):
        week = client.get(
            "/api/appointments/calendar", params={"reference": "2024-06-19", "offset": -1},
        ).json()
        assert week["start"] == "2024-06-10"
        assert [e["appointment"]["id"] for e in week["entries"]] == ["at4"]

    def test_procedure_options(self, client):
        response = client.get(
            "/api/appointments/procedure-options",
            params={"doctor_id": "doc1", "selected": ["proc3"]},
        )
        assert [p["id"] for p in response.json()] == ["proc4"]

    def test_create(self, client):
        response = client.post("/api/appointments", json={
            "patient_id": "pat2", "doctor_id": "doc2",
            "day": "2024-06-21", "start": "08:30",
            "procedures": [{"procedure_id": "proc1"}],
        })
        assert response.status_code == 201
        record = response.json()["record"]
        assert record["valor_final"] == 200
        assert record["end_time"] == "2024-06-21T09:00:00"

    def test_status_change_rollback(self, client, connected_store, webhook):
        webhook.post.side_effect = WebhookError("down")
        response = client.patch("/api/appointments/at1/status", json={"status": "faltou"})
        assert response.status_code == 502
        assert response.json()["detail"] == (
            "Ocorreu um erro ao atualizar o status. Revertendo alteração."
        )
        at1 = next(a for a in connected_store.collections.appointments if a.id == "at1")
        assert at1.status.value == "confirmado"

    def test_invalid_status(self, client):
        response = client.patch("/api/appointments/at1/status", json={"status": "cancelado"})
        assert response.status_code == 422


class TestOverviewAndFinance:
    def test_overview(self, client):
        data = client.get("/api/overview").json()
        assert data["appointments_today"] == 3
        assert data["revenue_today"] == 700
        assert data["week"][2] == {"label": "Qua", "value": 3}

    def test_finance_summary(self, client):
        data = client.get("/api/finance").json()
        assert data["totals"] == {"receitas": 700, "despesas": 11350, "saldo": -10650}
        assert data["monthly"] == [{"label": "Jun/24", "receitas": 700, "despesas": 11350}]

    def test_manual_transaction(self, client, webhook):
        response = client.post("/api/finance/transactions", json={
            "descricao": "Conta de luz", "valor": 320, "tipo": "despesa",
            "data": "2024-06-10T00:00:00", "categoria": "Custos Fixos",
        })
        assert response.status_code == 201
        assert response.json()["id"].startswith("manual-")
        webhook.post.assert_not_called()

    def test_manual_transaction_validation(self, client):
        response = client.post("/api/finance/transactions", json={"descricao": "x"})
        assert response.status_code == 422


class TestAssistantEndpoints:
    def test_prompt_round_trip(self, client, webhook):
        webhook.post.return_value = {"output": "Tudo certo!"}
        response = client.post("/api/assistant/messages", json={"prompt": "Oi"})
        assert response.json() == {"role": "ai", "content": "Tudo certo!"}
        history = client.get("/api/assistant/messages").json()
        assert [m["role"] for m in history] == ["ai", "user", "ai"]

    def test_empty_prompt(self, client):
        assert client.post("/api/assistant/messages", json={"prompt": ""}).status_code == 422


class TestLifespan:
    def test_shutdown_closes_webhook_client(self, webhook):
        with TestClient(app):
            app.state.webhook_client = webhook
        webhook.close.assert_called_once()
