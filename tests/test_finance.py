"""Tests for the financial ledger and the finance service."""

from __future__ import annotations

from datetime import datetime

import pytest

from clinic_dashboard.domain.finance import (
    APPOINTMENT_CATEGORY,
    ledger,
    monthly_series,
    revenue_from_appointments,
    totals,
    validate_manual_transaction,
)
from clinic_dashboard.domain.models import AppointmentStatus, Transaction, TransactionType
from clinic_dashboard.domain.tenancy import slice_for_clinic
from clinic_dashboard.errors import FormValidationError, NotFoundError
from clinic_dashboard.seed import seed_collections
from clinic_dashboard.services.finance import FinanceService


@pytest.fixture
def cli1(today):
    return slice_for_clinic(seed_collections(today), "cli1")


def _tx(tid: str, valor: float, tipo: TransactionType, when: datetime) -> Transaction:
    return Transaction(
        id=tid, descricao=tid, valor=valor, tipo=tipo, data=when,
        categoria="Outros", clinic_id="cli1",
    )


class TestRevenueFromAppointments:
    def test_only_completed_appointments_generate_revenue(self, cli1):
        rows = revenue_from_appointments(cli1.appointments, cli1.procedures)
        assert [r.id for r in rows] == ["at-at5"]

    def test_revenue_row_fields(self, cli1):
        row = revenue_from_appointments(cli1.appointments, cli1.procedures)[0]
        assert row.valor == 700.0
        assert row.tipo == TransactionType.RECEITA
        assert row.categoria == APPOINTMENT_CATEGORY
        assert row.descricao == (
            "Atendimento: Limpeza e Profilaxia, Clareamento Dental - João Pereira"
        )
        assert row.data == datetime(2024, 6, 19, 14, 30)
        assert row.appointment_id == "at5"

    def test_zero_total_generates_nothing(self, cli1):
        at = next(a for a in cli1.appointments if a.id == "at5")
        free = at.model_copy(update={"valor_final": 0.0})
        assert revenue_from_appointments([free], cli1.procedures) == []

    def test_other_statuses_generate_nothing(self, cli1):
        at = next(a for a in cli1.appointments if a.id == "at5")
        missed = at.model_copy(update={"status": AppointmentStatus.FALTOU})
        assert revenue_from_appointments([missed], cli1.procedures) == []


class TestLedger:
    def test_newest_first(self, cli1):
        rows = ledger(cli1.appointments, cli1.transactions, cli1.procedures)
        assert [r.id for r in rows] == ["at-at5", "t2", "t3", "t1"]

    def test_totals(self, cli1):
        result = totals(ledger(cli1.appointments, cli1.transactions, cli1.procedures))
        assert result.receitas == 700.0
        assert result.despesas == 11350.0
        assert result.saldo == -10650.0

    def test_empty_totals(self):
        result = totals([])
        assert (result.receitas, result.despesas, result.saldo) == (0, 0, 0)


class TestMonthlySeries:
    def test_buckets_by_year_and_month(self):
        rows = [
            _tx("a", 100, TransactionType.RECEITA, datetime(2024, 5, 3)),
            _tx("b", 40, TransactionType.DESPESA, datetime(2024, 5, 20)),
            _tx("c", 70, TransactionType.RECEITA, datetime(2024, 6, 1)),
        ]
        series = monthly_series(rows)
        assert [(b.label, b.receitas, b.despesas) for b in series] == [
            ("Mai/24", 100, 40), ("Jun/24", 70, 0),
        ]

    def test_same_month_of_different_years_stays_apart(self):
        rows = [
            _tx("a", 10, TransactionType.RECEITA, datetime(2023, 6, 1)),
            _tx("b", 20, TransactionType.RECEITA, datetime(2024, 6, 1)),
        ]
        assert [b.label for b in monthly_series(rows)] == ["Jun/23", "Jun/24"]

    def test_keeps_last_six_months(self):
        rows = [
            _tx(str(m), m, TransactionType.RECEITA, datetime(2024, m, 1)) for m in range(1, 9)
        ]
        assert [b.label for b in monthly_series(rows)] == [
            "Mar/24", "Abr/24", "Mai/24", "Jun/24", "Jul/24", "Ago/24",
        ]


class TestValidateManualTransaction:
    @pytest.mark.parametrize("overrides", [
        {"descricao": ""},
        {"valor": None},
        {"valor": 0},
        {"valor": -5},
        {"data": None},
        {"categoria": ""},
    ])
    def test_rejects_incomplete_forms(self, overrides):
        fields = {
            "descricao": "Luz", "valor": 300.0,
            "data": datetime(2024, 6, 10), "categoria": "Custos Fixos",
        }
        fields.update(overrides)
        with pytest.raises(FormValidationError, match="obrigatórios"):
            validate_manual_transaction(**fields)


class TestFinanceService:
    def test_summary_is_scoped_to_selected_clinic(self, store):
        store.select_clinic("cli2")
        summary = FinanceService(store).summary()
        assert [t.id for t in summary.transactions] == ["at-at3"]
        assert summary.totals.receitas == 220.0

    def test_new_manual_entry_goes_first(self, store):
        service = FinanceService(store)
        created = service.save_transaction(
            descricao="Conta de luz", valor=320.0, tipo=TransactionType.DESPESA,
            data=datetime(2024, 6, 10), categoria="Custos Fixos",
        )
        assert created.id.startswith("manual-")
        assert created.clinic_id == "cli1"
        assert store.collections.transactions[0] is created

    def test_edit_replaces_in_place(self, store):
        service = FinanceService(store)
        edited = service.save_transaction(
            id="t2", descricao="Compra de Material", valor=900.0,
            tipo=TransactionType.DESPESA, data=datetime(2024, 6, 5),
            categoria="Material de Consumo",
        )
        assert edited.valor == 900.0
        assert [t.id for t in store.collections.transactions] == ["t1", "t2", "t3"]
        assert store.collections.transactions[1].valor == 900.0

    def test_synthetic_revenue_rows_cannot_be_edited(self, store):
        with pytest.raises(NotFoundError):
            FinanceService(store).save_transaction(
                id="at-at5", descricao="x", valor=1.0, tipo=TransactionType.RECEITA,
                data=datetime(2024, 6, 19), categoria="x",
            )

    def test_invalid_form_changes_nothing(self, store):
        with pytest.raises(FormValidationError):
            FinanceService(store).save_transaction(
                descricao="", valor=10.0, tipo=TransactionType.RECEITA,
                data=datetime(2024, 6, 19), categoria="x",
            )
        assert len(store.collections.transactions) == 3
