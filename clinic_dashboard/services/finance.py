"""Finance screen: ledger, totals, monthly chart and manual entries.

Manual entries stay local; they are never sent to the webhook.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from clinic_dashboard.domain.finance import (
    MonthBucket,
    Totals,
    ledger,
    monthly_series,
    totals,
    validate_manual_transaction,
)
from clinic_dashboard.domain.models import Transaction, TransactionType
from clinic_dashboard.domain.tenancy import find_by_id
from clinic_dashboard.errors import FormValidationError
from clinic_dashboard.services.store import DashboardStore

logger = logging.getLogger(__name__)


@dataclass
class FinanceSummary:
    transactions: list[Transaction]
    totals: Totals
    monthly: list[MonthBucket]


class FinanceService:
    def __init__(self, store: DashboardStore):
        self._store = store

    def summary(self) -> FinanceSummary:
        current = self._store.current_slice()
        rows = ledger(current.appointments, current.transactions, current.procedures)
        return FinanceSummary(
            transactions=rows,
            totals=totals(rows),
            monthly=monthly_series(rows),
        )

    def save_transaction(
        self,
        *,
        descricao: str,
        valor: float | None,
        tipo: TransactionType,
        data: datetime | None,
        categoria: str,
        id: str | None = None,
    ) -> Transaction:
        validate_manual_transaction(
            descricao=descricao, valor=valor, data=data, categoria=categoria,
        )
        clinic_id = self._store.selected_clinic_id
        if not clinic_id:
            raise FormValidationError("Nenhuma clínica selecionada. Não é possível salvar.")

        if id:
            existing = find_by_id(self._store.current_slice().transactions, id, "Transação")
            transaction = existing.model_copy(update={
                "descricao": descricao, "valor": valor, "tipo": TransactionType(tipo),
                "data": data, "categoria": categoria,
            })
            self._store.replace("transactions", transaction)
        else:
            transaction = Transaction(
                id=self._store.new_id("manual-"),
                descricao=descricao, valor=valor, tipo=TransactionType(tipo),
                data=data, categoria=categoria, clinic_id=clinic_id,
            )
            self._store.prepend("transactions", transaction)
        logger.info("Transaction %s saved (%s %.2f)", transaction.id, transaction.tipo.value, valor)
        return transaction
