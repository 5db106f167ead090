"""Create/edit flows for the catalog entities.

Every save follows the same path:

1. validate the form data (:class:`FormValidationError` on failure, before
   any network call);
2. build the tagged JSON payload the automation expects;
3. POST it to the webhook when one is connected; a failure raises
   :class:`WebhookError` and the change is discarded;
4. only then apply the change locally. Creates get a server-side id and
   go to the top of their list; edits replace the record in place.

Without a connected webhook the change is applied locally and the caller
gets a notice saying so.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, TypeVar

from clinic_dashboard.domain.models import (
    Agent,
    AgentStatus,
    Clinic,
    Doctor,
    DoctorProcedure,
    Patient,
    Procedure,
    Specialty,
    UserRole,
)
from clinic_dashboard.domain.tenancy import find_by_id
from clinic_dashboard.errors import FormValidationError
from clinic_dashboard.services.auth import hash_password, validate_email, validate_new_password
from clinic_dashboard.services.store import DashboardStore
from clinic_dashboard.services.webhook_client import WebhookClient, WebhookError, get_webhook_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOCAL_ONLY_NOTICE = "Webhook do n8n não configurado. Salvo apenas localmente."
NO_CLINIC_MESSAGE = "Nenhuma clínica selecionada. Não é possível salvar."


@dataclass
class SaveResult(Generic[T]):
    record: T
    notice: str


@dataclass
class DoctorProcedureInput:
    procedure_id: str
    orcar: bool = False
    valor: float | None = None


class WebhookWriter:
    """Shared plumbing: clinic checks and the notify-then-apply step."""

    def __init__(
        self,
        store: DashboardStore,
        client: WebhookClient | None = None,
        *,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._client = client
        self._clock = clock or store.clock

    def today(self) -> date:
        return self._clock()

    @property
    def client(self) -> WebhookClient:
        if self._client is None:
            self._client = get_webhook_client()
        return self._client

    def _require_clinic(self) -> str:
        clinic_id = self._store.selected_clinic_id
        if not clinic_id:
            raise FormValidationError(NO_CLINIC_MESSAGE)
        return clinic_id

    def _notify(self, payload: dict[str, Any], *, saved: str, failed: str) -> str:
        """POST *payload* if a webhook is connected; return the user notice.

        *failed* becomes the message of the re-raised :class:`WebhookError`.
        """
        url = self._store.webhook_url()
        if url is None:
            logger.info("Webhook not connected; %s applied locally only", payload["tag"])
            return LOCAL_ONLY_NOTICE
        try:
            self.client.post(url, payload)
        except WebhookError as exc:
            logger.error("Webhook %s failed, change discarded: %s", payload["tag"], exc)
            raise WebhookError(failed, status_code=exc.status_code) from exc
        return saved


def _required(*values: Any) -> bool:
    return all(isinstance(v, str) and v.strip() for v in values)


class CatalogService(WebhookWriter):
    """Saves clinics, specialties, procedures, doctors, patients and agents."""

    # ── Clinics ──────────────────────────────────────────────────────

    def save_clinic(
        self, *, name: str, cnpj: str, address: str, phone: str, id: str | None = None,
    ) -> SaveResult[Clinic]:
        if not _required(name, cnpj, address, phone):
            raise FormValidationError("Todos os campos são obrigatórios.")
        updating = bool(id)
        if updating:
            find_by_id(self._store.clinics, id, "Clínica")

        payload: dict[str, Any] = {"tag": "atualizar_clinica" if updating else "nova_clinica"}
        if updating:
            payload["id"] = id
        payload.update(name=name, cnpj=cnpj, address=address, phone=phone)
        notice = self._notify(
            payload,
            saved=f"Clínica {'atualizada' if updating else 'criada'} com sucesso!",
            failed="Ocorreu um erro ao salvar a clínica. A alteração pode não ter sido salva.",
        )

        clinic = Clinic(
            id=id if updating else self._store.new_id(),
            name=name, cnpj=cnpj, address=address, phone=phone,
        )
        self._apply("clinics", clinic, updating)
        return SaveResult(clinic, notice)

    # ── Specialties ──────────────────────────────────────────────────

    def save_specialty(
        self, *, name: str, description: str, id: str | None = None,
    ) -> SaveResult[Specialty]:
        if not _required(name, description):
            raise FormValidationError("Todos os campos são obrigatórios.")
        clinic_id = self._require_clinic()
        updating = bool(id)
        if updating:
            find_by_id(self._store.current_slice().specialties, id, "Especialidade")

        payload: dict[str, Any] = {
            "tag": "atualizar_especialidade" if updating else "nova_especialidade",
        }
        if updating:
            payload["id"] = id
        payload.update(name=name, description=description, clinicaId=clinic_id)
        notice = self._notify(
            payload,
            saved=f"Especialidade {'atualizada' if updating else 'criada'} com sucesso!",
            failed="Ocorreu um erro ao salvar a especialidade. A alteração pode não ter sido salva.",
        )

        specialty = Specialty(
            id=id if updating else self._store.new_id(),
            name=name, description=description, clinic_id=clinic_id,
        )
        self._apply("specialties", specialty, updating)
        return SaveResult(specialty, notice)

    # ── Procedures ───────────────────────────────────────────────────

    def save_procedure(
        self, *, name: str, description: str, specialty_id: str, id: str | None = None,
    ) -> SaveResult[Procedure]:
        if not _required(name, description, specialty_id):
            raise FormValidationError("Todos os campos são obrigatórios.")
        clinic_id = self._require_clinic()
        current = self._store.current_slice()
        if not any(s.id == specialty_id for s in current.specialties):
            raise FormValidationError("Especialidade selecionada é inválida.")
        updating = bool(id)
        if updating:
            find_by_id(current.procedures, id, "Procedimento")

        payload: dict[str, Any] = {
            "tag": "atualizar_procedimento" if updating else "novo_procedimento",
        }
        if updating:
            payload["id"] = id
        payload.update(
            name=name, description=description,
            especialidadeId=specialty_id, clinicaId=clinic_id,
        )
        verb = "atualizar" if updating else "criar"
        notice = self._notify(
            payload,
            saved=f"Procedimento {'atualizado' if updating else 'criado'} com sucesso!",
            failed=f"Ocorreu um erro ao {verb} o procedimento.",
        )

        procedure = Procedure(
            id=id if updating else self._store.new_id(),
            name=name, description=description,
            specialty_id=specialty_id, clinic_id=clinic_id,
        )
        self._apply("procedures", procedure, updating)
        return SaveResult(procedure, notice)

    # ── Doctors ──────────────────────────────────────────────────────

    def save_doctor(
        self,
        *,
        name: str,
        specialty_id: str,
        procedures: Iterable[DoctorProcedureInput] = (),
        avatar_url: str = "",
        id: str | None = None,
    ) -> SaveResult[Doctor]:
        if not _required(name, specialty_id):
            raise FormValidationError("Nome e especialidade são obrigatórios.")
        clinic_id = self._require_clinic()
        current = self._store.current_slice()
        specialty = next((s for s in current.specialties if s.id == specialty_id), None)
        if specialty is None:
            raise FormValidationError("Especialidade selecionada é inválida.")
        configured = self._doctor_procedures(procedures, specialty, current.procedures)
        updating = bool(id)
        if updating:
            find_by_id(current.doctors, id, "Doutor(a)")

        payload: dict[str, Any] = {"tag": "atualizar_doutor" if updating else "novo_doutor"}
        if updating:
            payload["id"] = id
        payload.update(
            name=name,
            avatarUrl=avatar_url,
            especialidadeId=specialty_id,
            procedimentos=[_doctor_procedure_wire(dp) for dp in configured],
            clinicaId=clinic_id,
        )
        notice = self._notify(
            payload,
            saved=f"Doutor(a) {'atualizado(a)' if updating else 'criado(a)'} com sucesso!",
            failed="Ocorreu um erro ao salvar o doutor(a). A alteração pode não ter sido salva.",
        )

        doctor = Doctor(
            id=id if updating else self._store.new_id(),
            name=name,
            avatar_url=avatar_url,
            specialty=specialty,
            procedures=configured,
            clinic_id=clinic_id,
        )
        self._apply("doctors", doctor, updating)
        return SaveResult(doctor, notice)

    @staticmethod
    def _doctor_procedures(
        selected: Iterable[DoctorProcedureInput],
        specialty: Specialty,
        procedures: list[Procedure],
    ) -> list[DoctorProcedure]:
        allowed = {p.id for p in procedures if p.specialty_id == specialty.id}
        result: list[DoctorProcedure] = []
        seen: set[str] = set()
        for item in selected:
            if item.procedure_id not in allowed or item.procedure_id in seen:
                raise FormValidationError(
                    "Procedimento inválido para a especialidade selecionada."
                )
            seen.add(item.procedure_id)
            if item.orcar:
                result.append(DoctorProcedure(procedure_id=item.procedure_id, orcar=True))
                continue
            if item.valor is None or not item.valor > 0:
                raise FormValidationError(
                    "O valor para o procedimento selecionado deve ser um número positivo."
                )
            result.append(DoctorProcedure(procedure_id=item.procedure_id, valor=item.valor))
        return result

    # ── Patients ─────────────────────────────────────────────────────

    def list_patients(self, search: str = "") -> list[Patient]:
        term = (search or "").strip().lower()
        patients = self._store.current_slice().patients
        return [p for p in patients if term in p.name.lower()]

    def save_patient(
        self,
        *,
        name: str,
        phone: str,
        cpf: str | None = None,
        address: str | None = None,
        id: str | None = None,
    ) -> SaveResult[Patient]:
        if not _required(name, phone):
            raise FormValidationError("Nome e telefone são obrigatórios.")
        clinic_id = self._require_clinic()
        updating = bool(id)
        existing = (
            find_by_id(self._store.current_slice().patients, id, "Paciente")
            if updating else None
        )

        payload: dict[str, Any] = {
            "tag": "atualizar_paciente" if updating else "paciente",
            "nome_paciente": name,
            "telefone_paciente": phone,
            "cpf": cpf,
            "endereco": address,
            "clinicaId": clinic_id,
        }
        if updating:
            payload["paciente_id"] = id
        notice = self._notify(
            payload,
            saved=f"Paciente {'atualizado' if updating else 'criado'} com sucesso!",
            failed="Ocorreu um erro ao salvar o paciente. A alteração pode não ter sido salva.",
        )

        if existing is not None:
            patient = existing.model_copy(
                update={"name": name, "phone": phone, "cpf": cpf, "address": address},
            )
        else:
            patient = Patient(
                id=self._store.new_id(),
                name=name, phone=phone, cpf=cpf, address=address,
                last_visit=self._clock().strftime("%d/%m/%Y"),
                clinic_id=clinic_id,
            )
        self._apply("patients", patient, updating)
        return SaveResult(patient, notice)

    # ── Agents ───────────────────────────────────────────────────────

    def save_agent(
        self,
        *,
        full_name: str,
        email: str,
        role: UserRole = UserRole.USER,
        password: str = "",
        confirm_password: str = "",
        id: str | None = None,
    ) -> SaveResult[Agent]:
        if not _required(full_name, email):
            raise FormValidationError("Nome completo e e-mail são obrigatórios.")
        email = validate_email(email)
        updating = bool(id)
        password_hash = None
        if password:
            validate_new_password(password, confirm_password)
            password_hash = hash_password(password)
        elif not updating:
            raise FormValidationError("A senha é obrigatória para novos agentes.")
        clinic_id = self._require_clinic()
        existing = (
            find_by_id(self._store.current_slice().agents, id, "Agente")
            if updating else None
        )

        payload: dict[str, Any] = {
            "tag": "atualizar_agente" if updating else "novo_agente",
            "nome_completo": full_name,
            "email": email,
            "role": UserRole(role).value,
            "clinicaId": clinic_id,
        }
        if updating:
            payload["id"] = id
        if password_hash:
            payload["password_hash"] = password_hash
        notice = self._notify(
            payload,
            saved=f"Agente {'atualizado' if updating else 'criado'} com sucesso!",
            failed="Ocorreu um erro ao salvar o agente. A alteração pode não ter sido salva.",
        )

        if existing is not None:
            agent = existing.model_copy(
                update={
                    "full_name": full_name, "email": email,
                    "role": UserRole(role), "clinic_id": clinic_id,
                },
            )
        else:
            agent = Agent(
                id=self._store.new_id(),
                full_name=full_name, email=email, role=UserRole(role),
                status=AgentStatus.ACTIVE, clinic_id=clinic_id,
            )
        self._apply("agents", agent, updating)
        return SaveResult(agent, notice)

    # ── Internal ─────────────────────────────────────────────────────

    def _apply(self, collection: str, record: Any, updating: bool) -> None:
        if updating:
            self._store.replace(collection, record)
        else:
            self._store.prepend(collection, record)
        logger.info(
            "%s %s %s", collection, "updated" if updating else "created", record.id,
        )


def _doctor_procedure_wire(dp: DoctorProcedure) -> dict[str, Any]:
    wire: dict[str, Any] = {"procedimentoId": dp.procedure_id, "orcar": dp.orcar}
    if not dp.orcar:
        wire["valor"] = dp.valor
    return wire
