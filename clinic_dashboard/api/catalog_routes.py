"""Catalog endpoints: clinics, specialties, procedures, doctors, patients, agents.

Lists are always scoped to the selected clinic (clinics themselves are not).
``POST`` creates, ``PUT /{id}`` edits; both answer with the saved record and
the notice to show the user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from clinic_dashboard.api.deps import catalog_service, get_store, require_user, run_service
from clinic_dashboard.api.schemas import (
    AgentForm,
    AgentSaved,
    ClinicForm,
    ClinicSaved,
    DoctorForm,
    DoctorSaved,
    PatientForm,
    PatientSaved,
    ProcedureForm,
    ProcedureSaved,
    SpecialtyForm,
    SpecialtySaved,
)
from clinic_dashboard.domain.models import Agent, Clinic, Doctor, Patient, Procedure, Specialty
from clinic_dashboard.services.catalog import CatalogService, DoctorProcedureInput
from clinic_dashboard.services.store import DashboardStore

router = APIRouter(dependencies=[Depends(require_user)])


# ── Clinics ──────────────────────────────────────────────────────────


@router.get("/clinics", response_model=list[Clinic])
async def list_clinics(store: DashboardStore = Depends(get_store)):
    with store.lock:
        return list(store.clinics)


@router.post("/clinics", response_model=ClinicSaved, status_code=201)
async def create_clinic(
    body: ClinicForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_clinic, **body.model_dump())
    return ClinicSaved(record=result.record, notice=result.notice)


@router.put("/clinics/{clinic_id}", response_model=ClinicSaved)
async def update_clinic(
    clinic_id: str,
    body: ClinicForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_clinic, id=clinic_id, **body.model_dump())
    return ClinicSaved(record=result.record, notice=result.notice)


# ── Specialties ──────────────────────────────────────────────────────


@router.get("/specialties", response_model=list[Specialty])
async def list_specialties(store: DashboardStore = Depends(get_store)):
    return store.current_slice().specialties


@router.post("/specialties", response_model=SpecialtySaved, status_code=201)
async def create_specialty(
    body: SpecialtyForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_specialty, **body.model_dump())
    return SpecialtySaved(record=result.record, notice=result.notice)


@router.put("/specialties/{specialty_id}", response_model=SpecialtySaved)
async def update_specialty(
    specialty_id: str,
    body: SpecialtyForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(
        request, catalog.save_specialty, id=specialty_id, **body.model_dump(),
    )
    return SpecialtySaved(record=result.record, notice=result.notice)


# ── Procedures ───────────────────────────────────────────────────────


@router.get("/procedures", response_model=list[Procedure])
async def list_procedures(store: DashboardStore = Depends(get_store)):
    return store.current_slice().procedures


@router.post("/procedures", response_model=ProcedureSaved, status_code=201)
async def create_procedure(
    body: ProcedureForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_procedure, **body.model_dump())
    return ProcedureSaved(record=result.record, notice=result.notice)


@router.put("/procedures/{procedure_id}", response_model=ProcedureSaved)
async def update_procedure(
    procedure_id: str,
    body: ProcedureForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(
        request, catalog.save_procedure, id=procedure_id, **body.model_dump(),
    )
    return ProcedureSaved(record=result.record, notice=result.notice)


# ── Doctors ──────────────────────────────────────────────────────────


def _doctor_kwargs(body: DoctorForm) -> dict:
    return {
        "name": body.name,
        "avatar_url": body.avatar_url,
        "specialty_id": body.specialty_id,
        "procedures": [
            DoctorProcedureInput(p.procedure_id, orcar=p.orcar, valor=p.valor)
            for p in body.procedures
        ],
    }


@router.get("/doctors", response_model=list[Doctor])
async def list_doctors(store: DashboardStore = Depends(get_store)):
    return store.current_slice().doctors


@router.post("/doctors", response_model=DoctorSaved, status_code=201)
async def create_doctor(
    body: DoctorForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_doctor, **_doctor_kwargs(body))
    return DoctorSaved(record=result.record, notice=result.notice)


@router.put("/doctors/{doctor_id}", response_model=DoctorSaved)
async def update_doctor(
    doctor_id: str,
    body: DoctorForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(
        request, catalog.save_doctor, id=doctor_id, **_doctor_kwargs(body),
    )
    return DoctorSaved(record=result.record, notice=result.notice)


# ── Patients ─────────────────────────────────────────────────────────


@router.get("/patients", response_model=list[Patient])
async def list_patients(search: str = "", catalog: CatalogService = Depends(catalog_service)):
    """Patients of the selected clinic, filtered by name."""
    return catalog.list_patients(search)


@router.post("/patients", response_model=PatientSaved, status_code=201)
async def create_patient(
    body: PatientForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_patient, **body.model_dump())
    return PatientSaved(record=result.record, notice=result.notice)


@router.put("/patients/{patient_id}", response_model=PatientSaved)
async def update_patient(
    patient_id: str,
    body: PatientForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_patient, id=patient_id, **body.model_dump())
    return PatientSaved(record=result.record, notice=result.notice)


# ── Agents ───────────────────────────────────────────────────────────


@router.get("/agents", response_model=list[Agent])
async def list_agents(store: DashboardStore = Depends(get_store)):
    return store.current_slice().agents


@router.post("/agents", response_model=AgentSaved, status_code=201)
async def create_agent(
    body: AgentForm, request: Request, catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_agent, **body.model_dump())
    return AgentSaved(record=result.record, notice=result.notice)


@router.put("/agents/{agent_id}", response_model=AgentSaved)
async def update_agent(
    agent_id: str,
    body: AgentForm,
    request: Request,
    catalog: CatalogService = Depends(catalog_service),
):
    result = await run_service(request, catalog.save_agent, id=agent_id, **body.model_dump())
    return AgentSaved(record=result.record, notice=result.notice)
