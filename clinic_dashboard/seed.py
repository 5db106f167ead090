"""Demo records the dashboard starts with.

Appointment and transaction dates are relative to *today* so the overview
and the calendar always have something to show.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from clinic_dashboard.domain.models import (
    Agent,
    Appointment,
    AppointmentProcedure,
    AppointmentStatus,
    Clinic,
    Doctor,
    DoctorProcedure,
    Patient,
    Procedure,
    Specialty,
    Transaction,
    TransactionType,
    UserRole,
)
from clinic_dashboard.domain.tenancy import Collections

_GENERAL_CARE = "Tratamentos de rotina, limpezas e pequenas restaurações."
_CLEANING = "Remoção de tártaro e placa bacteriana."


def seed_clinics() -> list[Clinic]:
    return [
        Clinic(id="cli1", name="Odonto+ Matriz", cnpj="12.345.678/0001-99",
               address="Av. Principal, 500, Centro", phone="(11) 5555-1234"),
        Clinic(id="cli2", name="Odonto+ Filial Sul", cnpj="12.345.678/0002-80",
               address="Rua das Palmeiras, 10, Bairro Sul", phone="(11) 5555-5678"),
    ]


def seed_collections(today: date) -> Collections:
    specialties = [
        Specialty(id="esp1", name="Ortodontia",
                  description="Correção da posição dos dentes e dos ossos maxilares.",
                  clinic_id="cli1"),
        Specialty(id="esp2", name="Clínica Geral", description=_GENERAL_CARE, clinic_id="cli1"),
        Specialty(id="esp3", name="Clínica Geral", description=_GENERAL_CARE, clinic_id="cli2"),
    ]
    procedures = [
        Procedure(id="proc1", name="Limpeza e Profilaxia", description=_CLEANING,
                  specialty_id="esp2", clinic_id="cli1"),
        Procedure(id="proc2", name="Clareamento Dental",
                  description="Procedimento estético para clarear os dentes.",
                  specialty_id="esp2", clinic_id="cli1"),
        Procedure(id="proc3", name="Manutenção de Aparelho",
                  description="Ajuste e manutenção de aparelho ortodôntico.",
                  specialty_id="esp1", clinic_id="cli1"),
        Procedure(id="proc4", name="Avaliação Ortodôntica",
                  description="Avaliação para uso de aparelho.",
                  specialty_id="esp1", clinic_id="cli1"),
        Procedure(id="proc5", name="Limpeza e Profilaxia", description=_CLEANING,
                  specialty_id="esp3", clinic_id="cli2"),
    ]
    doctors = [
        Doctor(id="doc1", name="Dr. Ana Silva", specialty=specialties[0],
               avatar_url="https://i.pravatar.cc/100?u=ana", clinic_id="cli1",
               procedures=[DoctorProcedure(procedure_id="proc3", valor=150.0),
                           DoctorProcedure(procedure_id="proc4", orcar=True)]),
        Doctor(id="doc2", name="Dr. Carlos Souza", specialty=specialties[1],
               avatar_url="https://i.pravatar.cc/100?u=carlos", clinic_id="cli1",
               procedures=[DoctorProcedure(procedure_id="proc1", valor=200.0),
                           DoctorProcedure(procedure_id="proc2", valor=500.0)]),
        Doctor(id="doc3", name="Dr. Joana Lima", specialty=specialties[2],
               avatar_url="https://i.pravatar.cc/100?u=joana", clinic_id="cli2",
               procedures=[DoctorProcedure(procedure_id="proc5", valor=220.0)]),
    ]
    patients = [
        Patient(id="pat1", name="João Pereira", phone="(11) 98765-4321",
                last_visit="20/06/2024", cpf="123.456.789-00",
                address="Rua das Flores, 123, São Paulo, SP", clinic_id="cli1"),
        Patient(id="pat2", name="Maria Oliveira", phone="(21) 91234-5678",
                last_visit="15/06/2024", clinic_id="cli1"),
        Patient(id="pat3", name="Pedro Costa", phone="(31) 99999-8888",
                last_visit="01/06/2024", clinic_id="cli2"),
    ]

    def at(day: date, hour: int, minute: int, minutes: int) -> tuple[datetime, datetime]:
        start = datetime.combine(day, time(hour, minute))
        return start, start + timedelta(minutes=minutes)

    def line(procedure_id: str, valor: float) -> AppointmentProcedure:
        return AppointmentProcedure(procedure_id=procedure_id, valor_final=valor)

    yesterday = today - timedelta(days=1)
    three_days_ago = today - timedelta(days=3)
    slots = {
        "at1": at(today, 9, 0, 60),
        "at2": at(today, 10, 30, 30),
        "at3": at(yesterday, 14, 0, 60),
        "at4": at(three_days_ago, 11, 0, 60),
        "at5": at(today, 14, 0, 30),
    }
    appointments = [
        Appointment(id="at1", patient=patients[0], doctor=doctors[0],
                    procedures=[line("proc3", 150.0)], start_time=slots["at1"][0],
                    end_time=slots["at1"][1], status=AppointmentStatus.CONFIRMADO,
                    clinic_id="cli1"),
        Appointment(id="at2", patient=patients[1], doctor=doctors[1],
                    procedures=[line("proc1", 200.0)], start_time=slots["at2"][0],
                    end_time=slots["at2"][1], status=AppointmentStatus.AGENDADO,
                    clinic_id="cli1"),
        Appointment(id="at3", patient=patients[2], doctor=doctors[2],
                    procedures=[line("proc5", 220.0)], start_time=slots["at3"][0],
                    end_time=slots["at3"][1], status=AppointmentStatus.ATENDIDO,
                    clinic_id="cli2"),
        Appointment(id="at4", patient=patients[1], doctor=doctors[0],
                    procedures=[line("proc3", 150.0)], start_time=slots["at4"][0],
                    end_time=slots["at4"][1], status=AppointmentStatus.FALTOU,
                    clinic_id="cli1"),
        Appointment(id="at5", patient=patients[0], doctor=doctors[1],
                    procedures=[line("proc1", 200.0), line("proc2", 500.0)],
                    start_time=slots["at5"][0], end_time=slots["at5"][1],
                    status=AppointmentStatus.ATENDIDO, clinic_id="cli1"),
    ]
    agents = [
        Agent(id="age1", full_name="Admin Matriz", email="admin@odonto.com",
              role=UserRole.ADMIN, clinic_id="cli1"),
        Agent(id="age2", full_name="Secretária Matriz", email="user@odonto.com",
              role=UserRole.USER, clinic_id="cli1"),
        Agent(id="age3", full_name="Admin Filial Sul", email="admin.sul@odonto.com",
              role=UserRole.ADMIN, clinic_id="cli2"),
    ]
    first = datetime.combine(today.replace(day=1), time())
    fifth = datetime.combine(today.replace(day=5), time())
    transactions = [
        Transaction(id="t1", descricao="Aluguel do Consultório", valor=2500,
                    tipo=TransactionType.DESPESA, data=first,
                    categoria="Custos Fixos", clinic_id="cli1"),
        Transaction(id="t2", descricao="Compra de Material", valor=850,
                    tipo=TransactionType.DESPESA, data=fifth,
                    categoria="Material de Consumo", clinic_id="cli1"),
        Transaction(id="t3", descricao="Salários", valor=8000,
                    tipo=TransactionType.DESPESA, data=fifth,
                    categoria="Recursos Humanos", clinic_id="cli1"),
    ]
    return Collections(
        specialties=specialties,
        procedures=procedures,
        doctors=doctors,
        patients=patients,
        appointments=appointments,
        agents=agents,
        transactions=transactions,
    )
