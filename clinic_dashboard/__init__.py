"""Clinic Dashboard: multi-clinic management backend for dental practices.

Architecture Overview
=====================

The service owns the dashboard's in-memory state and exposes it over HTTP.
Every screen of the dashboard is a read endpoint returning a derived view;
every form is a write endpoint.

1. **domain**, pure functions and models. Tenant filtering, the appointment
   board (kanban, table, week calendar) and form rules, the financial
   ledger and the overview figures.

2. **services**, the stateful side. The locked in-memory store, the
   webhook client that tells the external automation (n8n) about every
   write, and the catalog, appointment, finance, auth and assistant flows.

Write flow: validate → notify webhook → apply locally. A status change on
the board is the exception: it is applied first and rolled back if the
webhook call fails.

Key Design Decisions
--------------------
- **Multi-tenancy**: every record except a clinic carries ``clinic_id``;
  lists are always built from the selected clinic's slice.
- **No persistence**: state is seeded on start-up and lost on restart. The
  automation behind the webhook is the system of record.
- **Webhook protocol**: one JSON ``POST`` per operation, discriminated by a
  ``tag`` field. Non-2xx is a failure; nothing is retried.
- **Dual Interface**: FastAPI server (dashboard) + CLI loop for the AI
  assistant.

Package Structure
-----------------
- ``clinic_dashboard/config.py``: Centralized configuration
- ``clinic_dashboard/errors.py``: Exceptions mapped to HTTP statuses
- ``clinic_dashboard/seed.py``: Demo data
- ``clinic_dashboard/domain/``: Models and derived views
- ``clinic_dashboard/services/``: Store, webhook client, use-case services
- ``clinic_dashboard/api/``: FastAPI routes and Pydantic schemas
- ``clinic_dashboard/server.py``: FastAPI application
- ``clinic_dashboard/main.py``: CLI assistant
"""
