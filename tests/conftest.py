"""Shared fixtures: an in-memory SQLite store and ticket factories."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.infrastructure.database import Base
from app.domain.models.ticket import Ticket
from app.domain.models.import_log import ImportLog
from app.domain.schemas.ticket import TicketCreate
from app.infrastructure.repositories.ticket_repository import SQLAlchemyTicketRepository
from app.infrastructure.repositories.import_log_repository import SQLAlchemyImportLogRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def ticket_repo(db_session):
    return SQLAlchemyTicketRepository(db_session, Ticket)


@pytest.fixture
def log_repo(db_session):
    return SQLAlchemyImportLogRepository(db_session, ImportLog)


@pytest.fixture
def make_candidate():
    """Build a candidate row with sensible operational defaults."""
    def _make(ticket_id: str, **overrides) -> TicketCreate:
        data = {
            "ticket_id": ticket_id,
            "spxtn": None,
            "driver_name": "Ana Souza",
            "station": "SP01",
            "pnr_value": 10.0,
            "original_status": "Created",
            "sla_deadline": datetime(2024, 5, 1, 12, 0),
        }
        data.update(overrides)
        return TicketCreate(**data)

    return _make


@pytest.fixture
def seed_tickets(ticket_repo):
    """Insert stored tickets; unspecified fields get the same defaults as make_candidate."""
    def _seed(*tickets: dict) -> None:
        rows = []
        for ticket in tickets:
            row = {
                "spxtn": None,
                "driver_name": "Ana Souza",
                "station": "SP01",
                "pnr_value": 10.0,
                "original_status": "Created",
                "sla_deadline": datetime(2024, 5, 1, 12, 0),
                "internal_status": "Pendente",
                "internal_notes": "",
            }
            row.update(ticket)
            rows.append(row)
        ticket_repo.insert_many(rows)

    return _seed
