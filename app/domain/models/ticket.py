"""Ticket domain model — maps to the 'tickets' table."""

from sqlalchemy import Column, Integer, String, Float, DateTime, Text
from sqlalchemy.sql import func

from app.infrastructure.database import Base

INTERNAL_STATUS_PENDING = "Pendente"
INTERNAL_STATUS_IN_REVIEW = "Em Análise"
INTERNAL_STATUS_DONE = "Concluído"
INTERNAL_STATUSES = (INTERNAL_STATUS_PENDING, INTERNAL_STATUS_IN_REVIEW, INTERNAL_STATUS_DONE)


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Business keys
    ticket_id = Column(String(100), nullable=False, unique=True, index=True)
    spxtn = Column(String(100), nullable=True, unique=True, index=True)

    # Operational columns (refreshed by every import)
    driver_name = Column(String(300), nullable=True, index=True)
    station = Column(String(200), nullable=True)
    pnr_value = Column(Float, nullable=True)
    original_status = Column(String(200), nullable=True)
    sla_deadline = Column(DateTime(timezone=True), nullable=True, index=True)

    # Operator-owned columns (never written by imports)
    internal_status = Column(String(50), nullable=False, default=INTERNAL_STATUS_PENDING, index=True)
    internal_notes = Column(Text, nullable=True, default="")
    internal_status_updated_at = Column(DateTime(timezone=True), nullable=True)

    created_time = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Ticket {self.ticket_id} - {self.driver_name}>"
