"""
SQLAlchemy Implementation of Ticket Repository.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from app.domain.models.ticket import Ticket, INTERNAL_STATUS_PENDING
from app.domain.repositories.ticket_repository import TicketRepository
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyTicketRepository(SQLAlchemyRepository[Ticket], TicketRepository):
    """Ticket repository implementation using SQLAlchemy."""

    def _in_created_range(self, query, start: Optional[datetime], end: Optional[datetime]):
        if start:
            query = query.filter(Ticket.created_time >= start)
        if end:
            query = query.filter(Ticket.created_time <= end)
        return query

    def get_by_ticket_id(self, ticket_id: str) -> Optional[Ticket]:
        return self.db.query(Ticket).filter(Ticket.ticket_id == ticket_id).first()

    def find_by_ticket_ids(self, ticket_ids: Sequence[str]) -> List[Ticket]:
        if not ticket_ids:
            return []
        return self.db.query(Ticket).filter(Ticket.ticket_id.in_(list(ticket_ids))).all()

    def find_by_spxtns(self, spxtns: Sequence[str]) -> List[Ticket]:
        if not spxtns:
            return []
        return self.db.query(Ticket).filter(Ticket.spxtn.in_(list(spxtns))).all()

    def find_by_codes(self, codes: Sequence[str]) -> List[Ticket]:
        if not codes:
            return []
        codes = list(codes)
        return (
            self.db.query(Ticket)
            .filter(or_(Ticket.spxtn.in_(codes), Ticket.ticket_id.in_(codes)))
            .order_by(Ticket.ticket_id)
            .all()
        )

    def insert_many(self, rows: List[Dict[str, Any]]) -> int:
        self.db.add_all([Ticket(**row) for row in rows])
        self._commit()
        return len(rows)

    def update_by_ticket_id(self, ticket_id: str, values: Dict[str, Any]) -> int:
        try:
            affected = (
                self.db.query(Ticket)
                .filter(Ticket.ticket_id == ticket_id)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return affected

    def update_internal_status_many(self, ticket_ids: Sequence[str], status: str, changed_at: datetime) -> int:
        """Move tickets to ``status``; tickets already there keep their timestamp and are not counted."""
        if not ticket_ids:
            return 0
        try:
            affected = (
                self.db.query(Ticket)
                .filter(Ticket.ticket_id.in_(list(ticket_ids)), Ticket.internal_status != status)
                .update(
                    {"internal_status": status, "internal_status_updated_at": changed_at},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return affected

    def query_page(self, clauses: list, order_by: list, offset: int, limit: int) -> Tuple[List[Ticket], int]:
        query = self.db.query(Ticket)
        if clauses:
            query = query.filter(*clauses)

        total = query.count()
        tickets = query.order_by(*order_by).offset(offset).limit(limit).all()
        return tickets, total

    def get_kpis(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
        total = self._in_created_range(
            self.db.query(func.count(Ticket.id)), start, end
        ).scalar() or 0
        total_value = self._in_created_range(
            self.db.query(func.coalesce(func.sum(Ticket.pnr_value), 0)), start, end
        ).scalar()
        pending = self._in_created_range(
            self.db.query(func.count(Ticket.id)).filter(Ticket.internal_status == INTERNAL_STATUS_PENDING),
            start,
            end,
        ).scalar() or 0

        return {
            "total_tickets": total,
            "total_value": float(total_value or 0),
            "pending_count": pending,
        }

    def get_status_distribution(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Dict[str, Any]]:
        query = self.db.query(
            Ticket.original_status,
            func.count(Ticket.id).label("count"),
        )
        results = (
            self._in_created_range(query, start, end)
            .group_by(Ticket.original_status)
            .order_by(func.count(Ticket.id).desc())
            .all()
        )
        return [{"name": r.original_status or "Unknown", "value": r.count} for r in results]

    def get_driver_distribution(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None, limit: int = 5
    ) -> List[Dict[str, Any]]:
        query = self.db.query(
            Ticket.driver_name,
            func.count(Ticket.id).label("count"),
        )
        results = (
            self._in_created_range(query, start, end)
            .group_by(Ticket.driver_name)
            .order_by(func.count(Ticket.id).desc(), Ticket.driver_name)
            .limit(limit)
            .all()
        )
        return [{"name": r.driver_name or "Unknown", "value": r.count} for r in results]

    def get_unique_drivers(self) -> List[str]:
        rows = (
            self.db.query(Ticket.driver_name)
            .distinct()
            .filter(Ticket.driver_name.isnot(None), Ticket.driver_name != "")
            .order_by(Ticket.driver_name)
            .all()
        )
        return [r[0] for r in rows]

    def list_by_created_range(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[Ticket]:
        query = self._in_created_range(self.db.query(Ticket), start, end)
        return query.order_by(Ticket.sla_deadline.asc().nullslast(), Ticket.ticket_id).all()
