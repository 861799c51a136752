"""
Tests for import history and the full data reset.
"""

from sqlalchemy.exc import OperationalError

from app.application.services.import_log_service import clear_all_data, list_import_logs
from app.domain.models.ticket import Ticket
from app.infrastructure.repositories.ticket_repository import SQLAlchemyTicketRepository


class LockedTicketRepository(SQLAlchemyTicketRepository):
    def __init__(self, db):
        super().__init__(db, Ticket)

    def delete_all(self):
        raise OperationalError("DELETE FROM tickets", {}, Exception("lock timeout"))


def _log(log_repo, file_name, new_records=0):
    return log_repo.create({
        "file_name": file_name,
        "imported_by": "sistema",
        "total_rows": new_records,
        "new_records": new_records,
        "updated_records": 0,
        "skipped_records": 0,
        "details": {"items": [], "errors": []},
    })


def test_logs_are_listed_newest_first(log_repo):
    for name in ("jan.csv", "fev.csv", "mar.csv"):
        _log(log_repo, name)

    result = list_import_logs(log_repo, page=1, page_size=2)

    assert [log.file_name for log in result["items"]] == ["mar.csv", "fev.csv"]
    assert result["total"] == 3
    assert result["total_pages"] == 2


def test_clear_all_data_reports_each_stage(ticket_repo, log_repo, seed_tickets):
    seed_tickets({"ticket_id": "T1"}, {"ticket_id": "T2"})
    _log(log_repo, "jan.csv", new_records=2)
    events = []

    result = clear_all_data(ticket_repo, log_repo, on_progress=events.append)

    assert result.success
    assert result.deleted_tickets == 2
    assert result.deleted_logs == 1
    assert [e.stage for e in events] == ["counting", "deleting_logs", "deleting_tickets", "done"]
    assert events[0].total_tickets == 2
    assert events[0].total_logs == 1
    assert ticket_repo.count() == 0
    assert log_repo.count() == 0


def test_clear_all_data_failure_is_returned(db_session, log_repo, seed_tickets):
    seed_tickets({"ticket_id": "T1"})
    _log(log_repo, "jan.csv")

    result = clear_all_data(LockedTicketRepository(db_session), log_repo)

    assert not result.success
    assert result.deleted_logs == 1
    assert result.deleted_tickets == 0
    assert "lock timeout" in result.error
