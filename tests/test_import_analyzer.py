"""
Tests for import preview classification.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.application.services.batch_fetcher import TicketBatchFetcher
from app.application.services.import_analyzer import (
    ERROR_DUPLICATE_TICKET_ID,
    ERROR_DUPLICATE_TRACKING_CODE,
    ERROR_MISSING_TICKET_ID,
    ERROR_NO_CHANGES,
    ImportAnalyzer,
)
from app.domain.models.ticket import Ticket
from app.infrastructure.repositories.ticket_repository import SQLAlchemyTicketRepository


@pytest.fixture
def analyzer(ticket_repo):
    return ImportAnalyzer(TicketBatchFetcher(ticket_repo, chunk_size=2))


class CountingRepository(SQLAlchemyTicketRepository):
    def __init__(self, db):
        super().__init__(db, Ticket)
        self.calls = 0

    def find_by_ticket_ids(self, ticket_ids):
        self.calls += 1
        return super().find_by_ticket_ids(ticket_ids)

    def find_by_spxtns(self, spxtns):
        self.calls += 1
        return super().find_by_spxtns(spxtns)


class UnavailableRepository(SQLAlchemyTicketRepository):
    def __init__(self, db):
        super().__init__(db, Ticket)

    def find_by_ticket_ids(self, ticket_ids):
        raise OperationalError("SELECT tickets", {}, Exception("timeout"))


def test_mixed_file_against_existing_ticket(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1", "spxtn": "BR1", "driver_name": "A", "pnr_value": 10})

    analysis = analyzer.analyze([
        make_candidate("T1", spxtn="BR1", driver_name="B", pnr_value=10),
        make_candidate("T2", spxtn="BR2"),
        make_candidate("T2", spxtn="BR3"),
        make_candidate(""),
    ])

    operations = [(p.operation, p.error) for p in analysis.previews]
    assert operations == [
        ("update", None),
        ("create", None),
        ("skip", ERROR_DUPLICATE_TICKET_ID),
        ("skip", ERROR_MISSING_TICKET_ID),
    ]

    update = analysis.previews[0]
    assert [(c.field, c.old_value, c.new_value) for c in update.changes] == [("Motorista", "A", "B")]
    assert update.existing_ticket.ticket_id == "T1"

    summary = analysis.summary
    assert (summary.total, summary.to_create, summary.to_update, summary.to_skip) == (4, 1, 1, 2)


def test_summary_counts_add_up(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1"}, {"ticket_id": "T2", "station": "RJ01"})

    analysis = analyzer.analyze([
        make_candidate("T1"),
        make_candidate("T2"),
        make_candidate("T3"),
        make_candidate("T3"),
        make_candidate("T4", spxtn="BR4"),
    ])

    summary = analysis.summary
    assert summary.total == len(analysis.previews) == 5
    assert summary.to_create + summary.to_update + summary.to_skip == summary.total
    assert (summary.to_create, summary.to_update, summary.to_skip) == (2, 1, 2)


def test_unchanged_row_is_skipped(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1", "pnr_value": 10.0})

    preview = analyzer.analyze([make_candidate("T1", pnr_value=10)]).previews[0]

    assert preview.operation == "skip"
    assert preview.error == ERROR_NO_CHANGES
    assert preview.changes == []


def test_internal_fields_are_not_compared(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1", "internal_status": "Concluído", "internal_notes": "resolvido"})

    preview = analyzer.analyze([make_candidate("T1")]).previews[0]

    assert preview.operation == "skip"


def test_every_operational_field_is_compared(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1"})

    preview = analyzer.analyze([
        make_candidate(
            "T1",
            driver_name="Outro",
            station="RJ02",
            pnr_value=99.9,
            original_status="Delivered",
            sla_deadline=datetime(2024, 6, 1, 8, 0),
        )
    ]).previews[0]

    assert preview.operation == "update"
    assert [c.field for c in preview.changes] == ["Motorista", "Estação", "Valor PNR", "Status", "Prazo SLA"]


def test_aware_deadline_matches_stored_utc_value(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "T1", "sla_deadline": datetime(2024, 5, 1, 12, 0)})

    preview = analyzer.analyze([
        make_candidate("T1", sla_deadline=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
    ]).previews[0]

    assert preview.operation == "skip"
    assert preview.error == ERROR_NO_CHANGES


def test_matches_by_tracking_code_when_ticket_id_differs(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "OLD-1", "spxtn": "BR1", "station": "SP01"})

    preview = analyzer.analyze([make_candidate("NEW-1", spxtn="BR1", station="SP02")]).previews[0]

    assert preview.operation == "update"
    assert preview.existing_ticket.ticket_id == "OLD-1"


def test_duplicate_tracking_code_in_file(analyzer, make_candidate):
    previews = analyzer.analyze([
        make_candidate("T1", spxtn="BR1"),
        make_candidate("T2", spxtn="BR1"),
    ]).previews

    assert [p.operation for p in previews] == ["create", "skip"]
    assert previews[1].error == ERROR_DUPLICATE_TRACKING_CODE


def test_first_occurrence_wins(analyzer, make_candidate):
    previews = analyzer.analyze([
        make_candidate("T1", driver_name="Primeiro"),
        make_candidate("T1", driver_name="Segundo"),
    ]).previews

    assert previews[0].operation == "create"
    assert previews[0].ticket.driver_name == "Primeiro"
    assert previews[1].error == ERROR_DUPLICATE_TICKET_ID


def test_no_keys_skips_everything_without_store_access(db_session, make_candidate):
    repo = CountingRepository(db_session)
    analysis = ImportAnalyzer(TicketBatchFetcher(repo)).analyze([make_candidate(""), make_candidate("")])

    assert repo.calls == 0
    assert [p.error for p in analysis.previews] == [ERROR_MISSING_TICKET_ID] * 2
    assert analysis.summary.to_skip == 2


def test_empty_file(analyzer):
    analysis = analyzer.analyze([])
    assert analysis.previews == []
    assert analysis.summary.total == 0


def test_store_failure_propagates(db_session, make_candidate):
    analyzer = ImportAnalyzer(TicketBatchFetcher(UnavailableRepository(db_session)))

    with pytest.raises(OperationalError):
        analyzer.analyze([make_candidate("T1")])


def test_progress_forwarded_from_fetch(analyzer, make_candidate):
    events = []
    analyzer.analyze(
        [make_candidate("T1", spxtn="BR1"), make_candidate("T2"), make_candidate("T3")],
        on_progress=events.append,
    )

    assert [e.current for e in events] == [1, 2, 3]
    assert events[-1].processed == events[-1].total_items == 4


def test_tracking_match_then_own_ticket_id_writes_once(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "OLD-1", "spxtn": "BR1"})

    previews = analyzer.analyze([
        make_candidate("NEW-1", spxtn="BR1", station="SP02"),
        make_candidate("OLD-1", station="SP03"),
    ]).previews

    assert [p.operation for p in previews] == ["update", "skip"]
    assert previews[1].error == ERROR_DUPLICATE_TICKET_ID


def test_own_ticket_id_then_tracking_match_writes_once(analyzer, seed_tickets, make_candidate):
    seed_tickets({"ticket_id": "OLD-1", "spxtn": "BR1"})

    previews = analyzer.analyze([
        make_candidate("OLD-1", station="SP03"),
        make_candidate("NEW-1", spxtn="BR1", station="SP02"),
    ]).previews

    assert [p.operation for p in previews] == ["update", "skip"]
    assert previews[1].error == ERROR_DUPLICATE_TICKET_ID
