"""
Tests for report period resolution and report data.
"""

from datetime import date, datetime

import pytest

from app.application.services.report_service import generate_report_data, resolve_period
from app.core.exceptions import BusinessRuleViolationException
from app.domain.schemas.report import ReportParams

TODAY = date(2024, 5, 15)


class TestResolvePeriod:

    def test_all(self):
        assert resolve_period(ReportParams(period_type="all"), TODAY) == (None, None, "Todos os dados")

    def test_relative_period(self):
        start, end, label = resolve_period(ReportParams(period_type="last30"), TODAY)

        assert start == date(2024, 4, 15)
        assert end == TODAY
        assert label == "Últimos 30 dias"

    def test_custom_period_label(self):
        params = ReportParams(period_type="custom", start_date=date(2024, 5, 1), end_date=date(2024, 5, 10))

        assert resolve_period(params, TODAY)[2] == "01/05/2024 a 10/05/2024"

    @pytest.mark.parametrize("start,end,message", [
        (None, date(2024, 5, 10), "Por favor, selecione as datas inicial e final"),
        (date(2024, 5, 10), date(2024, 5, 1), "A data inicial não pode ser maior que a data final"),
        (date(2024, 5, 10), date(2024, 6, 1), "Não é permitido selecionar datas futuras"),
    ])
    def test_invalid_custom_period(self, start, end, message):
        params = ReportParams(period_type="custom", start_date=start, end_date=end)

        with pytest.raises(BusinessRuleViolationException) as exc_info:
            resolve_period(params, TODAY)
        assert exc_info.value.message == message


def test_report_statistics(ticket_repo, seed_tickets):
    seed_tickets(
        {"ticket_id": "T1", "pnr_value": 10.25},
        {"ticket_id": "T2", "pnr_value": 20.0, "internal_status": "Em Análise"},
        {"ticket_id": "T3", "pnr_value": None, "internal_status": "Concluído"},
    )

    report = generate_report_data(ticket_repo, ReportParams(), today=TODAY)

    assert report.metadata.total_records == 3
    assert report.metadata.period == "Todos os dados"
    assert report.statistics.total_value == 30.25
    assert (report.statistics.pending_count, report.statistics.in_review_count, report.statistics.done_count) == (1, 1, 1)


def test_report_limited_to_creation_period(ticket_repo, seed_tickets):
    seed_tickets(
        {"ticket_id": "RECENT", "created_time": datetime(2024, 5, 10, 14, 0)},
        {"ticket_id": "OLD", "created_time": datetime(2024, 3, 1, 14, 0)},
    )

    report = generate_report_data(ticket_repo, ReportParams(period_type="last7"), today=TODAY)

    assert [t.ticket_id for t in report.tickets] == ["RECENT"]
