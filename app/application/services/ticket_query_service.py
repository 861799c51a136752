"""Ticket listing — builds the filtered, sorted, paginated dashboard query.

The global search box and the tracking column accept either a single term
(substring search) or several pasted codes, one per line. With more than one
code the query switches to an exact ``IN`` lookup and the response reports
which of the requested codes came back in the page.
"""

from typing import List, Optional, Tuple

import structlog
from sqlalchemy import or_

from app.application.services.tracking_codes import is_numeric_code, parse_tracking_codes
from app.domain.models.ticket import Ticket
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.ticket import ColumnFilters, SearchResult, TicketPage, TicketPageParams, TicketRead

logger = structlog.get_logger(__name__)

VALUE_200_PLUS = "200-plus"

# Dashboard status labels → patterns over the source system status
STATUS_LABEL_PATTERNS = {
    "devolvido": ["%reversed%", "%returned%"],
    "faturamento": ["%forbilling%"],
    "entregue": ["%delivered%"],
    "criado": ["%created%"],
    "aguard. resp.": ["%pending driver reply%"],
    "análise resp.": ["%review driver reply%"],
    "cancelado": ["%cancelled%"],
}


def multi_code_clause(codes: List[str]):
    """Exact lookup: every code against the tracking code, all-digit codes also against ticket_id."""
    numeric_codes = [c for c in codes if is_numeric_code(c)]
    conditions = [Ticket.spxtn.in_(codes)]
    if numeric_codes:
        conditions.append(Ticket.ticket_id.in_(numeric_codes))
    return or_(*conditions)


def search_clause(search_term: Optional[str]) -> Tuple[Optional[object], List[str]]:
    """Clause for the global search box, plus the codes when in multi-code mode."""
    codes = parse_tracking_codes(search_term)
    if not codes:
        return None, []
    if len(codes) > 1:
        return multi_code_clause(codes), codes

    term = codes[0]
    like = f"%{term}%"
    if is_numeric_code(term):
        return or_(Ticket.ticket_id == term, Ticket.station.ilike(like), Ticket.spxtn.ilike(like)), []
    return or_(Ticket.station.ilike(like), Ticket.spxtn.ilike(like)), []


def tracking_clause(tracking: Optional[str]) -> Tuple[Optional[object], List[str]]:
    codes = parse_tracking_codes(tracking)
    if not codes:
        return None, []
    if len(codes) > 1:
        return multi_code_clause(codes), codes

    term = codes[0]
    if is_numeric_code(term):
        return or_(Ticket.ticket_id == term, Ticket.spxtn.ilike(f"%{term}%")), []
    return Ticket.spxtn.ilike(f"%{term}%"), []


def _to_number(text: str) -> Optional[float]:
    try:
        return float(text.strip().replace(",", "."))
    except ValueError:
        return None


def value_clauses(value: Optional[str]) -> list:
    """``"200-plus"`` or a ``"min-max"`` range over pnr_value. Unparseable bounds are ignored."""
    if not value:
        return []
    if value.strip() == VALUE_200_PLUS:
        return [Ticket.pnr_value >= 200]

    parts = value.split("-")
    if len(parts) != 2:
        return []

    clauses = []
    low, high = _to_number(parts[0]), _to_number(parts[1])
    if low is not None:
        clauses.append(Ticket.pnr_value >= low)
    if high is not None:
        clauses.append(Ticket.pnr_value <= high)
    return clauses


def status_clause(status: Optional[str]):
    if not status:
        return None
    patterns = STATUS_LABEL_PATTERNS.get(status.strip().lower())
    if patterns is None:
        return Ticket.original_status.ilike(f"%{status}%")
    return or_(*[Ticket.original_status.ilike(p) for p in patterns])


def column_clauses(filters: Optional[ColumnFilters]) -> Tuple[list, List[str]]:
    if filters is None:
        return [], []

    clauses = []
    tracking, codes = tracking_clause(filters.tracking)
    if tracking is not None:
        clauses.append(tracking)

    if filters.driver and filters.driver.strip():
        like = f"%{filters.driver.strip()}%"
        clauses.append(or_(Ticket.driver_name.ilike(like), Ticket.station.ilike(like)))

    clauses.extend(value_clauses(filters.value))

    status = status_clause(filters.status)
    if status is not None:
        clauses.append(status)

    if filters.internal:
        clauses.append(Ticket.internal_status == filters.internal)

    if filters.notes:
        clauses.append(Ticket.internal_notes.ilike(f"%{filters.notes}%"))

    return clauses, codes


def order_by_clause(sort_by: str, sort_order: str) -> list:
    ascending = sort_order != "desc"
    if sort_by == "internal_status_updated_at":
        column = Ticket.internal_status_updated_at
        return [(column.asc() if ascending else column.desc()).nullslast(), Ticket.id]
    column = Ticket.sla_deadline
    return [column.asc() if ascending else column.desc(), Ticket.id]


def build_search_result(searched_codes: List[str], tickets: List[TicketRead]) -> SearchResult:
    """Which requested codes appear in this page (by either key)."""
    present = set()
    for ticket in tickets:
        present.add(ticket.ticket_id)
        if ticket.spxtn:
            present.add(ticket.spxtn)

    found = [code for code in searched_codes if code in present]
    not_found = [code for code in searched_codes if code not in present]
    return SearchResult(searched_codes=searched_codes, found_codes=found, not_found_codes=not_found)


def fetch_page(repo: TicketRepository, params: TicketPageParams) -> TicketPage:
    """One page of tickets plus the total count. Store errors propagate unchanged."""
    clauses = []

    search, searched_codes = search_clause(params.search_term)
    if search is not None:
        clauses.append(search)

    filter_clauses, tracking_codes = column_clauses(params.filters)
    clauses.extend(filter_clauses)
    if tracking_codes:
        searched_codes = tracking_codes

    offset = (params.page - 1) * params.page_size
    tickets, total = repo.query_page(
        clauses,
        order_by_clause(params.sort_by, params.sort_order),
        offset,
        params.page_size,
    )
    data = [TicketRead.model_validate(t) for t in tickets]

    search_result = build_search_result(searched_codes, data) if searched_codes else None
    if search_result:
        logger.info(
            "Multi-code search",
            searched=len(search_result.searched_codes),
            found=len(search_result.found_codes),
        )

    return TicketPage(
        data=data,
        count=total,
        page=params.page,
        page_size=params.page_size,
        total_pages=(total + params.page_size - 1) // params.page_size,
        search_result=search_result,
    )
