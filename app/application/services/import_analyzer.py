"""Smart import analysis — classify each CSV row as create, update or skip.

Rows are matched against stored tickets by ``ticket_id`` first and tracking
code (``spxtn``) second. Only operational columns are compared, so operator
triage (internal status and notes) never shows up as a change and is never
overwritten by a re-import. Repeated keys inside the same file are skipped
so one upload can't produce two conflicting writes for the same ticket.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import structlog

from app.application.services.batch_fetcher import ProgressCallback, TicketBatchFetcher
from app.domain.schemas.imports import FieldChange, ImportAnalysis, ImportPreviewItem, ImportSummary
from app.domain.schemas.ticket import TicketCreate, TicketRead

logger = structlog.get_logger(__name__)

ERROR_MISSING_TICKET_ID = "ticket_id missing"
ERROR_DUPLICATE_TICKET_ID = "duplicate ticket_id in file"
ERROR_DUPLICATE_TRACKING_CODE = "duplicate tracking code in file"
ERROR_NO_CHANGES = "no changes detected"

# Operational columns refreshed by imports, with their display labels
COMPARED_FIELDS = (
    ("driver_name", "Motorista"),
    ("station", "Estação"),
    ("pnr_value", "Valor PNR"),
    ("original_status", "Status"),
    ("sla_deadline", "Prazo SLA"),
)


def _comparable(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field == "pnr_value":
        return float(value)
    if isinstance(value, datetime):
        # SQLite hands back naive UTC, PostgreSQL aware values
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return value


def diff_operational_fields(existing: TicketRead, candidate: TicketCreate) -> List[FieldChange]:
    """Field-level changes between the stored ticket and the incoming row."""
    changes = []
    for field, label in COMPARED_FIELDS:
        old_value = getattr(existing, field)
        new_value = getattr(candidate, field)
        if _comparable(field, old_value) != _comparable(field, new_value):
            changes.append(FieldChange(field=label, old_value=old_value, new_value=new_value))
    return changes


def summarize(previews: Sequence[ImportPreviewItem]) -> ImportSummary:
    return ImportSummary(
        total=len(previews),
        to_create=sum(1 for p in previews if p.operation == "create"),
        to_update=sum(1 for p in previews if p.operation == "update"),
        to_skip=sum(1 for p in previews if p.operation == "skip"),
    )


class ImportAnalyzer:
    """Reconciles parsed CSV rows against the ticket store."""

    def __init__(self, fetcher: TicketBatchFetcher):
        self.fetcher = fetcher

    def analyze(
        self,
        candidates: Sequence[TicketCreate],
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportAnalysis:
        """Build the import preview.

        Store errors raised while looking up existing tickets propagate: a
        partial classification would be misleading, so the caller has to
        retry the whole analysis.
        """
        ticket_ids = [c.ticket_id for c in candidates if c.ticket_id]
        spxtns = [c.spxtn for c in candidates if c.spxtn]

        if not ticket_ids and not spxtns:
            previews = [
                ImportPreviewItem(ticket=c, operation="skip", error=ERROR_MISSING_TICKET_ID)
                for c in candidates
            ]
            return ImportAnalysis(previews=previews, summary=summarize(previews))

        existing = self.fetcher.fetch_existing(
            list(dict.fromkeys(ticket_ids)),
            list(dict.fromkeys(spxtns)),
            on_progress,
        )

        by_ticket_id: Dict[str, TicketRead] = {}
        by_spxtn: Dict[str, TicketRead] = {}
        for ticket in existing:
            by_ticket_id[ticket.ticket_id] = ticket
            if ticket.spxtn:
                by_spxtn[ticket.spxtn] = ticket

        seen_ticket_ids: set[str] = set()
        seen_spxtns: set[str] = set()
        previews: List[ImportPreviewItem] = []

        for candidate in candidates:
            if not candidate.ticket_id:
                previews.append(ImportPreviewItem(ticket=candidate, operation="skip", error=ERROR_MISSING_TICKET_ID))
                continue
            if candidate.ticket_id in seen_ticket_ids:
                previews.append(ImportPreviewItem(ticket=candidate, operation="skip", error=ERROR_DUPLICATE_TICKET_ID))
                continue
            if candidate.spxtn and candidate.spxtn in seen_spxtns:
                previews.append(
                    ImportPreviewItem(ticket=candidate, operation="skip", error=ERROR_DUPLICATE_TRACKING_CODE)
                )
                continue

            seen_ticket_ids.add(candidate.ticket_id)
            if candidate.spxtn:
                seen_spxtns.add(candidate.spxtn)

            match = by_ticket_id.get(candidate.ticket_id)
            if match is None and candidate.spxtn:
                match = by_spxtn.get(candidate.spxtn)

            if match is None:
                previews.append(ImportPreviewItem(ticket=candidate, operation="create"))
                continue

            # One stored ticket gets at most one write per file, whichever key matched it
            if match.ticket_id != candidate.ticket_id:
                if match.ticket_id in seen_ticket_ids:
                    previews.append(
                        ImportPreviewItem(ticket=candidate, operation="skip", error=ERROR_DUPLICATE_TICKET_ID)
                    )
                    continue
                seen_ticket_ids.add(match.ticket_id)

            changes = diff_operational_fields(match, candidate)
            if changes:
                previews.append(
                    ImportPreviewItem(ticket=candidate, operation="update", changes=changes, existing_ticket=match)
                )
            else:
                previews.append(ImportPreviewItem(ticket=candidate, operation="skip", error=ERROR_NO_CHANGES))

        summary = summarize(previews)
        logger.info(
            "Import analysis finished",
            total=summary.total,
            to_create=summary.to_create,
            to_update=summary.to_update,
            to_skip=summary.to_skip,
        )
        return ImportAnalysis(previews=previews, summary=summary)
