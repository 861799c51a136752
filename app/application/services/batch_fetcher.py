"""Batched lookup of existing tickets by business key.

Large key sets are split into fixed-size chunks and queried with one
``IN`` query per chunk, strictly one after the other: ticket ids first,
then tracking codes. Any failing chunk aborts the whole fetch.
"""

from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import structlog

from app.application.services.batching import chunk_count, chunked
from app.config import get_settings
from app.domain.models.ticket import Ticket
from app.domain.repositories.ticket_repository import TicketRepository
from app.domain.schemas.imports import ImportProgress
from app.domain.schemas.ticket import TicketRead

settings = get_settings()
logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[ImportProgress], None]

STAGE_FETCH_BY_TICKET_ID = "fetching_by_ticket_id"
STAGE_FETCH_BY_TRACKING_CODE = "fetching_by_tracking_code"


class TicketBatchFetcher:
    """Fetch existing tickets for many keys without loading the whole table."""

    def __init__(self, repo: TicketRepository, chunk_size: int | None = None):
        self.repo = repo
        self.chunk_size = chunk_size or settings.FETCH_CHUNK_SIZE

    def iter_chunks(
        self, ticket_ids: Sequence[str], spxtns: Sequence[str]
    ) -> Iterator[Tuple[List[Ticket], ImportProgress]]:
        """Run the chunk queries one at a time, yielding each result with its progress."""
        phases = [
            (STAGE_FETCH_BY_TICKET_ID, ticket_ids, self.repo.find_by_ticket_ids, "ticket id"),
            (STAGE_FETCH_BY_TRACKING_CODE, spxtns, self.repo.find_by_spxtns, "código de rastreio"),
        ]
        total_chunks = chunk_count(len(ticket_ids), self.chunk_size) + chunk_count(len(spxtns), self.chunk_size)
        total_items = len(ticket_ids) + len(spxtns)

        current = 0
        processed = 0
        for stage, keys, find, label in phases:
            for chunk in chunked(keys, self.chunk_size):
                records = find(chunk)
                current += 1
                processed += len(chunk)
                yield records, ImportProgress(
                    current=current,
                    total=total_chunks,
                    processed=processed,
                    total_items=total_items,
                    stage=stage,
                    message=f"Buscando registros por {label}: lote {current} de {total_chunks}",
                )

    def fetch_existing(
        self,
        ticket_ids: Sequence[str],
        spxtns: Sequence[str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[TicketRead]:
        """Existing tickets matching any key, de-duplicated by ticket_id. Order is not guaranteed."""
        found: Dict[str, TicketRead] = {}

        for records, progress in self.iter_chunks(ticket_ids, spxtns):
            for record in records:
                if record.ticket_id not in found:
                    found[record.ticket_id] = TicketRead.model_validate(record)
            if on_progress:
                on_progress(progress)

        logger.info(
            "Existing tickets fetched",
            ticket_ids=len(ticket_ids),
            tracking_codes=len(spxtns),
            found=len(found),
        )
        return list(found.values())
