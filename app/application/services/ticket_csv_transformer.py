"""Ticket CSV transformer.

Handles:
- Reading the semicolon-delimited ticket export (encoding fallback)
- Mapping export headers to ticket fields
- Parsing Brazilian currency values ("R$ 1.200,50")
- Parsing SLA deadlines in the export's date formats
"""

import io
import logging
import re
from datetime import datetime
from typing import Dict, List, Mapping, Optional

import pandas as pd
import pytz

from app.config import get_settings
from app.domain.schemas.ticket import TicketCreate

settings = get_settings()
logger = logging.getLogger(__name__)
tz = pytz.timezone(settings.TIMEZONE)

# Export header → ticket field
TICKET_COLUMN_MAP = {
    "IHS Ticket ID": "ticket_id",
    "SPXTN": "spxtn",
    "SPX TN": "spxtn",
    "Tracking Code": "spxtn",
    "Código de Rastreio": "spxtn",
    "Driver": "driver_name",
    "Station": "station",
    "PNR Order Value": "pnr_value",
    "Status": "original_status",
    "SLA Deadline": "sla_deadline",
}

DEFAULT_DRIVER = "Não Informado"
DEFAULT_STATUS = "Unknown"

DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%Y-%m-%d",
    "%d/%m/%Y",
)


def parse_currency(value: Optional[str]) -> float:
    """Converts "R$ 1.200,50" → 1200.5. Anything unparseable becomes 0."""
    if not value:
        return 0.0
    clean = re.sub(r"[^\d.,-]", "", str(value))
    if "," in clean and ("." not in clean or clean.index(".") < clean.index(",")):
        # Brazilian format: dots group thousands, comma marks decimals
        clean = clean.replace(".", "").replace(",", ".")
    else:
        clean = clean.replace(",", "")
    try:
        return float(clean)
    except ValueError:
        return 0.0


def parse_deadline(value: Optional[str]) -> Optional[datetime]:
    """Parse an SLA deadline; naive values are read in the configured timezone."""
    if not value or not str(value).strip():
        return None
    s = str(value).strip()

    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        parsed = None
        for fmt in DATETIME_FORMATS:
            try:
                parsed = datetime.strptime(s, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.warning(f"Unrecognized SLA deadline: {s!r}")
        return None
    if parsed.tzinfo is None:
        parsed = tz.localize(parsed)
    return parsed.astimezone(pytz.utc)


def _clean_text(value) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def row_to_ticket(row: Mapping[str, str]) -> TicketCreate:
    """Map one export row to a candidate ticket. Unknown headers are ignored."""
    fields: Dict[str, str] = {}
    for header, value in row.items():
        field = TICKET_COLUMN_MAP.get(str(header).strip())
        if field and field not in fields:
            fields[field] = value

    return TicketCreate(
        ticket_id=_clean_text(fields.get("ticket_id")) or "",
        spxtn=_clean_text(fields.get("spxtn")),
        driver_name=_clean_text(fields.get("driver_name")) or DEFAULT_DRIVER,
        station=_clean_text(fields.get("station")) or "",
        pnr_value=parse_currency(fields.get("pnr_value")),
        original_status=_clean_text(fields.get("original_status")) or DEFAULT_STATUS,
        sla_deadline=parse_deadline(fields.get("sla_deadline")),
    )


def rows_to_tickets(rows: List[Mapping[str, str]]) -> List[TicketCreate]:
    return [row_to_ticket(row) for row in rows]


def _decode(content: bytes) -> str:
    for enc in ("utf-8-sig", "latin-1"):
        try:
            return content.decode(enc)
        except UnicodeDecodeError:
            continue
    return content.decode("latin-1", errors="replace")


def read_csv_rows(content: bytes, delimiter: Optional[str] = None) -> List[Dict[str, str]]:
    """Read a CSV export into header → string rows, keeping every value as text."""
    text = _decode(content)
    if not text.strip():
        return []

    df = pd.read_csv(
        io.StringIO(text),
        sep=delimiter or settings.CSV_DELIMITER,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        on_bad_lines="skip",
    )
    df.columns = [str(c).strip() for c in df.columns]
    df = df[~(df == "").all(axis=1)]
    return df.to_dict(orient="records")
