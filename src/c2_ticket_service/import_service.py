"""Import tickets from the helpdesk spreadsheet export (.xlsx)."""

import logging
from datetime import datetime, timedelta
from io import BytesIO
from zipfile import BadZipFile
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from src.core.database import get_db, Ticket
from src.c1_ticket_enums import KanbanStage, TicketPriority, TicketStatus, TicketType
from src.c2_ticket_service.ticket_service import TicketService

logger = logging.getLogger(__name__)

# Spreadsheet headers as exported by the helpdesk system
COLUMN_NUMBER = "Número do Chamado"
COLUMN_NOTES = "Observações do usuário"
COLUMN_STATUS = "Status"
COLUMN_URL = "URL"
COLUMN_REGISTERED = "Data de Registro"
COLUMN_PRIORITY = "Prioridade"
COLUMN_TYPE = "Tipo"

# Day 0 of Excel's 1900 date system as seen by Unix-based converters
EXCEL_EPOCH = datetime(1899, 12, 30)


def excel_serial_to_datetime(value: Any) -> Optional[datetime]:
    """Convert an Excel serial day number (or a date cell) to a datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        serial = float(value)
    except (TypeError, ValueError):
        return datetime.fromisoformat(str(value).strip())
    return EXCEL_EPOCH + timedelta(days=serial)


def _slug(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().lower().replace(" ", "_")
    return text or None


def _choice(value: Any, enum_cls, default: str, field: str) -> str:
    slug = _slug(value)
    if slug is None:
        return default
    allowed = [member.value for member in enum_cls]
    if slug not in allowed:
        raise ValueError(f"Invalid {field}: {value}")
    return slug


def _ticket_number(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid ticket number: {value}")


def read_rows(content: bytes) -> List[Dict[str, Any]]:
    """Rows of the first worksheet as dicts keyed by the header row."""
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as e:
        raise ValueError(f"Invalid Excel file: {e}")

    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            return []
        keys = [str(h).strip() if h is not None else "" for h in header]
        records = []
        for values in rows:
            if values is None or all(v is None or v == "" for v in values):
                continue
            records.append(dict(zip(keys, values)))
        return records
    finally:
        workbook.close()


class TicketImportService:
    """Creates tickets from spreadsheet rows."""

    @staticmethod
    def row_to_fields(row: Dict[str, Any]) -> Dict[str, Any]:
        """Map one spreadsheet row to ticket fields. Raises ValueError on bad cells."""
        number = _ticket_number(row.get(COLUMN_NUMBER))
        notes = row.get(COLUMN_NOTES)
        notes = str(notes).strip() if notes is not None else ""

        return {
            "ticket_number": number,
            "title": notes or f"Ticket #{number if number is not None else '?'}",
            "description": notes or None,
            "status": _choice(row.get(COLUMN_STATUS), TicketStatus, TicketStatus.ABERTO.value, "status"),
            "priority": _choice(row.get(COLUMN_PRIORITY), TicketPriority, TicketPriority.MEDIA.value, "priority"),
            "type": _choice(row.get(COLUMN_TYPE), TicketType, TicketType.OUTROS.value, "type"),
            "url": (str(row[COLUMN_URL]).strip() or None) if row.get(COLUMN_URL) else None,
            "registration_date": excel_serial_to_datetime(row.get(COLUMN_REGISTERED)),
        }

    @staticmethod
    async def import_tickets(content: bytes, user_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Import every row of the first sheet.

        Rows whose ticket number already exists are skipped. Rows with invalid
        cells are reported in ``errors`` and do not stop the import.

        Returns:
            ``{"imported": int, "skipped": int, "errors": [{"row": n, "error": str}]}``
        """
        if not content:
            raise ValueError("No file uploaded")

        rows = read_rows(content)
        imported, skipped = 0, 0
        errors: List[Dict[str, Any]] = []
        stage = KanbanStage.BACKLOG.value

        with get_db() as db:
            known_numbers = {
                n for (n,) in db.query(Ticket.ticket_number).filter(Ticket.ticket_number.isnot(None)).all()
            }
            position = TicketService._next_position(db, stage)

            # Spreadsheet row numbers are 1-based and row 1 is the header
            for row_number, row in enumerate(rows, start=2):
                try:
                    fields = TicketImportService.row_to_fields(row)
                except ValueError as e:
                    errors.append({"row": row_number, "error": str(e)})
                    continue

                number = fields["ticket_number"]
                if number is not None and number in known_numbers:
                    skipped += 1
                    continue

                db.add(Ticket(**fields, stage=stage, position=position, creator_id=user_id))
                position += 1
                imported += 1
                if number is not None:
                    known_numbers.add(number)

        logger.info(f"Ticket import finished: {imported} imported, {skipped} skipped, {len(errors)} errors")
        return {"imported": imported, "skipped": skipped, "errors": errors}
