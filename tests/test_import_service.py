"""Tests for the spreadsheet ticket import."""

from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from src.c2_ticket_service import TicketImportService, TicketService
from src.c2_ticket_service.import_service import excel_serial_to_datetime

HEADER = ["Número do Chamado", "Observações do usuário", "Status", "URL", "Data de Registro", "Prioridade", "Tipo"]


def build_workbook(rows, header=HEADER) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(header)
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestExcelDates:

    def test_serial_number(self):
        assert excel_serial_to_datetime(45726) == datetime(2025, 3, 10)

    def test_fractional_serial_keeps_time(self):
        assert excel_serial_to_datetime(45726.5) == datetime(2025, 3, 10, 12, 0)

    def test_date_cells_and_blanks(self):
        assert excel_serial_to_datetime(datetime(2025, 1, 2, 8, 30)) == datetime(2025, 1, 2, 8, 30)
        assert excel_serial_to_datetime(None) is None
        assert excel_serial_to_datetime("") is None


class TestImportTickets:

    @pytest.mark.asyncio
    async def test_imports_rows(self, admin):
        content = build_workbook([
            [1001, "Printer jammed", "Fechado", "https://helpdesk/1001", 45726, "Alta", "correcao_tecnica"],
            [1002, None, None, None, None, None, None],
        ])

        result = await TicketImportService.import_tickets(content, admin.id)

        assert result == {"imported": 2, "skipped": 0, "errors": []}
        tickets = {t["ticket_number"]: t for t in await TicketService.list_tickets()}
        assert tickets[1001]["status"] == "fechado"
        assert tickets[1001]["priority"] == "alta"
        assert tickets[1001]["registration_date"] == "2025-03-10T00:00:00Z"
        assert tickets[1001]["stage"] == "backlog"
        assert tickets[1002]["title"] == "Ticket #1002"
        assert tickets[1002]["status"] == "aberto"
        assert tickets[1002]["type"] == "outros"

    @pytest.mark.asyncio
    async def test_existing_numbers_are_skipped(self, admin):
        await TicketService.create_ticket({"title": "Already here", "ticket_number": 1001}, admin.id)
        content = build_workbook([
            [1001, "Duplicate", None, None, None, None, None],
            [1003, "New one", None, None, None, None, None],
            [1003, "Repeated in the same file", None, None, None, None, None],
        ])

        result = await TicketImportService.import_tickets(content, admin.id)

        assert result["imported"] == 1
        assert result["skipped"] == 2

    @pytest.mark.asyncio
    async def test_bad_rows_are_reported_and_skipped(self, admin):
        content = build_workbook([
            [2001, "Fine", None, None, None, None, None],
            [2002, "Bad status", "resolvido", None, None, None, None],
            ["abc", "Bad number", None, None, None, None, None],
        ])

        result = await TicketImportService.import_tickets(content, admin.id)

        assert result["imported"] == 1
        assert [e["row"] for e in result["errors"]] == [3, 4]
        assert "Invalid status" in result["errors"][0]["error"]

    @pytest.mark.asyncio
    async def test_imported_tickets_go_after_existing_cards(self, admin):
        existing = await TicketService.create_ticket({"title": "Existing"}, admin.id)

        await TicketImportService.import_tickets(build_workbook([[3001, "Imported", None, None, None, None, None]]))

        imported = [t for t in await TicketService.list_tickets() if t["ticket_number"] == 3001][0]
        assert imported["position"] > existing["position"]

    @pytest.mark.asyncio
    async def test_not_an_excel_file(self):
        with pytest.raises(ValueError, match="Invalid Excel file"):
            await TicketImportService.import_tickets(b"number,title\n1,x\n")

    @pytest.mark.asyncio
    async def test_empty_upload(self):
        with pytest.raises(ValueError, match="No file uploaded"):
            await TicketImportService.import_tickets(b"")


class TestImportEndpoint:

    XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def test_admin_import(self, client, admin):
        content = build_workbook([[4001, "From the export", "Pendente", None, 45726, "Baixa", "orientacao"]])

        response = client.post(
            "/api/tickets/import", files={"file": ("export.xlsx", content, self.XLSX)}, headers=admin.headers
        )

        assert response.status_code == 200
        assert response.json()["imported"] == 1
        assert client.get("/api/tickets").json()[0]["title"] == "From the export"

    def test_requires_admin(self, client, regular_user):
        content = build_workbook([])

        response = client.post(
            "/api/tickets/import", files={"file": ("export.xlsx", content, self.XLSX)}, headers=regular_user.headers
        )

        assert response.status_code == 403

    def test_invalid_file_is_400(self, client, admin):
        response = client.post(
            "/api/tickets/import", files={"file": ("export.xlsx", b"not a workbook", self.XLSX)}, headers=admin.headers
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid Excel file")
