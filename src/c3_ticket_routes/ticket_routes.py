"""Ticket, Kanban, comment and statistics routes."""

import logging
from typing import Optional, List
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_admin_user, get_current_user, get_kanban_editor
from src.c2_ticket_service import (
    TicketService,
    TicketActivityService,
    TicketCommentService,
    TicketStatsService,
    TicketImportService,
)
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


# Request Models
class CreateTicketRequest(BaseModel):
    title: Optional[str] = Field(None, description="Ticket title")
    description: Optional[str] = Field(None, description="Detailed description")
    status: Optional[str] = Field(None, description="aberto, fechado, pendente or em_andamento")
    priority: Optional[str] = Field(None, description="baixa, media or alta")
    type: Optional[str] = Field(None, description="Ticket category")
    stage: Optional[str] = Field(None, description="Kanban stage (defaults to backlog)")
    url: Optional[str] = Field(None, description="Link to the ticket in the source system")
    ticket_number: Optional[int] = Field(None, description="Number in the source system")
    registration_date: Optional[datetime] = Field(None, description="When the ticket was registered")
    assignee_id: Optional[int] = Field(None, description="Assigned user")


class UpdateTicketRequest(CreateTicketRequest):
    """Same fields as creation; only the fields sent are changed."""


class MoveStageRequest(BaseModel):
    stage: Optional[str] = Field(None, description="Target Kanban stage")


class ReorderTicketsRequest(BaseModel):
    stage: Optional[str] = Field(None, description="Kanban stage being reordered")
    order: List[int] = Field(..., description="Ticket ids in display order")


class AddCommentRequest(BaseModel):
    content: Optional[str] = Field(None, description="Comment text; @user@example.com mentions follow the ticket")


def create_ticket_router():
    """Create the ticket router.

    Statistics routes are registered before ``/tickets/{ticket_id}`` so the
    literal ``stats`` segment is not captured as an id.

    Returns:
        APIRouter: Configured router with ticket endpoints
    """
    router = APIRouter(tags=["tickets"])

    # Statistics (public)
    @router.get("/tickets/stats/overview")
    async def stats_overview():
        try:
            return await TicketStatsService.overview()
        except Exception as e:
            raise http_error(e, "load ticket statistics")

    @router.get("/tickets/stats/monthly")
    async def stats_monthly_evolution():
        try:
            return await TicketStatsService.monthly_evolution()
        except Exception as e:
            raise http_error(e, "load monthly statistics")

    @router.get("/tickets/stats/critical")
    async def stats_critical():
        try:
            return await TicketStatsService.critical_tickets()
        except Exception as e:
            raise http_error(e, "load critical tickets")

    @router.get("/tickets/stats/weekly/{week_key}")
    async def stats_weekly(week_key: str):
        try:
            return await TicketStatsService.weekly_stats(week_key)
        except Exception as e:
            raise http_error(e, "load weekly statistics")

    @router.get("/tickets/stats/month/{month_key}")
    async def stats_month(month_key: str):
        try:
            return await TicketStatsService.month_stats(month_key)
        except Exception as e:
            raise http_error(e, "load month statistics")

    @router.get("/tickets/stats/available-periods")
    async def stats_available_periods():
        try:
            return await TicketStatsService.available_periods()
        except Exception as e:
            raise http_error(e, "load available periods")

    @router.get("/tickets/stats/quarterly/{quarter_key}")
    async def stats_quarterly(quarter_key: str):
        try:
            return await TicketStatsService.quarterly_stats(quarter_key)
        except Exception as e:
            raise http_error(e, "load quarterly statistics")

    @router.get("/tickets/stats/available-quarters")
    async def stats_available_quarters():
        try:
            return await TicketStatsService.available_quarters()
        except Exception as e:
            raise http_error(e, "load available quarters")

    # Tickets
    @router.get("/tickets")
    async def list_tickets():
        """All tickets in Kanban order."""
        try:
            return await TicketService.list_tickets()
        except Exception as e:
            raise http_error(e, "list tickets")

    @router.post("/tickets", status_code=201)
    async def create_ticket(request: CreateTicketRequest, admin: CurrentUser = Depends(get_admin_user)):
        logger.info(f"[TICKET_CREATE] Admin {admin.id}: {request.title!r}")
        try:
            return await TicketService.create_ticket(request.model_dump(exclude_unset=True), admin.id)
        except Exception as e:
            raise http_error(e, "create ticket")

    @router.post("/tickets/reorder")
    async def reorder_tickets(request: ReorderTicketsRequest, editor: CurrentUser = Depends(get_kanban_editor)):
        """Persist the card order of one Kanban stage."""
        try:
            return await TicketService.reorder_tickets(request.stage, request.order)
        except Exception as e:
            raise http_error(e, "reorder tickets")

    @router.post("/tickets/import")
    async def import_tickets(
        file: Optional[UploadFile] = File(None),
        admin: CurrentUser = Depends(get_admin_user),
    ):
        """Import tickets from an Excel (.xlsx) export."""
        if file is None:
            raise HTTPException(status_code=400, detail="No file uploaded")
        try:
            content = await file.read()
            logger.info(f"[TICKET_IMPORT] Admin {admin.id} importing {file.filename} ({len(content)} bytes)")
            return await TicketImportService.import_tickets(content, admin.id)
        except Exception as e:
            raise http_error(e, "import tickets")

    @router.get("/tickets/{ticket_id}")
    async def get_ticket(ticket_id: int):
        try:
            return await TicketService.get_ticket(ticket_id)
        except Exception as e:
            raise http_error(e, "load ticket")

    @router.put("/tickets/{ticket_id}")
    async def update_ticket(
        ticket_id: int, request: UpdateTicketRequest, admin: CurrentUser = Depends(get_admin_user)
    ):
        try:
            return await TicketService.update_ticket(ticket_id, request.model_dump(exclude_unset=True), admin.id)
        except Exception as e:
            raise http_error(e, "update ticket")

    @router.patch("/tickets/{ticket_id}/stage")
    async def move_ticket_stage(
        ticket_id: int, request: MoveStageRequest, editor: CurrentUser = Depends(get_kanban_editor)
    ):
        try:
            return await TicketService.move_ticket_stage(ticket_id, request.stage, editor.id)
        except Exception as e:
            raise http_error(e, "move ticket")

    @router.delete("/tickets/{ticket_id}", status_code=204)
    async def delete_ticket(ticket_id: int, admin: CurrentUser = Depends(get_admin_user)):
        try:
            await TicketService.delete_ticket(ticket_id)
        except Exception as e:
            raise http_error(e, "delete ticket")
        return Response(status_code=204)

    # Comments, activity and followers
    @router.get("/tickets/{ticket_id}/comments")
    async def list_comments(ticket_id: int):
        try:
            return await TicketCommentService.list_comments(ticket_id)
        except Exception as e:
            raise http_error(e, "list comments")

    @router.post("/tickets/{ticket_id}/comments", status_code=201)
    async def add_comment(
        ticket_id: int, request: AddCommentRequest, current_user: CurrentUser = Depends(get_current_user)
    ):
        try:
            return await TicketCommentService.add_comment(ticket_id, current_user.id, request.content)
        except Exception as e:
            raise http_error(e, "add comment")

    @router.get("/tickets/{ticket_id}/activities")
    async def list_activities(ticket_id: int):
        try:
            return await TicketActivityService.list_activities(ticket_id)
        except Exception as e:
            raise http_error(e, "list activities")

    @router.get("/tickets/{ticket_id}/followers")
    async def list_followers(ticket_id: int, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await TicketCommentService.list_followers(ticket_id)
        except Exception as e:
            raise http_error(e, "list followers")

    @router.post("/tickets/{ticket_id}/follow")
    async def toggle_follow(ticket_id: int, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await TicketCommentService.toggle_follow(ticket_id, current_user.id)
        except Exception as e:
            raise http_error(e, "follow ticket")

    return router
