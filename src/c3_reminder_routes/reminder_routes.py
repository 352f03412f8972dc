"""Reminder routes. Every reminder belongs to the authenticated user."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_current_user
from src.c2_reminder_service import ReminderService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class ReminderRequest(BaseModel):
    title: Optional[str] = Field(None, description="Reminder title")
    description: Optional[str] = Field(None, description="Free text")
    due_date: Optional[str] = Field(None, description="YYYY-MM-DD or ISO datetime")
    recurring: Optional[bool] = Field(None, description="Reopen every day after completion")
    completed: Optional[bool] = Field(None, description="Completion flag")
    priority: Optional[str] = Field(None, description="baixa, media, alta or urgente")
    category: Optional[str] = Field(None, description="Free-form category")
    order: Optional[int] = Field(None, description="Manual display order")


class ReorderRemindersRequest(BaseModel):
    updates: List[Dict[str, Any]] = Field(..., description="[{id, order}] pairs")


def create_reminder_router():
    """Create the reminder router.

    Returns:
        APIRouter: Configured router with reminder CRUD, reorder and counters
    """
    router = APIRouter(tags=["reminders"])

    @router.get("/reminders")
    async def list_reminders(current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await ReminderService.list_reminders(current_user.id)
        except Exception as e:
            raise http_error(e, "list reminders")

    @router.get("/reminders/counts")
    async def reminder_counts(current_user: CurrentUser = Depends(get_current_user)):
        """Pending, urgent and overdue counters for the header badge."""
        try:
            return await ReminderService.get_counts(current_user.id)
        except Exception as e:
            raise http_error(e, "count reminders")

    @router.post("/reminders/reorder")
    async def reorder_reminders(
        request: ReorderRemindersRequest, current_user: CurrentUser = Depends(get_current_user)
    ):
        try:
            return await ReminderService.reorder_reminders(current_user.id, request.updates)
        except Exception as e:
            raise http_error(e, "reorder reminders")

    @router.post("/reminders", status_code=201)
    async def create_reminder(request: ReminderRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await ReminderService.create_reminder(current_user.id, request.model_dump(exclude_unset=True))
        except Exception as e:
            raise http_error(e, "create reminder")

    @router.put("/reminders/{reminder_id}")
    async def update_reminder(
        reminder_id: str, request: ReminderRequest, current_user: CurrentUser = Depends(get_current_user)
    ):
        try:
            return await ReminderService.update_reminder(
                reminder_id, current_user.id, request.model_dump(exclude_unset=True)
            )
        except Exception as e:
            raise http_error(e, "update reminder")

    @router.delete("/reminders/{reminder_id}", status_code=204)
    async def delete_reminder(reminder_id: str, current_user: CurrentUser = Depends(get_current_user)):
        try:
            await ReminderService.delete_reminder(reminder_id, current_user.id)
        except Exception as e:
            raise http_error(e, "delete reminder")
        return Response(status_code=204)

    return router
