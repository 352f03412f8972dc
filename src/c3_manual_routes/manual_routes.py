"""Manual routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_current_user
from src.c2_manual_service import ManualService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class CreateManualRequest(BaseModel):
    title: Optional[str] = Field(None, description="Manual title")
    content: Optional[str] = Field(None, description="Manual body")
    is_global: bool = Field(False, description="Visible to every user (administrators only)")


def create_manual_router():
    router = APIRouter(tags=["manuals"])

    @router.get("/manuals")
    async def list_manuals(current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await ManualService.list_manuals(current_user.id)
        except Exception as e:
            raise http_error(e, "list manuals")

    @router.post("/manuals", status_code=201)
    async def create_manual(request: CreateManualRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await ManualService.create_manual(
                current_user.id, current_user.is_admin, request.title, request.content, request.is_global
            )
        except Exception as e:
            raise http_error(e, "create manual")

    @router.delete("/manuals/{manual_id}", status_code=204)
    async def delete_manual(manual_id: str, current_user: CurrentUser = Depends(get_current_user)):
        try:
            await ManualService.delete_manual(manual_id, current_user.id, current_user.is_admin)
        except Exception as e:
            raise http_error(e, "delete manual")
        return Response(status_code=204)

    return router
