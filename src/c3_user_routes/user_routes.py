"""User administration routes (administrators only)."""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_admin_user
from src.c2_user_service import UserService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class UpdateRoleRequest(BaseModel):
    role: str = Field(..., description="user or admin")


class UpdateKanbanPermissionRequest(BaseModel):
    can_edit_kanban: bool = Field(..., description="Allow moving and reordering Kanban cards")


def create_user_router():
    """Create the user administration router.

    Returns:
        APIRouter: Configured router with user listing, role and deletion endpoints
    """
    router = APIRouter(tags=["users"])

    @router.get("/users")
    async def list_users(admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await UserService.list_users()
        except Exception as e:
            raise http_error(e, "list users")

    @router.patch("/users/{user_id}/role")
    async def update_role(user_id: int, request: UpdateRoleRequest, admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await UserService.update_role(user_id, request.role, admin.id)
        except Exception as e:
            raise http_error(e, "update user role")

    @router.patch("/users/{user_id}/kanban")
    async def update_kanban_permission(
        user_id: int, request: UpdateKanbanPermissionRequest, admin: CurrentUser = Depends(get_admin_user)
    ):
        try:
            return await UserService.update_kanban_permission(user_id, request.can_edit_kanban)
        except Exception as e:
            raise http_error(e, "update Kanban permission")

    @router.delete("/admin/users/{user_id}")
    async def delete_user(user_id: int, admin: CurrentUser = Depends(get_admin_user)):
        try:
            return await UserService.delete_user(user_id, admin.id)
        except Exception as e:
            raise http_error(e, "delete user")

    return router
