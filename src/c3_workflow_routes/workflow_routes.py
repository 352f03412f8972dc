"""Workflow (process flowchart) routes."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from src.auth import CurrentUser, get_current_user
from src.c2_workflow_service import WorkflowService
from src.core.http_errors import http_error

logger = logging.getLogger(__name__)


class WorkflowRequest(BaseModel):
    title: Optional[str] = Field(None, description="Workflow title")
    description: Optional[str] = Field(None, description="What the flow documents")
    category: Optional[str] = Field(None, description="Free-form category")
    nodes: Optional[Any] = Field(None, description="Graph nodes as stored by the dashboard")
    start_node_id: Optional[str] = Field(None, description="Entry node id")


def create_workflow_router():
    """Create workflow router.

    Workflows are private; another user's workflow is reported as not found.

    Returns:
        APIRouter: Configured router with workflow endpoints
    """
    router = APIRouter(tags=["workflows"])

    @router.get("/workflows")
    async def list_workflows(current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await WorkflowService.list_workflows(current_user.id)
        except Exception as e:
            raise http_error(e, "list workflows")

    @router.get("/workflows/{workflow_id}")
    async def get_workflow(workflow_id: str, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await WorkflowService.get_workflow(workflow_id, current_user.id)
        except Exception as e:
            raise http_error(e, "load workflow")

    @router.post("/workflows", status_code=201)
    async def create_workflow(request: WorkflowRequest, current_user: CurrentUser = Depends(get_current_user)):
        try:
            return await WorkflowService.create_workflow(current_user.id, request.model_dump(exclude_unset=True))
        except Exception as e:
            raise http_error(e, "create workflow")

    @router.put("/workflows/{workflow_id}")
    async def update_workflow(
        workflow_id: str, request: WorkflowRequest, current_user: CurrentUser = Depends(get_current_user)
    ):
        try:
            return await WorkflowService.update_workflow(
                workflow_id, current_user.id, request.model_dump(exclude_unset=True)
            )
        except Exception as e:
            raise http_error(e, "update workflow")

    @router.delete("/workflows/{workflow_id}", status_code=204)
    async def delete_workflow(workflow_id: str, current_user: CurrentUser = Depends(get_current_user)):
        try:
            await WorkflowService.delete_workflow(workflow_id, current_user.id)
        except Exception as e:
            raise http_error(e, "delete workflow")
        return Response(status_code=204)

    return router
