"""Service layer for support workflows (decision trees)."""

import logging
from typing import List, Dict, Any

from src.core.database import get_db, Workflow
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "category", "nodes", "start_node_id")


def workflow_to_dict(workflow: Workflow) -> Dict[str, Any]:
    return {
        "id": workflow.id,
        "user_id": workflow.user_id,
        "title": workflow.title,
        "description": workflow.description,
        "category": workflow.category,
        "nodes": workflow.nodes,
        "start_node_id": workflow.start_node_id,
        "created_at": to_iso(workflow.created_at),
        "updated_at": to_iso(workflow.updated_at),
    }


class WorkflowService:
    """Per-user workflow storage. Workflows of other users look like missing ones."""

    @staticmethod
    def _owned(db, workflow_id: str, user_id: int) -> Workflow:
        workflow = db.query(Workflow).filter(Workflow.id == workflow_id).first()
        if not workflow or workflow.user_id != user_id:
            raise NotFoundError("Workflow not found")
        return workflow

    @staticmethod
    async def list_workflows(user_id: int) -> List[Dict[str, Any]]:
        with get_db() as db:
            workflows = (
                db.query(Workflow)
                .filter(Workflow.user_id == user_id)
                .order_by(Workflow.created_at.desc())
                .all()
            )
            return [workflow_to_dict(w) for w in workflows]

    @staticmethod
    async def get_workflow(workflow_id: str, user_id: int) -> Dict[str, Any]:
        with get_db() as db:
            return workflow_to_dict(WorkflowService._owned(db, workflow_id, user_id))

    @staticmethod
    async def create_workflow(user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValueError("Title is required")

        with get_db() as db:
            workflow = Workflow(
                user_id=user_id,
                title=title,
                description=data.get("description") or None,
                category=data.get("category") or None,
                nodes=data.get("nodes"),
                start_node_id=data.get("start_node_id") or None,
            )
            db.add(workflow)
            db.flush()
            logger.info(f"Workflow {workflow.id} created by user {user_id}")
            return workflow_to_dict(workflow)

    @staticmethod
    async def update_workflow(
        workflow_id: str, user_id: int, updates: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Partial update; keys absent from ``updates`` keep their value."""
        if "title" in updates and not (updates["title"] or "").strip():
            raise ValueError("Title cannot be empty")

        with get_db() as db:
            workflow = WorkflowService._owned(db, workflow_id, user_id)
            for field in UPDATABLE_FIELDS:
                if field in updates:
                    setattr(workflow, field, updates[field])
            db.flush()
            return workflow_to_dict(workflow)

    @staticmethod
    async def delete_workflow(workflow_id: str, user_id: int) -> None:
        with get_db() as db:
            db.delete(WorkflowService._owned(db, workflow_id, user_id))
        logger.info(f"Workflow {workflow_id} deleted by user {user_id}")
