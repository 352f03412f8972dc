"""C2 Workflow Service - Support decision trees."""
from src.c2_workflow_service.workflow_service import WorkflowService
__all__ = ["WorkflowService"]
