"""C3 Workflow Routes - process flowcharts."""
from src.c3_workflow_routes.workflow_routes import create_workflow_router
__all__ = ["create_workflow_router"]
