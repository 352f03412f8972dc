from src.c1_workflow_models.workflow import Workflow

__all__ = ["Workflow"]
