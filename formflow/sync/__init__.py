"""Workflow editor synchronization"""
from .workflow_sync import WorkflowSync, derive_graph, new_question

__all__ = ["WorkflowSync", "derive_graph", "new_question"]
