"""Application services"""
from .flow_service import FlowAuthoringService

__all__ = ["FlowAuthoringService"]
