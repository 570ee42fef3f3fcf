"""Flow document persistence"""
from .flow_store import FilesystemFlowStore, FlowStore, HttpFlowStore, InMemoryFlowStore

__all__ = ["FlowStore", "FilesystemFlowStore", "InMemoryFlowStore", "HttpFlowStore"]
