"""Authoring-side save and load of flows"""
import logging
from typing import Optional

from ..exceptions import FlowValidationError
from ..models.flow import Flow
from ..storage.flow_store import FlowStore
from ..sync.workflow_sync import derive_graph
from ..validation.graph_validator import validate

logger = logging.getLogger(__name__)


class FlowAuthoringService:
    """Validates and persists flows edited in the form builder"""

    def __init__(self, store: FlowStore):
        self.store = store

    async def save(self, flow: Flow, block_on_warnings: bool = False) -> Flow:
        """Derive the workflow graph, validate and persist a flow

        Unknown scoring keys are dropped from the persisted copy; the flow
        passed in is left untouched.

        Args:
            flow: Flow being saved
            block_on_warnings: Reject the save when the report has warnings

        Returns:
            Flow as stored, including any id the store assigned

        Raises:
            FlowValidationError: On structural errors (or warnings when blocking)
            PersistenceError: If the store fails
        """
        report = validate(flow.questions, flow.endings)
        if not report.valid:
            raise FlowValidationError(report)
        if block_on_warnings and report.warnings:
            raise FlowValidationError(report, blocked_on_warnings=True)

        for issue in report.warnings:
            logger.info("Saving flow %s with warning: %s", flow.id, issue.message)

        sanitized = flow.model_copy(update={"questions": report.sanitized_questions})
        graph = derive_graph(sanitized)
        to_store = sanitized.model_copy(update={
            "workflow_nodes": graph.nodes,
            "workflow_edges": graph.edges,
        })
        stored = await self.store.save(flow.id, to_store.to_document())
        return Flow.from_document(stored)

    async def load(self, flow_id: str) -> Optional[Flow]:
        document = await self.store.load(flow_id)
        if document is None:
            return None
        return Flow.from_document(document)

    async def delete(self, flow_id: str) -> None:
        await self.store.delete(flow_id)
