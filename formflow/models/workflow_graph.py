"""Node/edge view of a flow used by the visual editor

Nodes and edges are values keyed by id. Question and end nodes share their id
with the Question or Ending they display, so no mapping table is needed to
reconcile the two representations.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

START_NODE_ID = "start"


class NodeKind(str, Enum):
    START = "start"
    QUESTION = "question"
    END = "end"


class Position(BaseModel):
    x: float = 0
    y: float = 0


class Node(BaseModel):
    """Workflow editor node"""
    id: str
    kind: NodeKind = Field(..., alias="type")
    position: Position = Field(default_factory=Position)
    payload: Dict[str, Any] = Field(default_factory=dict, alias="data")

    model_config = {"populate_by_name": True}


class Edge(BaseModel):
    """Authored connection between two nodes, used for layout only"""
    id: str
    source: str
    target: str
    label: Optional[str] = None

    @property
    def endpoints(self) -> tuple:
        return (self.source, self.target)


class WorkflowGraph(BaseModel):
    """Complete node/edge view"""
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    @property
    def start_nodes(self) -> List[Node]:
        return [n for n in self.nodes if n.kind == NodeKind.START]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.model_dump(mode="json", by_alias=True) for n in self.nodes],
            "edges": [e.model_dump(mode="json", exclude_none=True) for e in self.edges],
        }


def edge_id_for(source: str, target: str) -> str:
    """Edge ids are derived from their endpoints"""
    return f"e-{source}-{target}"
