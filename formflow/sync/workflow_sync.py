"""Two-way sync between the canonical question list and the workflow editor

The Flow's questions and endings are the single source of truth. The
node/edge graph is a view derived from them plus the saved layout, and every
editor gesture is translated into a model mutation followed by a view update.

Edges record authored connections for layout only. They are never generated
from rules, and rules are never generated from edges: a drawn edge with no
rule behind it means plain fallthrough.
"""
import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..exceptions import FormFlowError, UnknownNodeError
from ..models.ending import Ending, EndingPreset
from ..models.flow import Flow
from ..models.question import CHOICE_TYPES, Question, QuestionType
from ..models.rule import Rule
from ..models.workflow_graph import (
    START_NODE_ID,
    Edge,
    Node,
    NodeKind,
    Position,
    WorkflowGraph,
    edge_id_for,
)

logger = logging.getLogger(__name__)

START_POSITION = Position(x=250, y=50)
DEFAULT_CHOICE_OPTIONS = ["Option 1", "Option 2", "Option 3"]

# Grid used when a node has no saved position
GRID_X, GRID_Y = 250, 200
GRID_COLUMNS, GRID_DX, GRID_DY = 3, 250, 150
ENDING_Y, ENDING_DX = 600, 200
QUICK_ADD_DX, QUICK_ADD_DY = 50, 180


def _default_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def grid_position(index: int) -> Position:
    return Position(
        x=GRID_X + (index % GRID_COLUMNS) * GRID_DX,
        y=GRID_Y + (index // GRID_COLUMNS) * GRID_DY,
    )


def ending_position(index: int) -> Position:
    return Position(x=GRID_X + index * ENDING_DX, y=ENDING_Y)


def new_question(question_id: str, question_type: Union[QuestionType, str]) -> Question:
    """Question with builder defaults for the given type"""
    question_type = QuestionType(question_type)
    return Question(
        id=question_id,
        type=question_type,
        title=f"New {question_type.value} Question",
        options=list(DEFAULT_CHOICE_OPTIONS) if question_type in CHOICE_TYPES else [],
        settings={"placeholder": "Enter your answer"},
    )


def _question_payload(question: Question) -> Dict[str, Any]:
    return {"label": question.title, "question": question.to_dict()}


def _ending_payload(ending: Ending) -> Dict[str, Any]:
    return {"label": ending.title, "ending": ending.to_dict()}


def derive_graph(flow: Flow) -> WorkflowGraph:
    """Regenerate the editor view from the canonical model
    
    Saved positions are reused; nodes without one are placed on a grid. Saved
    edges survive only while both endpoints exist, and at most one edge is kept
    per (source, target) pair. Deriving twice gives the same graph.
    """
    saved = {node.id: node.position for node in flow.workflow_nodes}

    nodes: List[Node] = [
        Node(
            id=START_NODE_ID,
            kind=NodeKind.START,
            position=saved.get(START_NODE_ID, START_POSITION).model_copy(),
            payload={"label": "Start", "formTitle": flow.title},
        )
    ]
    for index, question in enumerate(flow.questions):
        nodes.append(Node(
            id=question.id,
            kind=NodeKind.QUESTION,
            position=saved.get(question.id, grid_position(index)).model_copy(),
            payload=_question_payload(question),
        ))
    for index, ending in enumerate(flow.endings):
        nodes.append(Node(
            id=ending.id,
            kind=NodeKind.END,
            position=saved.get(ending.id, ending_position(index)).model_copy(),
            payload=_ending_payload(ending),
        ))

    node_ids = {node.id for node in nodes}
    edges: List[Edge] = []
    seen = set()
    for edge in flow.workflow_edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            continue
        if edge.endpoints in seen:
            continue
        seen.add(edge.endpoints)
        edges.append(edge.model_copy())

    return WorkflowGraph(nodes=nodes, edges=edges)


class WorkflowSync:
    """Applies workflow editor gestures to a Flow and keeps its view current
    
    Every gesture mutates the Flow (questions, endings, saved layout) and then
    re-derives the view, so the view can never drift from the model.
    
    Usage:
        sync = WorkflowSync(flow)
        question = sync.add_question("single-choice", source_node_id="q1")
        sync.delete_node("q2")
        graph = sync.graph
    """

    def __init__(self, flow: Flow, id_factory: Optional[Callable[[str], str]] = None):
        """Initialize sync over a flow
        
        Args:
            flow: Flow to edit in place
            id_factory: Builds a new id from a prefix ("q" or "end")
        """
        self.flow = flow
        self._id_factory = id_factory or _default_id
        self.graph = WorkflowGraph()
        self.sync()

    def sync(self) -> WorkflowGraph:
        """Re-derive the view from the model and store it as the saved layout
        
        Also used after edits made directly on the question list.
        """
        self.graph = derive_graph(self.flow)
        self.flow.workflow_nodes = [node.model_copy(deep=True) for node in self.graph.nodes]
        self.flow.workflow_edges = [edge.model_copy() for edge in self.graph.edges]
        return self.graph

    def _require_node(self, node_id: str) -> Node:
        node = self.graph.get_node(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    def _require_question(self, question_id: str) -> Question:
        question = self.flow.get_question(question_id)
        if question is None:
            raise UnknownNodeError(question_id, kind="question")
        return question

    def _require_ending(self, ending_id: str) -> Ending:
        ending = self.flow.get_ending(ending_id)
        if ending is None:
            raise UnknownNodeError(ending_id, kind="ending")
        return ending

    def _require_edge(self, edge_id: str) -> Edge:
        for edge in self.flow.workflow_edges:
            if edge.id == edge_id:
                return edge
        raise UnknownNodeError(edge_id, kind="edge")

    def _new_id(self, prefix: str) -> str:
        known = self.flow.known_ids() | {START_NODE_ID}
        new_id = self._id_factory(prefix)
        while new_id in known:
            new_id = self._id_factory(prefix)
        return new_id

    def _place(self, node_id: str, kind: NodeKind, position: Position) -> None:
        self.flow.workflow_nodes.append(Node(id=node_id, kind=kind, position=position))

    # -- node gestures ----------------------------------------------------

    def add_question(
        self,
        question_type: Union[QuestionType, str] = QuestionType.SHORT_TEXT,
        source_node_id: Optional[str] = None,
    ) -> Question:
        """Add a question, optionally connected from the node the author dragged from
        
        With a source, the new question is placed directly after it in the
        linear order (first, for the start node) so the drawn edge is the
        source's plain fallthrough. No rule is created.
        
        Args:
            question_type: Type of the new question
            source_node_id: Start or question node the gesture came from
            
        Returns:
            The new Question
            
        Raises:
            UnknownNodeError: If the source is missing or is an end node
        """
        source = None
        if source_node_id is not None:
            source = self._require_node(source_node_id)
            if source.kind == NodeKind.END:
                raise UnknownNodeError(source_node_id, kind="start or question node")

        question = new_question(self._new_id("q"), question_type)

        if source is None:
            self.flow.questions.append(question)
        else:
            insert_at = 0 if source.kind == NodeKind.START else self.flow.question_index(source.id) + 1
            self.flow.questions.insert(insert_at, question)
            self._place(question.id, NodeKind.QUESTION, Position(
                x=source.position.x + QUICK_ADD_DX,
                y=source.position.y + QUICK_ADD_DY,
            ))
            self.flow.workflow_edges.append(Edge(
                id=edge_id_for(source.id, question.id),
                source=source.id,
                target=question.id,
            ))

        self.sync()
        logger.debug("Added question %s (from %s)", question.id, source_node_id)
        return question

    def add_ending(self, preset: Union[EndingPreset, str] = EndingPreset.NEUTRAL) -> Ending:
        """Add an ending node pre-filled from a builder preset"""
        ending = Ending.from_preset(self._new_id("end"), EndingPreset(preset))
        self.flow.endings.append(ending)
        self.sync()
        return ending

    def delete_node(self, node_id: str) -> None:
        """Delete a question or ending node and every edge touching it
        
        Rules elsewhere that point at the deleted id are left dangling on
        purpose; the graph validator reports them so the author fixes them.
        
        Raises:
            FormFlowError: If node_id is the start node
            UnknownNodeError: If no such node exists
        """
        node = self._require_node(node_id)
        if node.kind == NodeKind.START:
            raise FormFlowError(
                "The start node cannot be deleted",
                help_text="Delete the questions after it instead"
            )

        if node.kind == NodeKind.QUESTION:
            self.flow.questions = [q for q in self.flow.questions if q.id != node_id]
        else:
            self.flow.endings = [e for e in self.flow.endings if e.id != node_id]
        self.flow.workflow_nodes = [n for n in self.flow.workflow_nodes if n.id != node_id]
        self.flow.workflow_edges = [
            e for e in self.flow.workflow_edges if e.source != node_id and e.target != node_id
        ]
        self.sync()
        logger.debug("Deleted node %s", node_id)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self._require_node(node_id)
        for node in self.flow.workflow_nodes:
            if node.id == node_id:
                node.position = Position(x=x, y=y)
        self.sync()

    # -- edge gestures ----------------------------------------------------

    def connect(self, source: str, target: str, label: Optional[str] = None) -> Edge:
        """Draw an edge; drawing the same connection twice returns the existing edge
        
        Raises:
            UnknownNodeError: If an endpoint is missing, the source is an end
                node, or the target is the start node
        """
        source_node = self._require_node(source)
        target_node = self._require_node(target)
        if source_node.kind == NodeKind.END:
            raise UnknownNodeError(source, kind="start or question node")
        if target_node.kind == NodeKind.START:
            raise UnknownNodeError(target, kind="question or end node")

        for edge in self.graph.edges:
            if edge.endpoints == (source, target):
                return edge

        edge = Edge(id=edge_id_for(source, target), source=source, target=target, label=label)
        self.flow.workflow_edges.append(edge)
        self.sync()
        return self.graph.get_edge(edge.id)

    def disconnect(self, edge_id: str) -> None:
        self._require_edge(edge_id)
        self.flow.workflow_edges = [e for e in self.flow.workflow_edges if e.id != edge_id]
        self.sync()

    def label_edge(self, edge_id: str, label: Optional[str]) -> Edge:
        self._require_edge(edge_id).label = label or None
        self.sync()
        return self.graph.get_edge(edge_id)

    # -- model edits from node panels -------------------------------------

    def update_question(self, question_id: str, **updates: Any) -> Question:
        """Edit question fields in place (the id is immutable)
        
        Raises:
            FormFlowError: If updates try to change the id
            UnknownNodeError: If the question does not exist
        """
        if "id" in updates and str(updates["id"]) != question_id:
            raise FormFlowError(
                f"Question id '{question_id}' cannot be changed",
                help_text="Delete the question and add a new one instead"
            )
        question = self._require_question(question_id)
        validated = Question.model_validate({**question.model_dump(), **updates})
        for name in Question.model_fields:
            setattr(question, name, getattr(validated, name))
        self.sync()
        return question

    def set_rules(self, question_id: str, rules: Iterable[Union[Rule, Dict[str, Any]]]) -> Question:
        """Replace a question's conditional logic from the embedded rule editor
        
        Edges are left untouched: a rule's jump target need not have a drawn edge.
        """
        question = self._require_question(question_id)
        question.conditional_logic = [
            rule if isinstance(rule, Rule) else Rule.model_validate(rule) for rule in rules
        ]
        self.sync()
        return question

    def update_ending(self, ending_id: str, **updates: Any) -> Ending:
        if "id" in updates and str(updates["id"]) != ending_id:
            raise FormFlowError(f"Ending id '{ending_id}' cannot be changed")
        ending = self._require_ending(ending_id)
        validated = Ending.model_validate({**ending.model_dump(), **updates})
        for name in Ending.model_fields:
            setattr(ending, name, getattr(validated, name))
        self.sync()
        return ending

    def move_question(self, question_id: str, new_index: int) -> None:
        """Reorder a question in the linear list editor"""
        question = self._require_question(question_id)
        self.flow.questions.remove(question)
        new_index = max(0, min(new_index, len(self.flow.questions)))
        self.flow.questions.insert(new_index, question)
        self.sync()
