"""Flow document: canonical question list, endings and editor layout"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ending import Ending
from .question import Question
from .workflow_graph import Edge, Node


class Flow(BaseModel):
    """Complete form or qualification flow
    
    questions and endings are authoritative. workflow_nodes and
    workflow_edges are the last saved editor layout and are re-derivable.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Form id; assigned by the store on first save")
    title: str = "Untitled Form"
    description: str = ""
    questions: List[Question] = Field(default_factory=list)
    endings: List[Ending] = Field(default_factory=list)
    workflow_nodes: List[Node] = Field(default_factory=list)
    workflow_edges: List[Edge] = Field(default_factory=list)
    settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    def question_index(self, question_id: str) -> int:
        """Position of a question in the linear order, or -1"""
        for index, question in enumerate(self.questions):
            if question.id == question_id:
                return index
        return -1

    def get_question(self, question_id: str) -> Optional[Question]:
        index = self.question_index(question_id)
        return self.questions[index] if index >= 0 else None

    def get_ending(self, ending_id: str) -> Optional[Ending]:
        for ending in self.endings:
            if ending.id == ending_id:
                return ending
        return None

    def known_ids(self) -> set:
        return {q.id for q in self.questions} | {e.id for e in self.endings}

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON document shared with the persistence collaborator"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "questions": [q.to_dict() for q in self.questions],
            "endings": [e.to_dict() for e in self.endings],
            "workflow_nodes": [n.model_dump(mode="json", by_alias=True) for n in self.workflow_nodes],
            "workflow_edges": [e.model_dump(mode="json", exclude_none=True) for e in self.workflow_edges],
            "settings": self.settings,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "Flow":
        """Deserialize from a persisted document"""
        return cls.model_validate(data)
