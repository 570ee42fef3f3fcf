"""Lead score models"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ScoreEntry:
    question_id: str
    title: str
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {"questionId": self.question_id, "title": self.title, "score": self.score}


@dataclass
class LeadScore:
    """Total score plus per-question contributions (zero contributions omitted)"""
    total: int = 0
    breakdown: List[ScoreEntry] = field(default_factory=list)

    def qualified(self, threshold: int = 0) -> bool:
        return self.total > threshold

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "breakdown": [e.to_dict() for e in self.breakdown]}
