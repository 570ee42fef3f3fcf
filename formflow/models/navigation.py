"""Navigation decision returned by the resolver"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class NavigationAction(str, Enum):
    ADVANCE = "advance"
    JUMP = "jump"
    SUBMIT = "submit"
    DISQUALIFY = "disqualify"


@dataclass(frozen=True)
class NavigationResult:
    """Where the respondent goes after the current question
    
    next_index is set for advance and jump. target_id names an Ending when a
    rule jumped straight to one.
    """
    action: NavigationAction
    next_index: Optional[int] = None
    message: Optional[str] = None
    target_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.action in (NavigationAction.SUBMIT, NavigationAction.DISQUALIFY)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"action": self.action.value}
        if self.next_index is not None:
            data["nextIndex"] = self.next_index
        if self.message is not None:
            data["message"] = self.message
        if self.target_id is not None:
            data["targetId"] = self.target_id
        return data
