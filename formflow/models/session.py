"""Respondent session state and auto-save results"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .navigation import NavigationResult


class SessionState(str, Enum):
    """Lifecycle of a respondent session
    
    NEW -> IN_PROGRESS -> QUALIFIED | DISQUALIFIED -> BOOKED (qualification flows only)
    """
    NEW = "new"
    IN_PROGRESS = "in_progress"
    QUALIFIED = "qualified"
    DISQUALIFIED = "disqualified"
    BOOKED = "booked"

    @property
    def suppresses_saves(self) -> bool:
        return self in (SessionState.DISQUALIFIED, SessionState.BOOKED)


ALLOWED_TRANSITIONS = {
    SessionState.NEW: {SessionState.IN_PROGRESS, SessionState.QUALIFIED, SessionState.DISQUALIFIED},
    SessionState.IN_PROGRESS: {SessionState.QUALIFIED, SessionState.DISQUALIFIED},
    SessionState.QUALIFIED: {SessionState.BOOKED, SessionState.DISQUALIFIED},
    SessionState.DISQUALIFIED: set(),
    SessionState.BOOKED: set(),
}


class SaveOutcome(str, Enum):
    SAVED = "saved"
    NOT_SAVED = "not_saved"
    STALE = "stale"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class SaveResponse:
    """What the answer persistence collaborator returned for one attempt"""
    status: int
    lead_id: Optional[str] = None
    disqualified: bool = False
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def rate_limited(self) -> bool:
        return self.status == 429

    @classmethod
    def from_payload(cls, status: int, payload: Optional[Dict[str, Any]]) -> "SaveResponse":
        payload = payload or {}
        lead_id = payload.get("leadId")
        return cls(
            status=status,
            lead_id=str(lead_id) if lead_id is not None else None,
            disqualified=bool(payload.get("disqualified", False)),
            reason=payload.get("reason"),
        )


@dataclass(frozen=True)
class SaveResult:
    """Outcome of one record_answer call after all retries"""
    outcome: SaveOutcome
    attempts: int = 0
    session_id: Optional[str] = None
    disqualified: bool = False
    reason: Optional[str] = None

    @property
    def saved(self) -> bool:
        return self.outcome == SaveOutcome.SAVED


@dataclass(frozen=True)
class StepCheck:
    """Result of checking an answer before navigation
    
    ok=False keeps the respondent on the question. disqualify=True ends the
    session with message.
    """
    ok: bool = True
    error: Optional[str] = None
    disqualify: bool = False
    message: Optional[str] = None


@dataclass
class StepOutcome:
    """What happened after the respondent answered the current question
    
    error is set when the respondent stays on the question. navigation is the
    resolver's decision when the answer was accepted.
    """
    state: SessionState
    index: int
    navigation: Optional[NavigationResult] = None
    error: Optional[str] = None
    message: Optional[str] = None
    ending_id: Optional[str] = None
    save: Optional[SaveResult] = None

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.QUALIFIED, SessionState.DISQUALIFIED, SessionState.BOOKED)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"state": self.state.value, "index": self.index}
        if self.navigation is not None:
            data["navigation"] = self.navigation.to_dict()
        for key in ("error", "message", "ending_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.save is not None:
            data["save"] = self.save.outcome.value
        return data
