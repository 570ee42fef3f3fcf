"""Observer pattern for respondent session events"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models.session import SessionState


@dataclass
class SaveSucceeded:
    """Emitted when an answer change was persisted"""
    session_id: Optional[str]
    field: str
    attempts: int
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "SaveSucceeded",
            "session_id": self.session_id,
            "field": self.field,
            "attempts": self.attempts
        }


@dataclass
class SaveFailed:
    """Emitted when every attempt failed; the answer is kept locally"""
    field: str
    attempts: int
    error: Optional[str] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "SaveFailed",
            "field": self.field,
            "attempts": self.attempts,
            "error": self.error
        }


@dataclass
class SessionDisqualified:
    """Emitted when a session is disqualified, locally or by the server"""
    reason: Optional[str]
    source: str
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "SessionDisqualified",
            "reason": self.reason,
            "source": self.source
        }


@dataclass
class SessionStateChanged:
    """Emitted on every lifecycle transition"""
    previous: SessionState
    current: SessionState
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "SessionStateChanged",
            "previous": self.previous.value,
            "current": self.current.value
        }


# Union type for all notification types
SessionNotification = (
    SaveSucceeded |
    SaveFailed |
    SessionDisqualified |
    SessionStateChanged
)


class SessionObserver(ABC):
    """Abstract base class for session event observers"""
    
    @abstractmethod
    async def receive_notification_async(
        self, 
        notification: SessionNotification
    ) -> None:
        """Handle notification from a respondent session
        
        Args:
            notification: Event notification
        """
        pass
