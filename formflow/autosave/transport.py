"""Answer persistence collaborators for respondent auto-save"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Union

import aiohttp

from ..models.session import SaveResponse

logger = logging.getLogger(__name__)


class AnswerPersistence(ABC):
    """Abstract interface for the answer persistence / qualification collaborator"""
    
    @abstractmethod
    async def save(self, payload: Dict[str, Any]) -> SaveResponse:
        """Persist one answer snapshot
        
        Args:
            payload: {"sessionId", "answers", "currentStep"}
            
        Returns:
            SaveResponse with status and any leadId/disqualification signal
            
        Raises:
            Exception: Transport failures; the pipeline counts them as failed attempts
        """
        pass


class HttpAnswerPersistence(AnswerPersistence):
    """Posts answer snapshots to <base_url>/<slug>/auto-save"""
    
    def __init__(self, base_url: str, slug: str):
        self.url = f"{base_url.rstrip('/')}/{slug}/auto-save"
    
    @staticmethod
    def request_body(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Map a pipeline snapshot onto the auto-save endpoint's field names"""
        body = {
            "formData": payload.get("answers") or {},
            "currentStep": payload.get("currentStep", 0),
        }
        if payload.get("sessionId"):
            body["leadId"] = payload["sessionId"]
        return body

    async def save(self, payload: Dict[str, Any]) -> SaveResponse:
        async with aiohttp.ClientSession() as session:
            async with session.post(self.url, json=self.request_body(payload)) as response:
                try:
                    data = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    data = None
                if not isinstance(data, dict):
                    data = None
                logger.debug("Auto-save POST %s -> %s", self.url, response.status)
                return SaveResponse.from_payload(response.status, data)


ScriptedOutcome = Union[SaveResponse, Exception]


class InMemoryAnswerPersistence(AnswerPersistence):
    """AnswerPersistence for tests and local simulation
    
    Scripted outcomes (responses to return or exceptions to raise) are
    consumed first, one per call; after that every call succeeds. disqualify_when may inspect
    the answers and return a reason to emulate server-side rules.
    """
    
    def __init__(
        self,
        script: Optional[List[ScriptedOutcome]] = None,
        disqualify_when: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None
    ):
        self.script: List[ScriptedOutcome] = list(script or [])
        self.disqualify_when = disqualify_when
        self.calls: List[Dict[str, Any]] = []
        self.saved: Dict[str, Dict[str, Any]] = {}
        self._lead_ids = itertools.count(1)
    
    async def save(self, payload: Dict[str, Any]) -> SaveResponse:
        self.calls.append(payload)
        if self.script:
            outcome = self.script.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        
        lead_id = payload.get("sessionId") or f"lead-{next(self._lead_ids)}"
        self.saved[lead_id] = dict(payload.get("answers") or {})
        reason = self.disqualify_when(self.saved[lead_id]) if self.disqualify_when else None
        return SaveResponse(status=200, lead_id=lead_id, disqualified=reason is not None, reason=reason)
