"""Resilient auto-save of respondent answers

Each answer change is persisted with bounded retries and exponential backoff.
Failures never lose the locally held answers; they surface as a "not saved"
signal instead. A save response may carry a server-side disqualification,
which ends the session immediately.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..config import AutoSaveConfig
from ..core.observer import (
    SaveFailed,
    SaveSucceeded,
    SessionDisqualified,
    SessionObserver,
    SessionStateChanged,
)
from ..models.session import (
    ALLOWED_TRANSITIONS,
    SaveOutcome,
    SaveResponse,
    SaveResult,
    SessionState,
)
from .transport import AnswerPersistence

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class AutoSavePipeline:
    """Per-session auto-save with retry, session pinning and stale-write protection

    Writes are serialized: at most one persistence call is in flight. Every
    answer change gets a sequence number; a field remembers the newest
    sequence the server has confirmed, and an older write that is still
    retrying is dropped as stale once a newer one for the same field landed.
    """

    def __init__(
        self,
        persistence: AnswerPersistence,
        config: Optional[AutoSaveConfig] = None,
        sleep: Optional[Sleeper] = None,
        session_id: Optional[str] = None
    ):
        """Initialize pipeline

        Args:
            persistence: Answer persistence collaborator
            config: Retry policy (defaults: 3 attempts, 1s base delay)
            sleep: Awaitable used for backoff waits (asyncio.sleep by default)
            session_id: Known session id when resuming a session
        """
        self.persistence = persistence
        self.config = config or AutoSaveConfig()
        self._sleep = sleep or asyncio.sleep

        self.session_id: Optional[str] = session_id
        self.answers: Dict[str, Any] = {}
        self.current_step: int = 0
        self.state = SessionState.NEW
        self.disqualification_reason: Optional[str] = None

        # User-visible "not saved" flag; cleared by the next successful save
        self.not_saved = False
        self.last_result: Optional[SaveResult] = None

        self._sequence = 0
        self._latest: Dict[str, int] = {}
        self._confirmed: Dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._observers: List[SessionObserver] = []

    def register_observer(self, observer: SessionObserver) -> None:
        """Register observer for session events"""
        if observer not in self._observers:
            self._observers.append(observer)

    def deregister_observer(self, observer: SessionObserver) -> None:
        """Deregister observer from session events"""
        if observer in self._observers:
            self._observers.remove(observer)

    async def _notify_observers(self, notification: Any) -> None:
        """Notify all registered observers of event"""
        for observer in self._observers:
            await observer.receive_notification_async(notification)

    def backoff(self, attempt: int) -> float:
        """Backoff step for a 1-based attempt: base, 2*base, 4*base, ..."""
        return self.config.base_delay * (2 ** (attempt - 1))

    # -- lifecycle --------------------------------------------------------

    async def _transition(self, new_state: SessionState) -> bool:
        if new_state == self.state:
            return True
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            logger.warning("Ignoring session transition %s -> %s", self.state.value, new_state.value)
            return False
        previous, self.state = self.state, new_state
        await self._notify_observers(SessionStateChanged(previous=previous, current=new_state))
        return True

    async def mark_qualified(self) -> bool:
        return await self._transition(SessionState.QUALIFIED)

    async def mark_disqualified(self, reason: Optional[str], source: str = "local") -> bool:
        """Force the DISQUALIFIED terminal state; later saves are suppressed"""
        if self.state == SessionState.DISQUALIFIED:
            return True
        if not await self._transition(SessionState.DISQUALIFIED):
            return False
        self.disqualification_reason = reason
        logger.info("Session %s disqualified (%s): %s", self.session_id, source, reason)
        await self._notify_observers(SessionDisqualified(reason=reason, source=source))
        return True

    async def mark_booked(self) -> bool:
        """Record a confirmed booking; only valid after qualification"""
        return await self._transition(SessionState.BOOKED)

    # -- saving -----------------------------------------------------------

    async def record_answer(self, field: str, value: Any, current_step: Optional[int] = None) -> SaveResult:
        """Store an answer locally and persist the new snapshot

        Args:
            field: Question id
            value: Answer value
            current_step: Respondent's current step, sent alongside the answers

        Returns:
            SaveResult; NOT_SAVED after exhausting retries, SUPPRESSED once the
            session is disqualified or booked
        """
        if self.state.suppresses_saves:
            logger.debug("Auto-save suppressed in state %s", self.state.value)
            return self._finish(SaveResult(outcome=SaveOutcome.SUPPRESSED, session_id=self.session_id))

        self.answers[field] = value
        if current_step is not None:
            self.current_step = current_step
        self._sequence += 1
        sequence = self._sequence
        self._latest[field] = sequence

        if self.state == SessionState.NEW:
            await self._transition(SessionState.IN_PROGRESS)

        async with self._lock:
            return self._finish(await self._persist(field, sequence))

    def _finish(self, result: SaveResult) -> SaveResult:
        self.last_result = result
        return result

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "answers": dict(self.answers),
            "currentStep": self.current_step,
        }

    async def _persist(self, field: str, sequence: int) -> SaveResult:
        max_attempts = self.config.max_attempts
        last_error: Optional[str] = None

        for attempt in range(1, max_attempts + 1):
            if self.state.suppresses_saves:
                return SaveResult(outcome=SaveOutcome.SUPPRESSED, attempts=attempt - 1, session_id=self.session_id)

            confirmed = self._confirmed.get(field, 0)
            if confirmed > sequence:
                logger.debug("Dropping stale save of %s (seq %d < %d)", field, sequence, confirmed)
                return SaveResult(outcome=SaveOutcome.STALE, attempts=attempt - 1, session_id=self.session_id)
            if confirmed == sequence:
                # an earlier call already carried this value to the server
                return SaveResult(outcome=SaveOutcome.SAVED, attempts=attempt - 1, session_id=self.session_id)

            payload = self._snapshot()
            carried = dict(self._latest)
            timeout = self.backoff(attempt)
            response: Optional[SaveResponse] = None

            try:
                response = await asyncio.wait_for(self.persistence.save(payload), timeout=timeout)
            except asyncio.TimeoutError:
                last_error = f"timed out after {timeout}s"
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"

            if response is not None:
                if response.ok:
                    return await self._on_success(field, carried, response, attempt)
                last_error = "rate limited" if response.rate_limited else f"HTTP {response.status}"

            logger.warning("Auto-save of %s attempt %d/%d failed: %s", field, attempt, max_attempts, last_error)
            if attempt < max_attempts:
                await self._sleep(timeout)

        self.not_saved = True
        await self._notify_observers(SaveFailed(field=field, attempts=max_attempts, error=last_error))
        return SaveResult(outcome=SaveOutcome.NOT_SAVED, attempts=max_attempts, session_id=self.session_id)

    async def _on_success(
        self,
        field: str,
        carried: Dict[str, int],
        response: SaveResponse,
        attempt: int
    ) -> SaveResult:
        if self.session_id is None and response.lead_id:
            self.session_id = response.lead_id
            logger.debug("Session pinned to %s", self.session_id)

        for name, seq in carried.items():
            if seq > self._confirmed.get(name, 0):
                self._confirmed[name] = seq
        self.not_saved = False
        await self._notify_observers(SaveSucceeded(session_id=self.session_id, field=field, attempts=attempt))

        if response.disqualified:
            await self.mark_disqualified(response.reason, source="server")

        return SaveResult(
            outcome=SaveOutcome.SAVED,
            attempts=attempt,
            session_id=self.session_id,
            disqualified=response.disqualified,
            reason=response.reason
        )
