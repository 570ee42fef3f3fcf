"""Respondent session: one walk through a flow

Shared by the builder preview, the standalone form runtime and the embedded
booking qualifier. Each answer is auto-saved, checked by the step gates and
then handed to the navigation resolver.
"""
import logging
from typing import Any, List, Optional

from ..config import EngineConfig
from ..core.navigation import resolve
from ..core.observer import SessionObserver
from ..core.scoring import score
from ..exceptions import FormFlowError
from ..models.ending import Ending
from ..models.flow import Flow
from ..models.navigation import NavigationAction, NavigationResult
from ..models.question import Question
from ..models.scoring import LeadScore
from ..models.session import SessionState, StepOutcome
from ..validation.step_validators import check_answer
from .pipeline import AutoSavePipeline
from .transport import InMemoryAnswerPersistence

logger = logging.getLogger(__name__)


class RespondentSession:
    """Drives a respondent through a flow's questions

    Example:
        session = RespondentSession(flow)
        outcome = await session.answer("Enterprise")
        if outcome.finished:
            ...
    """

    def __init__(
        self,
        flow: Flow,
        pipeline: Optional[AutoSavePipeline] = None,
        config: Optional[EngineConfig] = None
    ):
        self.flow = flow
        self.config = config or EngineConfig()
        self.pipeline = pipeline or AutoSavePipeline(InMemoryAnswerPersistence(), self.config.autosave)
        self.index = 0
        self.path: List[str] = [flow.questions[0].id] if flow.questions else []
        self.ending: Optional[Ending] = None
        self.message: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self.pipeline.state

    @property
    def answers(self):
        return self.pipeline.answers

    @property
    def finished(self) -> bool:
        return self.state in (SessionState.QUALIFIED, SessionState.DISQUALIFIED, SessionState.BOOKED)

    @property
    def current_question(self) -> Optional[Question]:
        if self.finished or not (0 <= self.index < len(self.flow.questions)):
            return None
        return self.flow.questions[self.index]

    def register_observer(self, observer: SessionObserver) -> None:
        self.pipeline.register_observer(observer)

    def _outcome(self, **kwargs) -> StepOutcome:
        return StepOutcome(state=self.state, index=self.index, **kwargs)

    async def set_answer(self, question_id: str, value: Any):
        """Record an answer change without navigating (auto-save on edit)"""
        return await self.pipeline.record_answer(question_id, value, current_step=self.index)

    async def answer(self, value: Any) -> StepOutcome:
        """Answer the current question and move on

        Raises:
            FormFlowError: If the session has already finished or the flow has no questions
        """
        question = self.current_question
        if question is None:
            raise FormFlowError(
                "No question to answer",
                help_text="The session has finished or the flow has no questions"
            )

        save = await self.pipeline.record_answer(question.id, value, current_step=self.index)
        if self.state == SessionState.DISQUALIFIED:
            self.message = self.pipeline.disqualification_reason or self.config.qualification.disqualify_fallback_message
            return self._outcome(message=self.message, save=save)

        check = check_answer(question, value, self.config.qualification)
        if not check.ok:
            return self._outcome(error=check.error, save=save)
        if check.disqualify:
            return await self._disqualify(check.message, "gate", save=save)

        navigation = resolve(
            self.index,
            self.flow.questions,
            self.answers,
            self.flow.endings,
            self.config.qualification.disqualify_fallback_message,
        )
        logger.debug("Question %s -> %s", question.id, navigation.action.value)

        if navigation.action in (NavigationAction.ADVANCE, NavigationAction.JUMP):
            self.index = navigation.next_index
            self.path.append(self.flow.questions[self.index].id)
            return self._outcome(navigation=navigation, save=save)

        if navigation.action == NavigationAction.DISQUALIFY:
            return await self._disqualify(navigation.message, "rule", navigation=navigation, save=save)

        return await self._submit(question, navigation, save)

    async def _disqualify(self, message: Optional[str], source: str, **kwargs) -> StepOutcome:
        self.message = message or self.config.qualification.disqualify_fallback_message
        await self.pipeline.mark_disqualified(self.message, source=source)
        return self._outcome(message=self.message, **kwargs)

    async def _submit(self, question: Question, navigation: NavigationResult, save) -> StepOutcome:
        ending = self.flow.get_ending(navigation.target_id) if navigation.target_id else None
        self.ending = ending

        if ending is not None:
            self.message = ending.message
            if ending.mark_as_qualified is False:
                await self.pipeline.mark_disqualified(ending.message, source="ending")
                return self._outcome(navigation=navigation, message=self.message, ending_id=ending.id, save=save)
        elif question.show_thank_you:
            self.message = question.thank_you_message

        await self.pipeline.mark_qualified()
        return self._outcome(
            navigation=navigation,
            message=self.message,
            ending_id=ending.id if ending else None,
            save=save
        )

    def back(self) -> bool:
        """Return to the previously visited question; False at the first one"""
        if self.finished or len(self.path) < 2:
            return False
        self.path.pop()
        self.index = self.flow.question_index(self.path[-1])
        return True

    async def book(self) -> bool:
        """Record the booking collaborator's confirmation"""
        return await self.pipeline.mark_booked()

    def lead_score(self) -> LeadScore:
        return score(self.flow.questions, self.answers)

    @property
    def qualified_by_score(self) -> bool:
        return self.lead_score().qualified(self.config.qualification.score_threshold)
