"""Integration tests for a respondent walking through a flow"""

import pytest

from formflow.autosave import AutoSavePipeline, InMemoryAnswerPersistence, RespondentSession
from formflow.config import EngineConfig
from formflow.exceptions import FormFlowError
from formflow.models import Ending, Flow, NavigationAction, Question, SaveOutcome, SessionState


async def no_sleep(delay):
    return None


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_jump_then_submit(self, qualification_flow):
        session = RespondentSession(qualification_flow)

        first = await session.answer("Enterprise")

        assert first.navigation.action == NavigationAction.JUMP
        assert session.current_question.id == "q3"
        assert first.save.outcome == SaveOutcome.SAVED

        last = await session.answer("jane@acme.io")

        assert last.navigation.action == NavigationAction.SUBMIT
        assert last.finished
        assert session.state == SessionState.QUALIFIED
        assert session.path == ["q1", "q3"]
        assert session.current_question is None
        assert session.lead_score().total == 30
        assert session.qualified_by_score

    @pytest.mark.asyncio
    async def test_plain_advance(self, qualification_flow):
        session = RespondentSession(qualification_flow)

        outcome = await session.answer("11-50")

        assert outcome.navigation.action == NavigationAction.ADVANCE
        assert outcome.index == 1
        assert session.current_question.id == "q2"

    @pytest.mark.asyncio
    async def test_back_returns_to_previous_question(self, qualification_flow):
        session = RespondentSession(qualification_flow)
        await session.answer("Enterprise")

        assert session.back()
        assert session.current_question.id == "q1"
        assert not session.back()

    @pytest.mark.asyncio
    async def test_booking_after_qualification(self, qualification_flow):
        session = RespondentSession(qualification_flow)
        await session.answer("Enterprise")
        await session.answer("jane@acme.io")

        assert await session.book()
        assert session.state == SessionState.BOOKED


class TestStaying:
    """Test answers that keep the respondent on the question"""

    @pytest.mark.asyncio
    async def test_invalid_answer_stays(self, qualification_flow):
        session = RespondentSession(qualification_flow)
        await session.answer("Enterprise")

        outcome = await session.answer("not an email")

        assert outcome.error
        assert outcome.navigation is None
        assert session.current_question.id == "q3"
        assert not outcome.finished

    @pytest.mark.asyncio
    async def test_required_answer_missing(self, qualification_flow):
        session = RespondentSession(qualification_flow)
        await session.answer("Enterprise")

        outcome = await session.answer("")

        assert outcome.error == "Please fill in this field to continue"

    @pytest.mark.asyncio
    async def test_failed_save_does_not_block_navigation(self, qualification_flow):
        persistence = InMemoryAnswerPersistence(script=[RuntimeError("offline")] * 3)
        pipeline = AutoSavePipeline(persistence, sleep=no_sleep)
        session = RespondentSession(qualification_flow, pipeline=pipeline)

        outcome = await session.answer("11-50")

        assert outcome.save.outcome == SaveOutcome.NOT_SAVED
        assert session.current_question.id == "q2"
        assert session.answers == {"q1": "11-50"}


class TestDisqualification:
    @pytest.mark.asyncio
    async def test_rule_disqualifies(self, qualification_flow):
        session = RespondentSession(qualification_flow)

        outcome = await session.answer("1-10")

        assert outcome.navigation.action == NavigationAction.DISQUALIFY
        assert outcome.message == "Too small for now"
        assert session.state == SessionState.DISQUALIFIED
        with pytest.raises(FormFlowError):
            await session.answer("again")

    @pytest.mark.asyncio
    async def test_server_disqualifies(self, qualification_flow):
        persistence = InMemoryAnswerPersistence(
            disqualify_when=lambda answers: "Blocked region" if answers.get("q1") == "11-50" else None
        )
        session = RespondentSession(qualification_flow, pipeline=AutoSavePipeline(persistence))

        outcome = await session.answer("11-50")

        assert outcome.finished
        assert outcome.message == "Blocked region"
        assert outcome.navigation is None

    @pytest.mark.asyncio
    async def test_business_email_gate(self):
        flow = Flow(questions=[
            Question(id="email", type="email", settings={"requireBusinessEmail": True}),
            Question(id="q2"),
        ])
        config = EngineConfig()
        session = RespondentSession(flow, config=config)

        outcome = await session.answer("someone@gmail.com")

        assert session.state == SessionState.DISQUALIFIED
        assert outcome.message == config.qualification.business_email_message

    @pytest.mark.asyncio
    async def test_jump_to_disqualifying_ending(self):
        flow = Flow(
            questions=[
                Question(id="q1", conditional_logic=[
                    {"condition": {"field": "q1", "operator": "equals", "value": "no"}, "thenGoTo": "end-no"},
                ]),
                Question(id="q2"),
            ],
            endings=[Ending.from_preset("end-no", "disqualified")],
        )
        session = RespondentSession(flow)

        outcome = await session.answer("No")

        assert outcome.ending_id == "end-no"
        assert session.state == SessionState.DISQUALIFIED
        assert session.ending.id == "end-no"
        assert not await session.book()


@pytest.mark.asyncio
async def test_thank_you_screen_of_last_question():
    flow = Flow(questions=[Question(id="q1", showThankYou=True, thankYouMessage="Cheers!")])
    session = RespondentSession(flow)

    outcome = await session.answer("hi")

    assert outcome.message == "Cheers!"
    assert outcome.to_dict()["state"] == "qualified"


@pytest.mark.asyncio
async def test_empty_flow_has_nothing_to_answer():
    with pytest.raises(FormFlowError):
        await RespondentSession(Flow()).answer("x")
