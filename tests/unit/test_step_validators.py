"""Unit tests for per-question answer checks and qualification gates"""

import pytest

from formflow.config import QualificationConfig
from formflow.models import Question
from formflow.validation import StepValidatorFactory, check_answer
from formflow.validation.step_validators import ChoiceValidator, PassthroughValidator


class TestRequired:
    def test_required_empty_answer_stays(self):
        check = check_answer(Question(id="q1", required=True), "  ")

        assert not check.ok
        assert check.error

    def test_optional_empty_answer_passes(self):
        assert check_answer(Question(id="q1", type="email"), None).ok


class TestEmail:
    def test_invalid_email_stays(self):
        check = check_answer(Question(id="q1", type="email"), "not-an-email")

        assert not check.ok

    def test_free_email_disqualifies_when_business_email_required(self):
        question = Question(id="q1", type="email", settings={"requireBusinessEmail": True})

        check = check_answer(question, "jane@Gmail.com")

        assert check.ok
        assert check.disqualify
        assert check.message == QualificationConfig().business_email_message

    def test_business_email_passes(self):
        question = Question(id="q1", type="email", settings={"requireBusinessEmail": True})

        check = check_answer(question, "jane@acme.io")

        assert check.ok and not check.disqualify

    def test_deny_list_is_configurable(self):
        question = Question(id="q1", type="email", settings={"requireBusinessEmail": True})
        config = QualificationConfig(free_email_domains=["acme.io"])

        assert check_answer(question, "jane@acme.io", config).disqualify
        assert not check_answer(question, "jane@gmail.com", config).disqualify


class TestPhone:
    def test_invalid_phone_stays(self):
        assert not check_answer(Question(id="q1", type="phone"), "call me").ok

    def test_disallowed_country_code_disqualifies(self):
        question = Question(id="q1", type="phone", settings={"allowedCountryCodes": ["+44", "+1 "]})

        assert check_answer(question, "+33 1 23 45").disqualify
        assert not check_answer(question, "+44 20 7946").disqualify

    def test_local_number_skips_region_gate(self):
        question = Question(id="q1", type="phone", settings={"allowedCountryCodes": ["+44"]})

        assert not check_answer(question, "020 7946 0000").disqualify


class TestNumber:
    def test_non_numeric_stays(self):
        assert not check_answer(Question(id="q1", type="number"), "many").ok

    @pytest.mark.parametrize("value,message", [("5", "Too few seats"), (500, "Value too high")])
    def test_bounds_disqualify(self, value, message):
        question = Question(id="q1", type="number", settings={"min": 10, "max": 100, "minMessage": "Too few seats"})

        check = check_answer(question, value)

        assert check.disqualify
        assert check.message == message

    def test_within_bounds_passes(self):
        question = Question(id="q1", type="number", settings={"min": 10, "max": 100})

        assert check_answer(question, 50) == check_answer(question, "10")


class TestRatingAndChoice:
    @pytest.mark.parametrize("value", [0, 6, 2.5, "great"])
    def test_rating_out_of_range_stays(self, value):
        assert not check_answer(Question(id="q1", type="rating"), value).ok

    def test_rating_in_range(self):
        assert check_answer(Question(id="q1", type="rating"), "4").ok

    def test_choice_must_be_an_option(self):
        question = Question(id="q1", type="single-choice", options=["A", "B"])

        assert check_answer(question, "A").ok
        assert not check_answer(question, "C").ok
        assert not check_answer(question, ["A", "B"]).ok

    def test_multi_choice_accepts_several(self):
        question = Question(id="q1", type="multi-choice", options=["A", "B"])

        assert check_answer(question, ["A", "B"]).ok


def test_factory_selects_validator_by_type():
    config = QualificationConfig()

    assert isinstance(StepValidatorFactory.create_validator("multi-choice", config), ChoiceValidator)
    assert isinstance(StepValidatorFactory.create_validator("date", config), PassthroughValidator)
