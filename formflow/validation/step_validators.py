"""Per-question answer checks run before navigation

Shape validators keep the respondent on the question when the answer is
malformed. Qualification gates (business email, allowed regions, number
ranges) end the session as disqualified. Nothing here raises.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from ..config import QualificationConfig
from ..core.rule_evaluator import is_empty_answer, to_number
from ..models.question import RATING_MAX, RATING_MIN, Question, QuestionType
from ..models.session import StepCheck

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
COUNTRY_CODE_LENGTH = 3


class StepValidator(ABC):
    """Base validator for one question type"""
    
    def __init__(self, config: QualificationConfig):
        self.config = config
    
    @abstractmethod
    def check(self, question: Question, value: Any) -> StepCheck:
        """Check a non-empty answer for this question type"""
        pass


class PassthroughValidator(StepValidator):
    """Accepts any non-empty answer (text, date, file)"""
    
    def check(self, question: Question, value: Any) -> StepCheck:
        return StepCheck()


class EmailValidator(StepValidator):
    """Email syntax plus the optional business-email gate"""
    
    def check(self, question: Question, value: Any) -> StepCheck:
        text = str(value).strip()
        if not EMAIL_PATTERN.match(text):
            return StepCheck(ok=False, error="Please enter a valid email address")
        
        if question.settings.get("requireBusinessEmail"):
            domain = text.rsplit("@", 1)[1].lower()
            deny_list = {d.lower() for d in self.config.free_email_domains}
            if domain in deny_list:
                return StepCheck(disqualify=True, message=self.config.business_email_message)
        return StepCheck()


class PhoneValidator(StepValidator):
    """Phone syntax plus the optional allowed country code gate"""
    
    def check(self, question: Question, value: Any) -> StepCheck:
        text = str(value).strip()
        if not PHONE_PATTERN.match(text):
            return StepCheck(ok=False, error="Please enter a valid phone number")
        
        allowed = question.settings.get("allowedCountryCodes")
        if allowed and text.startswith("+"):
            if text[:COUNTRY_CODE_LENGTH] not in allowed:
                return StepCheck(disqualify=True, message=self.config.region_message)
        return StepCheck()


class NumberValidator(StepValidator):
    """Numeric answer with optional min/max qualification bounds"""
    
    def check(self, question: Question, value: Any) -> StepCheck:
        number = to_number(value)
        if number is None:
            return StepCheck(ok=False, error="Please enter a number")
        
        settings = question.settings
        minimum = to_number(settings.get("min"))
        maximum = to_number(settings.get("max"))
        if minimum is not None and number < minimum:
            return StepCheck(disqualify=True, message=settings.get("minMessage") or "Value too low")
        if maximum is not None and number > maximum:
            return StepCheck(disqualify=True, message=settings.get("maxMessage") or "Value too high")
        return StepCheck()


class RatingValidator(StepValidator):
    def check(self, question: Question, value: Any) -> StepCheck:
        number = to_number(value)
        if number is None or not number.is_integer() or not RATING_MIN <= number <= RATING_MAX:
            return StepCheck(ok=False, error=f"Please pick a rating from {RATING_MIN} to {RATING_MAX}")
        return StepCheck()


class ChoiceValidator(StepValidator):
    """Selected option(s) must be among the question's options"""
    
    def check(self, question: Question, value: Any) -> StepCheck:
        selected = value if isinstance(value, (list, tuple)) else [value]
        if question.type == QuestionType.SINGLE_CHOICE and len(selected) > 1:
            return StepCheck(ok=False, error="Please pick a single option")
        if question.options:
            unknown = [v for v in selected if str(v) not in question.options]
            if unknown:
                return StepCheck(ok=False, error=f"'{unknown[0]}' is not one of the options")
        return StepCheck()


class StepValidatorFactory:
    """Factory for creating validators by question type"""
    
    _validators: Dict[QuestionType, Type[StepValidator]] = {
        QuestionType.EMAIL: EmailValidator,
        QuestionType.PHONE: PhoneValidator,
        QuestionType.NUMBER: NumberValidator,
        QuestionType.RATING: RatingValidator,
        QuestionType.SINGLE_CHOICE: ChoiceValidator,
        QuestionType.MULTI_CHOICE: ChoiceValidator,
    }
    
    @classmethod
    def create_validator(cls, question_type: QuestionType, config: QualificationConfig) -> StepValidator:
        return cls._validators.get(question_type, PassthroughValidator)(config)


def check_answer(question: Question, value: Any, config: Optional[QualificationConfig] = None) -> StepCheck:
    """Check an answer before the resolver runs
    
    Args:
        question: Question being answered
        value: Answer value
        config: Qualification policy (deny-list, messages); defaults apply when omitted
        
    Returns:
        StepCheck describing whether to stay, continue or disqualify
    """
    config = config or QualificationConfig()
    if is_empty_answer(value):
        if question.required:
            return StepCheck(ok=False, error="Please fill in this field to continue")
        return StepCheck()
    
    validator = StepValidatorFactory.create_validator(question.type, config)
    try:
        return validator.check(question, value)
    except Exception as e:
        logger.warning("Answer check for question %s failed: %s; accepting answer", question.id, e)
        return StepCheck()
