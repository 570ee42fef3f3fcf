"""Conditional logic rules attached to questions"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Operator(str, Enum):
    """Comparison operators understood by the rule evaluator"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"


class RuleAction(str, Enum):
    """What happens when a rule's condition holds"""
    JUMP = "jump"
    SUBMIT = "submit"
    DISQUALIFY = "disqualify"


# Older documents used these names for the same actions
_ACTION_ALIASES = {
    "thank_you": RuleAction.SUBMIT.value,
    "end": RuleAction.SUBMIT.value,
}


class Condition(BaseModel):
    """Condition over a single collected answer
    
    Operator is kept as a plain string: an operator the evaluator does not
    know must still load, and then simply never match.
    """
    field: str = Field("", description="Question id whose answer is tested")
    operator: str = Field(Operator.EQUALS.value, description="Comparison operator")
    value: Any = Field(None, description="Expected value")

    @field_validator("field", mode="before")
    @classmethod
    def coerce_field(cls, v: Any) -> str:
        return "" if v is None else str(v)


class Rule(BaseModel):
    """One entry of a question's conditional_logic list"""
    model_config = ConfigDict(populate_by_name=True)

    condition: Condition = Field(default_factory=Condition)
    action: str = Field(RuleAction.JUMP.value, description="jump, submit or disqualify")
    then_go_to: Optional[str] = Field(None, alias="thenGoTo", description="Jump target id")
    message: Optional[str] = Field(None, description="Disqualification message")

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_shape(cls, data: Any) -> Any:
        """Accept the flat {question, operator, value, thenGoTo} rule format"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "condition" not in data and "question" in data:
            data["condition"] = {
                "field": data.pop("question"),
                "operator": data.pop("operator", Operator.EQUALS.value),
                "value": data.pop("value", None),
            }
        if "thenGoTo" not in data and "nextQuestionId" in data:
            data["thenGoTo"] = data.pop("nextQuestionId")
        action = data.get("action")
        if not action:
            data["action"] = RuleAction.JUMP.value
        else:
            data["action"] = _ACTION_ALIASES.get(action, action)
        return data

    @field_validator("then_go_to", mode="before")
    @classmethod
    def empty_target_is_none(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @property
    def target(self) -> Optional[str]:
        """Jump target id; None means advance to the next question"""
        return self.then_go_to

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the wire field names"""
        return self.model_dump(by_alias=True, exclude_none=True)
