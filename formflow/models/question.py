"""Question model for form and qualification flows"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .rule import Rule


class QuestionType(str, Enum):
    """Closed set of question types"""
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    RATING = "rating"
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    FILE = "file"


# Builder widget names used by earlier documents
TYPE_ALIASES = {
    "text": QuestionType.SHORT_TEXT.value,
    "textarea": QuestionType.LONG_TEXT.value,
    "tel": QuestionType.PHONE.value,
    "select": QuestionType.SINGLE_CHOICE.value,
    "radio": QuestionType.SINGLE_CHOICE.value,
    "checkbox": QuestionType.MULTI_CHOICE.value,
}

CHOICE_TYPES = frozenset({QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE})

RATING_MIN = 1
RATING_MAX = 5


class Question(BaseModel):
    """A single question in a flow"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Stable id, unique within a flow")
    type: QuestionType = Field(QuestionType.SHORT_TEXT, description="Question type")
    title: str = Field("", description="Question text")
    required: bool = False
    options: List[str] = Field(default_factory=list, description="Choice options")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Per-type configuration")
    lead_scoring_enabled: bool = False
    lead_scoring: Dict[str, int] = Field(default_factory=dict, description="Option key to points")
    conditional_logic: List[Rule] = Field(default_factory=list)
    disqualify_message: Optional[str] = None
    show_thank_you: bool = Field(False, alias="showThankYou")
    thank_you_title: str = Field("", alias="thankYouTitle")
    thank_you_message: str = Field("", alias="thankYouMessage")
    redirect_url: str = Field("", alias="redirectUrl")

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_fields(cls, data: Any) -> Any:
        """Map older builder field names onto the current ones"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "title" not in data and "label" in data:
            data["title"] = data.pop("label")
        if "placeholder" in data:
            settings = dict(data.get("settings") or {})
            settings.setdefault("placeholder", data.pop("placeholder"))
            data["settings"] = settings
        question_type = data.get("type")
        if isinstance(question_type, str):
            data["type"] = TYPE_ALIASES.get(question_type, question_type)
        for key in ("options", "settings", "lead_scoring", "conditional_logic"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("lead_scoring", mode="before")
    @classmethod
    def coerce_points(cls, v: Any) -> Any:
        """Points that are not whole numbers count as 0 instead of rejecting the question"""
        if not isinstance(v, dict):
            return v
        points = {}
        for key, value in v.items():
            try:
                points[str(key)] = int(value)
            except (TypeError, ValueError):
                points[str(key)] = 0
        return points

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    def scoring_key(self, answer: Any) -> str:
        """Key into lead_scoring for a single (non-list) answer"""
        if isinstance(answer, float) and answer.is_integer():
            answer = int(answer)
        if self.type == QuestionType.RATING:
            return f"rating-{answer}"
        return str(answer)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the wire field names"""
        return self.model_dump(mode="json", by_alias=True)
