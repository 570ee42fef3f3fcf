"""Terminal endings of a flow"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EndingPreset(str, Enum):
    """Starting points offered by the builder's add-ending menu"""
    NEUTRAL = "neutral"
    QUALIFIED = "qualified"
    DISQUALIFIED = "disqualified"
    REDIRECT = "redirect"
    CONTACT = "contact"


_PRESETS: Dict[EndingPreset, Dict[str, Any]] = {
    EndingPreset.NEUTRAL: {},
    EndingPreset.QUALIFIED: {
        "title": "Qualified Lead",
        "message": "Thank you! We'll be in touch soon.",
        "mark_as_qualified": True,
        "create_contact": True,
    },
    EndingPreset.DISQUALIFIED: {
        "title": "Thank You",
        "message": "Thank you for your interest. We'll keep you updated.",
        "mark_as_qualified": False,
    },
    EndingPreset.REDIRECT: {
        "title": "Redirecting...",
        "message": "Thank you! Redirecting you now...",
        "redirect_url": "https://example.com",
    },
    EndingPreset.CONTACT: {
        "title": "Success!",
        "message": "Your information has been saved.",
        "create_contact": True,
    },
}


class Ending(BaseModel):
    """Terminal screen with a qualification disposition
    
    mark_as_qualified is tri-state: True, False, or None for neutral.
    create_contact is consumed downstream and never evaluated here.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = "New Ending"
    message: str = "Thank you for your response."
    icon: str = "success"
    mark_as_qualified: Optional[bool] = None
    redirect_url: str = ""
    create_contact: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("redirect_url", mode="before")
    @classmethod
    def none_redirect_is_empty(cls, v: Any) -> str:
        return v or ""

    @classmethod
    def from_preset(cls, ending_id: str, preset: EndingPreset = EndingPreset.NEUTRAL) -> "Ending":
        """Build an ending pre-filled for one of the builder presets"""
        return cls(id=ending_id, **_PRESETS[EndingPreset(preset)])

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
