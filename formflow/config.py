"""Engine configuration loaded from formflow.yaml"""

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from .core.navigation import DEFAULT_DISQUALIFY_MESSAGE
from .parsers.yaml_parser import YAMLParser

CONFIG_ENV_VAR = "FORMFLOW_CONFIG"
DEFAULT_CONFIG_PATH = Path("formflow.yaml")

DEFAULT_FREE_EMAIL_DOMAINS = [
    "gmail.com",
    "yahoo.com",
    "hotmail.com",
    "outlook.com",
    "aol.com",
]


class AutoSaveConfig(BaseModel):
    """Retry policy and endpoint for respondent auto-save"""

    max_attempts: int = Field(3, ge=1, description="Attempts per answer change")
    base_delay: float = Field(1.0, gt=0, description="First backoff step in seconds")
    endpoint: Optional[str] = Field(None, description="Base URL of the auto-save collaborator")


class QualificationConfig(BaseModel):
    """Product copy and policy used when disqualifying respondents"""

    free_email_domains: List[str] = Field(default_factory=lambda: list(DEFAULT_FREE_EMAIL_DOMAINS))
    disqualify_fallback_message: str = DEFAULT_DISQUALIFY_MESSAGE
    business_email_message: str = "We only work with business email addresses"
    region_message: str = "We currently only serve specific regions"
    score_threshold: int = 0


class EngineConfig(BaseModel):
    """Complete engine configuration model for formflow.yaml"""

    log_level: str = "WARNING"
    autosave: AutoSaveConfig = Field(default_factory=AutoSaveConfig)
    qualification: QualificationConfig = Field(default_factory=QualificationConfig)


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load engine configuration
    
    Looks at the explicit path, then $FORMFLOW_CONFIG, then ./formflow.yaml.
    Missing files fall back to defaults; an explicit path must exist.
    
    Raises:
        FileNotFoundError: If an explicit path does not exist
        FlowDocumentError: If the file is not a YAML mapping
    """
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
        return EngineConfig(**YAMLParser().load_mapping(path))

    env_path = os.environ.get(CONFIG_ENV_VAR)
    for candidate in (Path(env_path) if env_path else None, DEFAULT_CONFIG_PATH):
        if candidate is not None and candidate.exists():
            return EngineConfig(**YAMLParser().load_mapping(candidate))
    return EngineConfig()


_default_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Process default configuration, loaded once"""
    global _default_config
    if _default_config is None:
        _default_config = load_config()
    return _default_config
