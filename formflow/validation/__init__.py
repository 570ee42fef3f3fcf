"""Flow structure validation and per-answer checks"""
from .graph_validator import reachable_question_ids, validate
from .step_validators import StepValidatorFactory, check_answer

__all__ = ["validate", "reachable_question_ids", "check_answer", "StepValidatorFactory"]
