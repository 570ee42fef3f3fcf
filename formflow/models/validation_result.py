"""Validation report models for flow structure checks"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .question import Question


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    DUPLICATE_ID = "duplicate_id"
    DANGLING_TARGET = "dangling_target"
    DANGLING_FIELD = "dangling_field"
    SELF_LOOP = "self_loop"
    UNREACHABLE = "unreachable"
    UNKNOWN_SCORING_KEY = "unknown_scoring_key"
    RESERVED_ID = "reserved_id"


@dataclass
class ValidationIssue:
    """Single finding, pointing at the offending question and rule"""
    code: IssueCode
    severity: Severity
    message: str
    question_id: Optional[str] = None
    rule_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "questionId": self.question_id,
            "ruleIndex": self.rule_index,
        }


@dataclass
class ValidationReport:
    """Result of validating a flow
    
    Only errors make a flow invalid. sanitized_questions is a copy of the
    input with unknown scoring keys dropped.
    """
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    sanitized_questions: List[Question] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def issues(self) -> List[ValidationIssue]:
        return self.errors + self.warnings

    def add(self, issue: ValidationIssue) -> None:
        if issue.severity == Severity.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }
