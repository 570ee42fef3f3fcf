"""Data models for the form/flow engine"""
from .ending import Ending, EndingPreset
from .flow import Flow
from .navigation import NavigationAction, NavigationResult
from .question import CHOICE_TYPES, Question, QuestionType
from .rule import Condition, Operator, Rule, RuleAction
from .scoring import LeadScore, ScoreEntry
from .session import SaveOutcome, SaveResponse, SaveResult, SessionState, StepCheck, StepOutcome
from .validation_result import IssueCode, Severity, ValidationIssue, ValidationReport
from .workflow_graph import START_NODE_ID, Edge, Node, NodeKind, Position, WorkflowGraph

__all__ = [
    "Ending",
    "EndingPreset",
    "Flow",
    "NavigationAction",
    "NavigationResult",
    "CHOICE_TYPES",
    "Question",
    "QuestionType",
    "Condition",
    "Operator",
    "Rule",
    "RuleAction",
    "LeadScore",
    "ScoreEntry",
    "SaveOutcome",
    "SaveResponse",
    "SaveResult",
    "SessionState",
    "StepCheck",
    "StepOutcome",
    "IssueCode",
    "Severity",
    "ValidationIssue",
    "ValidationReport",
    "START_NODE_ID",
    "Edge",
    "Node",
    "NodeKind",
    "Position",
    "WorkflowGraph",
]
