"""Core engine: rule evaluation, navigation, scoring"""
from .rule_evaluator import evaluate, evaluate_condition
from .navigation import DEFAULT_DISQUALIFY_MESSAGE, resolve
from .scoring import question_score, score
from .flow_map import build_flow_map, render_mermaid
from .observer import (
    SessionObserver,
    SessionNotification,
    SaveSucceeded,
    SaveFailed,
    SessionDisqualified,
    SessionStateChanged
)

__all__ = [
    "evaluate",
    "evaluate_condition",
    "DEFAULT_DISQUALIFY_MESSAGE",
    "resolve",
    "question_score",
    "score",
    "build_flow_map",
    "render_mermaid",
    "SessionObserver",
    "SessionNotification",
    "SaveSucceeded",
    "SaveFailed",
    "SessionDisqualified",
    "SessionStateChanged"
]
