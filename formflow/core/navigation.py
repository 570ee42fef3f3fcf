"""Navigation resolver: decides where a respondent goes next

The same resolver backs the form builder preview, the standalone form runtime
and the embedded booking qualifier, so all three make identical decisions.
"""
import logging
from typing import Any, Mapping, Optional, Sequence

from ..models.ending import Ending
from ..models.navigation import NavigationAction, NavigationResult
from ..models.question import Question
from ..models.rule import Rule, RuleAction
from .rule_evaluator import evaluate_condition

logger = logging.getLogger(__name__)

DEFAULT_DISQUALIFY_MESSAGE = "Based on your responses, we may not be the best fit at this time."

_KNOWN_ACTIONS = {action.value for action in RuleAction}


def _advance(current_index: int, questions: Sequence[Question]) -> NavigationResult:
    if current_index >= len(questions) - 1:
        return NavigationResult(action=NavigationAction.SUBMIT)
    return NavigationResult(action=NavigationAction.ADVANCE, next_index=current_index + 1)


def _index_of(question_id: str, questions: Sequence[Question]) -> int:
    for index, question in enumerate(questions):
        if question.id == question_id:
            return index
    return -1


def _first_matching_rule(question: Question, answers: Mapping[str, Any]) -> Optional[Rule]:
    """First rule whose condition holds, in declaration order"""
    for rule in question.conditional_logic:
        if rule.action not in _KNOWN_ACTIONS:
            logger.warning(
                "Question %s has a rule with unknown action %r; rule will not fire",
                question.id, rule.action
            )
            continue
        if evaluate_condition(rule.condition, answers):
            return rule
    return None


def resolve(
    current_index: int,
    questions: Sequence[Question],
    answers: Mapping[str, Any],
    endings: Optional[Sequence[Ending]] = None,
    fallback_message: Optional[str] = None,
) -> NavigationResult:
    """Compute the next position or terminal action
    
    First-match semantics: the first rule whose condition is true decides,
    even when later rules would also match.
    
    Args:
        current_index: Index of the question just answered
        questions: Ordered question list
        answers: Collected answers keyed by question id
        endings: Flow endings, so a rule may jump straight to one
        fallback_message: Disqualification text when neither rule nor question sets one
        
    Returns:
        NavigationResult; never raises
    """
    if current_index < 0 or current_index >= len(questions):
        return NavigationResult(action=NavigationAction.SUBMIT)

    question = questions[current_index]
    rule = _first_matching_rule(question, answers)
    if rule is None:
        return _advance(current_index, questions)

    action = RuleAction(rule.action)
    if action == RuleAction.SUBMIT:
        return NavigationResult(action=NavigationAction.SUBMIT)

    if action == RuleAction.DISQUALIFY:
        message = rule.message or question.disqualify_message or fallback_message or DEFAULT_DISQUALIFY_MESSAGE
        return NavigationResult(action=NavigationAction.DISQUALIFY, message=message)

    target = rule.target
    if not target:
        return _advance(current_index, questions)

    target_index = _index_of(target, questions)
    if target_index == current_index:
        logger.warning("Question %s jumps to itself; advancing instead", question.id)
        return _advance(current_index, questions)
    if target_index >= 0:
        return NavigationResult(action=NavigationAction.JUMP, next_index=target_index, target_id=target)

    if endings and any(ending.id == target for ending in endings):
        return NavigationResult(action=NavigationAction.SUBMIT, target_id=target)

    logger.warning("Question %s jumps to missing target %s; advancing instead", question.id, target)
    return _advance(current_index, questions)
