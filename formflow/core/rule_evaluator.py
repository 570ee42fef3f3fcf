"""Rule evaluation for conditional logic

evaluate() is total: every operator/value combination returns a bool. A rule
with an unknown operator or a non-numeric comparison simply does not fire.
"""
import logging
import math
from typing import Any, Callable, Dict, Mapping, Optional

from ..models.rule import Condition, Operator

logger = logging.getLogger(__name__)


def _stringify(value: Any) -> str:
    """Render an answer the way respondents typed it"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _norm(value: Any) -> str:
    return _stringify(value).strip().lower()


def to_number(value: Any) -> Optional[float]:
    """Numeric view of an answer, or None when it has none"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def is_empty_answer(actual: Any) -> bool:
    if actual is None:
        return True
    if isinstance(actual, (list, tuple, set)):
        return len(actual) == 0
    if isinstance(actual, str):
        return actual.strip() == ""
    return False


def _equals(actual: Any, expected: Any) -> bool:
    if isinstance(actual, (list, tuple, set)):
        return _norm(expected) in {_norm(v) for v in actual}
    return _norm(actual) == _norm(expected)


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, (list, tuple, set)):
        return _norm(expected) in {_norm(v) for v in actual}
    return _norm(expected) in _norm(actual)


def _compare(test: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def compare(actual: Any, expected: Any) -> bool:
        left = to_number(actual)
        right = to_number(expected)
        if left is None or right is None:
            return False
        return test(left, right)
    return compare


def _affix(test: Callable[[str, str], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        needle = _norm(expected)
        if isinstance(actual, (list, tuple, set)):
            return any(test(_norm(v), needle) for v in actual)
        return test(_norm(actual), needle)
    return check


_HANDLERS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: _equals,
    Operator.NOT_EQUALS: lambda a, e: not _equals(a, e),
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: lambda a, e: not _contains(a, e),
    Operator.GREATER_THAN: _compare(lambda a, e: a > e),
    Operator.LESS_THAN: _compare(lambda a, e: a < e),
    Operator.GREATER_THAN_OR_EQUAL: _compare(lambda a, e: a >= e),
    Operator.LESS_THAN_OR_EQUAL: _compare(lambda a, e: a <= e),
    Operator.IS_EMPTY: lambda a, e: is_empty_answer(a),
    Operator.IS_NOT_EMPTY: lambda a, e: not is_empty_answer(a),
    Operator.STARTS_WITH: _affix(str.startswith),
    Operator.ENDS_WITH: _affix(str.endswith),
}


def evaluate(operator: Any, actual: Any, expected: Any) -> bool:
    """Evaluate one comparison
    
    A missing answer (None) only satisfies is_empty; every other operator is
    false until the respondent has answered.
    
    Args:
        operator: Operator name (unknown names evaluate to False)
        actual: Collected answer value, scalar or list
        expected: Value configured on the rule
        
    Returns:
        Whether the condition holds
    """
    try:
        op = Operator(operator)
    except ValueError:
        logger.warning("Unknown rule operator %r; rule will not fire", operator)
        return False

    if actual is None:
        return op == Operator.IS_EMPTY

    handler = _HANDLERS.get(op)
    if handler is None:
        return False
    try:
        return bool(handler(actual, expected))
    except Exception as e:
        logger.warning("Rule %s failed on %r: %s; rule will not fire", op.value, actual, e)
        return False


def evaluate_condition(condition: Optional[Condition], answers: Mapping[str, Any]) -> bool:
    """Evaluate a rule condition against the collected answers"""
    if condition is None or not condition.field:
        return False
    return evaluate(condition.operator, answers.get(condition.field), condition.value)
