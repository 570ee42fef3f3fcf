"""Structural validation of a flow before it is trusted at runtime

Hard errors (block save): duplicate or reserved ids, dangling rule references,
self-loops.
Warnings (advisory): unreachable questions, scoring keys for deleted options.
"""
import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Set

from ..models.ending import Ending
from ..models.question import Question
from ..models.rule import RuleAction
from ..models.validation_result import IssueCode, Severity, ValidationIssue, ValidationReport
from ..models.workflow_graph import START_NODE_ID

logger = logging.getLogger(__name__)


def _check_duplicates(questions: Sequence[Question], endings: Sequence[Ending], report: ValidationReport) -> None:
    seen: Set[str] = set()
    for item_id in [q.id for q in questions] + [e.id for e in endings]:
        if item_id == START_NODE_ID:
            report.add(ValidationIssue(
                code=IssueCode.RESERVED_ID,
                severity=Severity.ERROR,
                message=f"Id \"{item_id}\" is reserved for the start node",
                question_id=item_id,
            ))
        if item_id in seen:
            report.add(ValidationIssue(
                code=IssueCode.DUPLICATE_ID,
                severity=Severity.ERROR,
                message=f"Id \"{item_id}\" is used more than once",
                question_id=item_id,
            ))
        seen.add(item_id)


def _check_references(questions: Sequence[Question], known_ids: Set[str], report: ValidationReport) -> None:
    for question in questions:
        for rule_index, rule in enumerate(question.conditional_logic):
            if rule.target and rule.target not in known_ids:
                report.add(ValidationIssue(
                    code=IssueCode.DANGLING_TARGET,
                    severity=Severity.ERROR,
                    message=f"Question \"{question.id}\" rule {rule_index}: target \"{rule.target}\" does not exist",
                    question_id=question.id,
                    rule_index=rule_index,
                ))
            field = rule.condition.field
            if field and field not in known_ids:
                report.add(ValidationIssue(
                    code=IssueCode.DANGLING_FIELD,
                    severity=Severity.ERROR,
                    message=f"Question \"{question.id}\" rule {rule_index}: condition references non-existent question \"{field}\"",
                    question_id=question.id,
                    rule_index=rule_index,
                ))


def _check_self_loops(questions: Sequence[Question], report: ValidationReport) -> None:
    for question in questions:
        for rule_index, rule in enumerate(question.conditional_logic):
            if rule.target == question.id:
                report.add(ValidationIssue(
                    code=IssueCode.SELF_LOOP,
                    severity=Severity.ERROR,
                    message=f"Question \"{question.id}\" rule {rule_index}: question cannot jump to itself",
                    question_id=question.id,
                    rule_index=rule_index,
                ))


def reachable_question_ids(questions: Sequence[Question]) -> Set[str]:
    """Question ids reachable from the synthetic start node"""
    if not questions:
        return set()
    index_of: Dict[str, int] = {}
    for index, question in enumerate(questions):
        index_of.setdefault(question.id, index)

    visited: Set[int] = set()
    queue = deque([0])
    while queue:
        index = queue.popleft()
        if index in visited:
            continue
        visited.add(index)
        question = questions[index]
        successors: List[int] = []
        if index + 1 < len(questions):
            successors.append(index + 1)
        for rule in question.conditional_logic:
            target_index: Optional[int] = index_of.get(rule.target) if rule.target else None
            if rule.action == RuleAction.JUMP.value and target_index is not None:
                successors.append(target_index)
        queue.extend(s for s in successors if s not in visited)
    return {questions[i].id for i in visited}


def _check_reachability(questions: Sequence[Question], report: ValidationReport) -> None:
    reachable = reachable_question_ids(questions)
    for question in questions:
        if question.id not in reachable:
            report.add(ValidationIssue(
                code=IssueCode.UNREACHABLE,
                severity=Severity.WARNING,
                message=f"Question \"{question.id}\" cannot be reached from the start",
                question_id=question.id,
            ))


def _sanitize_scoring(questions: Sequence[Question], report: ValidationReport) -> List[Question]:
    sanitized: List[Question] = []
    for question in questions:
        if not question.is_choice or not question.lead_scoring:
            sanitized.append(question.model_copy(deep=True))
            continue
        options = set(question.options)
        unknown = [key for key in question.lead_scoring if key not in options]
        for key in unknown:
            report.add(ValidationIssue(
                code=IssueCode.UNKNOWN_SCORING_KEY,
                severity=Severity.WARNING,
                message=f"Question \"{question.id}\" scores unknown option \"{key}\"; it will be dropped",
                question_id=question.id,
            ))
        kept = {k: v for k, v in question.lead_scoring.items() if k in options}
        sanitized.append(question.model_copy(update={"lead_scoring": kept}, deep=True))
    return sanitized


def validate(questions: Sequence[Question], endings: Sequence[Ending] = ()) -> ValidationReport:
    """Validate a flow's structure
    
    Args:
        questions: Ordered question list
        endings: Flow endings (valid jump targets)
        
    Returns:
        ValidationReport; valid is False only when hard errors were found
    """
    report = ValidationReport()
    known_ids = {q.id for q in questions} | {e.id for e in endings}

    _check_duplicates(questions, endings, report)
    _check_references(questions, known_ids, report)
    _check_self_loops(questions, report)
    _check_reachability(questions, report)
    report.sanitized_questions = _sanitize_scoring(questions, report)

    logger.debug(
        "Validated %d questions: %d errors, %d warnings",
        len(questions), len(report.errors), len(report.warnings)
    )
    return report
