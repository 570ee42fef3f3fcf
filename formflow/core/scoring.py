"""Lead scoring aggregation over scoring-enabled questions"""
from typing import Any, Mapping, Sequence

from ..models.question import Question
from ..models.scoring import LeadScore, ScoreEntry


def _points(question: Question, key: Any) -> int:
    return question.lead_scoring.get(str(key), 0)


def question_score(question: Question, answer: Any) -> int:
    """Contribution of one answer
    
    Multi-select answers sum the points of every selected option. Rating
    answers are looked up as rating-<n>.
    """
    if answer is None:
        return 0
    if isinstance(answer, (list, tuple)):
        return sum(_points(question, option) for option in answer)
    return _points(question, question.scoring_key(answer))


def score(questions: Sequence[Question], answers: Mapping[str, Any]) -> LeadScore:
    """Sum point contributions across all scoring-enabled questions
    
    Questions contributing 0 are left out of the breakdown, so an empty
    breakdown means scored but nothing selected yet.
    """
    result = LeadScore()
    for question in questions:
        if not question.lead_scoring_enabled or not question.lead_scoring:
            continue
        contribution = question_score(question, answers.get(question.id))
        if contribution != 0:
            result.breakdown.append(
                ScoreEntry(question_id=question.id, title=question.title, score=contribution)
            )
        result.total += contribution
    return result
