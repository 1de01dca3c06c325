from typing import Dict, List, Sequence

from packages.miv_session.dto import Question
from packages.miv_session.policy import Difficulty
from .dto import ResultSummary, FinalRecommendation


def summarize(questions: Sequence[Question]) -> ResultSummary:
    """
    Pure summary of a question list. No I/O.
    Timed-out questions (blank answer) count toward time, not toward scores.
    """
    answered = [q for q in questions if q.is_answered]
    average = (sum(q.score or 0 for q in answered) / len(answered)) if answered else 0.0

    by_difficulty: Dict[Difficulty, float] = {}
    for difficulty in Difficulty:
        scores: List[int] = [q.score or 0 for q in answered if q.difficulty == difficulty]
        by_difficulty[difficulty] = (sum(scores) / len(scores)) if scores else 0.0

    return ResultSummary(
        total_questions=len(questions),
        answered_count=len(answered),
        average_score=average,
        total_time_spent=sum(q.time_spent for q in questions),
        average_score_by_difficulty=by_difficulty,
    )


def recommendation_for(score: float) -> FinalRecommendation:
    if score >= 80:
        return FinalRecommendation.HIRE
    if score >= 60:
        return FinalRecommendation.MAYBE
    return FinalRecommendation.NO_HIRE
