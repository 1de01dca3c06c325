from .aggregator import summarize, recommendation_for
from .dto import ResultSummary, EvaluationReport, QuestionAnalysis, FinalRecommendation

__all__ = [
    "summarize",
    "recommendation_for",
    "ResultSummary",
    "EvaluationReport",
    "QuestionAnalysis",
    "FinalRecommendation",
]
