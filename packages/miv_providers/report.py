from typing import Sequence

from packages.miv_core.errors import ReportFailedError
from packages.miv_core.logging import get_logger
from packages.miv_core.parsing import parse_json_response
from packages.miv_providers.llm.base import ILLMProvider
from packages.miv_report.aggregator import summarize, recommendation_for
from packages.miv_report.dto import EvaluationReport, QuestionAnalysis, ResultSummary
from packages.miv_session.dto import CandidateProfile, Question

logger = get_logger("miv_providers.report")


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def build_report_prompt(questions: Sequence[Question], candidate: CandidateProfile, summary: ResultSummary) -> str:
    details = "\n".join(
        f"""
  Question {i + 1} ({q.difficulty.value}):
  Question: {q.prompt}
  Answer: {q.answer or "No answer provided"}
  Score: {q.score or 0}%
  Feedback: {q.feedback or "No feedback available"}
  Time Spent: {q.time_spent} seconds"""
        for i, q in enumerate(questions)
    )
    return f"""
You are an expert technical interviewer creating a comprehensive evaluation report.

Candidate Information:
- Name: {candidate.name}
- Email: {candidate.email}
- Skills: {", ".join(candidate.skills)}

Interview Results:
- Total Questions: {summary.total_questions}
- Questions Answered: {summary.answered_count}
- Average Score: {_round_half_up(summary.average_score)}%

Detailed Question Analysis:
{details}

Please provide a comprehensive evaluation report in JSON format with the following structure:
{{
  "overallScore": number (0-100),
  "summary": "Brief overall assessment",
  "strengths": ["List of key strengths"],
  "weaknesses": ["List of areas for improvement"],
  "recommendations": ["Specific recommendations for improvement"],
  "questionAnalysis": [
    {{
      "questionNumber": number,
      "difficulty": "EASY|MEDIUM|HARD",
      "score": number,
      "feedback": "string",
      "timeSpent": number,
      "strengths": ["string"],
      "improvements": ["string"]
    }}
  ],
  "finalRecommendation": "HIRE|MAYBE|NO_HIRE",
  "nextSteps": ["Recommended next steps for the candidate"]
}}
"""


def fallback_report(questions: Sequence[Question], summary: ResultSummary) -> EvaluationReport:
    """Report computed from the aggregator when the model reply cannot be read."""
    overall = _round_half_up(summary.average_score)
    return EvaluationReport(
        overallScore=overall,
        summary=(
            f"The candidate scored {overall}% overall with {summary.answered_count} "
            f"out of {summary.total_questions} questions answered."
        ),
        strengths=["Demonstrated technical knowledge", "Provided structured answers"],
        weaknesses=["Could improve on specific examples", "Some answers lacked depth"],
        recommendations=["Practice with more complex scenarios", "Focus on practical examples"],
        questionAnalysis=[
            QuestionAnalysis(
                questionNumber=i + 1,
                difficulty=q.difficulty,
                score=q.score or 0,
                feedback=q.feedback or "No feedback available",
                timeSpent=q.time_spent,
                strengths=["Answered the question"] if q.is_answered else [],
                improvements=["Could provide more detail"],
            )
            for i, q in enumerate(questions)
        ],
        finalRecommendation=recommendation_for(summary.average_score),
        nextSteps=["Review technical fundamentals", "Practice coding problems"],
        is_fallback=True,
    )


class ReportGenerator:
    """
    Report Service backed by an LLM provider.
    Request failures raise ReportFailedError; unreadable replies use fallback_report.
    """
    def __init__(self, llm: ILLMProvider):
        self.llm = llm

    async def generate(self, questions: Sequence[Question], candidate: CandidateProfile) -> EvaluationReport:
        summary = summarize(questions)
        prompt = build_report_prompt(questions, candidate, summary)
        try:
            reply = await self.llm.ask(prompt)
        except Exception as e:
            logger.error(f"Error generating report: {e}")
            raise ReportFailedError(details={"reason": str(e)}) from e

        parsed = parse_json_response(reply, EvaluationReport)
        if not parsed.ok:
            logger.warning(f"Error parsing AI report, using computed fallback: {parsed.error}")
            return fallback_report(questions, summary)
        return parsed.value
