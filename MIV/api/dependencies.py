import os
from functools import lru_cache

from packages.miv_core.config import MIVConfig
from packages.miv_core.logging import get_logger
from packages.miv_history.repository import InterviewRecordRepository, FileInterviewRecordRepository
from packages.miv_providers.llm.base import ILLMProvider
from packages.miv_providers.llm.mock import MockLLMProvider
from packages.miv_providers.question import QuestionGenerator
from packages.miv_providers.llm_question import LLMQuestionGenerator
from packages.miv_providers.mock_question import MockQuestionGenerator
from packages.miv_providers.scoring import AnswerScorer, LLMAnswerScorer
from packages.miv_providers.mock_scoring import MockAnswerScorer
from packages.miv_providers.report import ReportGenerator
from packages.miv_service.session_service import SessionService
from packages.miv_session.infrastructure.file_repo import JsonFileSessionStore

logger = get_logger("MIV.dependencies")

# --- Providers (External Adapters) ---

@lru_cache
def get_config() -> MIVConfig:
    return MIVConfig.load()

@lru_cache
def get_llm_provider() -> ILLMProvider:
    """
    Singleton LLM Provider.
    Gemini when an API key is configured, otherwise a mock that always
    returns an unparsable reply (every consumer then uses its fallback).
    """
    config = get_config()
    if config.GEMINI_API_KEY:
        from packages.miv_providers.llm.gemini_impl import GeminiLLMProvider
        return GeminiLLMProvider(api_key=config.GEMINI_API_KEY, model_name=config.GEMINI_MODEL)
    logger.warning("GEMINI_API_KEY not set, using mock LLM provider")
    return MockLLMProvider()

@lru_cache
def get_question_generator() -> QuestionGenerator:
    if get_config().GEMINI_API_KEY:
        return LLMQuestionGenerator(get_llm_provider())
    return MockQuestionGenerator()

@lru_cache
def get_answer_scorer() -> AnswerScorer:
    config = get_config()
    if config.GEMINI_API_KEY:
        return LLMAnswerScorer(get_llm_provider(), fallback_score=config.SCORING_FALLBACK_SCORE)
    return MockAnswerScorer()

@lru_cache
def get_report_generator() -> ReportGenerator:
    return ReportGenerator(get_llm_provider())

# --- Repositories (Persistence) ---

@lru_cache
def get_record_repository() -> InterviewRecordRepository:
    """
    Singleton Interview Record Repository (File-based).
    """
    return FileInterviewRecordRepository(base_dir=get_config().RECORD_DIR)

def session_store_factory(session_id: str) -> JsonFileSessionStore:
    """One store directory per session."""
    return JsonFileSessionStore(os.path.join(get_config().SESSION_STORE_DIR, session_id))

# --- Domain Services (Application Logic) ---

@lru_cache
def get_session_service() -> SessionService:
    """
    Singleton Session Service.
    Must be shared across requests: it holds the engine of every open session.
    """
    return SessionService(
        store_factory=session_store_factory,
        record_repo=get_record_repository(),
        question_generator=get_question_generator(),
        scorer=get_answer_scorer(),
        report_generator=get_report_generator(),
        total_questions=get_config().TOTAL_QUESTIONS,
        max_open_sessions=get_config().MAX_OPEN_SESSIONS,
    )
