from enum import Enum

class SessionStage(str, Enum):
    """
    Interview Session Stage Enum.
    LOADING -> AWAITING_ANSWER -> SUBMITTING -> REVIEWING -> (AWAITING_ANSWER | COMPLETE)
    """
    LOADING = "LOADING"
    AWAITING_ANSWER = "AWAITING_ANSWER"
    SUBMITTING = "SUBMITTING"
    REVIEWING = "REVIEWING"          # answer stored, waiting for "next"
    COMPLETE = "COMPLETE"

class SessionEvent(str, Enum):
    """
    Events emitted by the Session Engine.
    """
    QUESTION_PROVISIONED = "QUESTION_PROVISIONED"
    TIME_EXPIRED = "TIME_EXPIRED"          # Auto-fail path
    ANSWER_SUBMITTED = "ANSWER_SUBMITTED"
    QUESTION_ADVANCED = "QUESTION_ADVANCED"
    TIMER_PAUSED = "TIMER_PAUSED"
    TIMER_RESUMED = "TIMER_RESUMED"
    SESSION_COMPLETED = "SESSION_COMPLETED"
    RECORD_SUBMITTED = "RECORD_SUBMITTED"
