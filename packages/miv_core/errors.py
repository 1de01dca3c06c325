from typing import Optional, Dict, Any


class MIVBaseError(Exception):
    """
    Top-level exception for the MIV project.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): error identifier (e.g. 'SESSION_NOT_ONBOARDED')
        message (str): human readable message
        details (Optional[Dict[str, Any]]): extra debugging info
        status_code (int): HTTP status used by the API layer
    """
    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(f"[{code}] {message}")


class ConfigurationError(MIVBaseError):
    """Raised when loading/validating settings fails."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code="CONF_ERROR", message=message, details=details)


class NotOnboardedError(MIVBaseError):
    """No candidate profile in the session store. Caller redirects to onboarding."""
    status_code = 409

    def __init__(self, message: str = "No candidate profile found. Please complete onboarding first.",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code="SESSION_NOT_ONBOARDED", message=message, details=details)


class GenerationFailedError(MIVBaseError):
    """Question generation service could not be reached or refused the request."""
    status_code = 502

    def __init__(self, message: str = "Failed to generate question.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="GENERATION_FAILED", message=message, details=details)


class ScoringFailedError(MIVBaseError):
    """Scoring service request failed. The answer may be resubmitted."""
    status_code = 502

    def __init__(self, message: str = "Failed to evaluate answer.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="SCORING_FAILED", message=message, details=details)


class ReportFailedError(MIVBaseError):
    status_code = 502

    def __init__(self, message: str = "Failed to generate evaluation report.",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code="REPORT_FAILED", message=message, details=details)


class RecordSubmissionError(MIVBaseError):
    """Completed interview could not be handed to the interview record store."""
    status_code = 502

    def __init__(self, message: str = "Failed to save interview data.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="RECORD_SUBMISSION_FAILED", message=message, details=details)


class StorageUnavailableError(MIVBaseError):
    """Session store cannot be read or written. Fatal to the session."""
    status_code = 503

    def __init__(self, message: str = "Session storage is unavailable.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="STORAGE_UNAVAILABLE", message=message, details=details)


class SessionNotFoundError(MIVBaseError):
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_NOT_FOUND",
            message=f"Session {session_id} not found",
            details={"session_id": session_id}
        )


class RecordNotFoundError(MIVBaseError):
    status_code = 404

    def __init__(self, message: str = "Interview not found.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="RECORD_NOT_FOUND", message=message, details=details)


class InterviewAlreadyTakenError(MIVBaseError):
    """A record already exists for this candidate email."""
    status_code = 409

    def __init__(self, email: str):
        super().__init__(
            code="INTERVIEW_ALREADY_TAKEN",
            message="An interview has already been completed with this email.",
            details={"email": email}
        )


class QuestionFrozenError(MIVBaseError):
    """Attempt to mutate a question that was already submitted."""
    status_code = 409

    def __init__(self, question_id: str):
        super().__init__(
            code="QUESTION_FROZEN",
            message=f"Question {question_id} was already submitted",
            details={"question_id": question_id}
        )


class QuestionNotFoundError(MIVBaseError):
    status_code = 404

    def __init__(self, message: str = "Question not found.", details: Optional[Dict[str, Any]] = None):
        super().__init__(code="QUESTION_NOT_FOUND", message=message, details=details)
