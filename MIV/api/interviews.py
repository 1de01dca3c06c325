from fastapi import APIRouter, Depends, Query, status

from MIV.api.schemas import InterviewSubmitRequest, InterviewSubmitResponse, DashboardResponse
from MIV.api.dependencies import get_record_repository
from packages.miv_core.errors import RecordNotFoundError, RecordSubmissionError
from packages.miv_core.logging import get_logger
from packages.miv_history.dto import InterviewRecord
from packages.miv_history.repository import InterviewRecordRepository

router = APIRouter(tags=["Interviews"])
logger = get_logger("MIV.api.interviews")

@router.post("/interviews", response_model=InterviewSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_interview(
    request: InterviewSubmitRequest,
    repository: InterviewRecordRepository = Depends(get_record_repository)
):
    """
    Save a completed interview.
    """
    try:
        interview_id = repository.save_interview(request.questions, request.candidate)
    except OSError as e:
        logger.error(f"Failed to save interview for {request.candidate.email}: {e}")
        raise RecordSubmissionError(details={"reason": str(e)}) from e
    return InterviewSubmitResponse(interview_id=interview_id)

# Declared before /interviews/{interview_id} so "by-email" is not taken as an id
@router.get("/interviews/by-email", response_model=InterviewRecord)
def get_interview_by_email(
    email: str = Query(..., min_length=3),
    repository: InterviewRecordRepository = Depends(get_record_repository)
):
    record = repository.find_by_email(email)
    if record is None:
        raise RecordNotFoundError(details={"email": email})
    return record

@router.get("/interviews/{interview_id}", response_model=InterviewRecord)
def get_interview(
    interview_id: str,
    repository: InterviewRecordRepository = Depends(get_record_repository)
):
    """
    Get full interview record by ID.
    """
    record = repository.find_by_id(interview_id)
    if record is None:
        raise RecordNotFoundError(details={"interview_id": interview_id})
    return record

@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    repository: InterviewRecordRepository = Depends(get_record_repository)
):
    """
    Recruiter view: every stored interview, newest first.
    """
    records = repository.find_all()
    average = sum(r.score for r in records) / len(records) if records else 0.0
    return DashboardResponse(
        total_interviews=len(records),
        average_score=round(average, 1),
        interviews=records,
    )
