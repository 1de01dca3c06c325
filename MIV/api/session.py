from fastapi import APIRouter, Depends, status

from MIV.api.schemas import AnswerSubmitRequest, TickRequest, SolutionResponse
from MIV.api.dependencies import get_session_service
from packages.miv_dto.session import SessionResponseDTO
from packages.miv_report.dto import ResultSummary
from packages.miv_service.session_service import SessionService

router = APIRouter(prefix="/sessions", tags=["Session"])

# Domain errors (MIVBaseError) are rendered by the app level handler.

@router.post("/{session_id}/initialize", response_model=SessionResponseDTO)
async def initialize_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Load (or reload) the session and reconcile the answer clock.
    Provisions the current question when needed.
    """
    return await service.open_session(session_id)

@router.get("/{session_id}", response_model=SessionResponseDTO)
async def get_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Get current session status.
    """
    return await service.get_session(session_id)

@router.post("/{session_id}/answers", response_model=SessionResponseDTO)
async def submit_answer(
    session_id: str,
    answer: AnswerSubmitRequest,
    service: SessionService = Depends(get_session_service)
):
    """
    Submit an answer for the current question.
    Ignored while a previous submission is being scored.
    """
    return await service.submit_answer(session_id, answer.text)

@router.post("/{session_id}/tick", response_model=SessionResponseDTO)
async def tick(
    session_id: str,
    request: TickRequest,
    service: SessionService = Depends(get_session_service)
):
    """
    Once-per-second clock update. On expiry the draft is submitted.
    """
    return await service.tick(session_id, request.draft)

@router.post("/{session_id}/advance", response_model=SessionResponseDTO)
async def advance(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return await service.advance(session_id)

@router.post("/{session_id}/pause", response_model=SessionResponseDTO)
async def toggle_pause(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return await service.toggle_pause(session_id)

@router.post("/{session_id}/record", response_model=SessionResponseDTO)
async def submit_record(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Retry reporting a completed interview to the record store.
    """
    return await service.submit_record(session_id)

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    service.close_session(session_id)

@router.get("/{session_id}/summary", response_model=ResultSummary)
async def get_summary(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return await service.get_summary(session_id)

@router.get("/{session_id}/questions/{question_id}/solution", response_model=SolutionResponse)
async def get_solution(
    session_id: str,
    question_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Reference solution, available after the question was submitted.
    """
    solution = await service.get_solution(session_id, question_id)
    return SolutionResponse(question_id=question_id, solution=solution)
