from fastapi import APIRouter, Depends, status

from MIV.api.schemas import CandidateCreateRequest
from MIV.api.dependencies import get_session_service
from packages.miv_dto.session import OnboardingResultDTO
from packages.miv_service.session_service import SessionService
from packages.miv_session.dto import CandidateProfile

router = APIRouter(prefix="/candidates", tags=["Onboarding"])

@router.post("", response_model=OnboardingResultDTO, status_code=status.HTTP_201_CREATED)
def onboard_candidate(
    request: CandidateCreateRequest,
    service: SessionService = Depends(get_session_service)
):
    """
    Register the candidate and open a new session.
    409 when this email already completed an interview.
    """
    return service.onboard(
        name=request.name,
        email=request.email,
        phone=request.phone,
        skills=request.skills,
    )

@router.get("/{session_id}", response_model=CandidateProfile)
def get_candidate(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    return service.get_candidate(session_id)
