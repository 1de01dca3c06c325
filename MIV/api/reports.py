from fastapi import APIRouter, Depends

from MIV.api.dependencies import get_session_service
from packages.miv_report.dto import EvaluationReport
from packages.miv_service.session_service import SessionService

router = APIRouter(prefix="/reports", tags=["Reports"])

@router.post("/{session_id}", response_model=EvaluationReport)
async def generate_report(
    session_id: str,
    service: SessionService = Depends(get_session_service)
):
    """
    Evaluation report for the session's questions.
    Falls back to a report computed from the scores when the model reply is unreadable.
    """
    return await service.generate_report(session_id)
