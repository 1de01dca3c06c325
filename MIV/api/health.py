from fastapi import APIRouter
from datetime import datetime, timezone
from MIV.api.dependencies import get_config

router = APIRouter()

@router.get("/health")
async def health_check():
    """
    Server Liveness Probe.
    Returns status, version, and current timestamp.
    """
    return {
        "status": "ok",
        "version": get_config().VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
