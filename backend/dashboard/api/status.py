from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter()


@router.get("/initial-data")
async def initial_data():
    """Liveness message for the frontend's first request."""
    return {
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
