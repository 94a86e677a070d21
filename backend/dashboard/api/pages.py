from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter()


@router.get("/settings", include_in_schema=False)
async def settings_page():
    """Meta API and SQL credential forms plus the table status panel."""
    return FileResponse(STATIC_DIR / "settings.html", media_type="text/html")
