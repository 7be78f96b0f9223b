"""Health check endpoint."""

import shutil

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Check that both boost tools resolve on PATH."""
    settings = request.app.state.settings
    missing = [
        binary
        for binary in (settings.COMMP_BINARY, settings.DEAL_BINARY)
        if shutil.which(binary) is None
    ]
    if missing:
        return JSONResponse(status_code=503, content={"status": "unhealthy", "missing": missing})
    return {"status": "ok"}
