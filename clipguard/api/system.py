"""
System / health routes.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(request: Request):
    gate = getattr(request.app.state, "moderation_gate", None)
    return {
        "status": "healthy",
        "moderation_saturated": bool(gate and gate.saturated),
    }


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots():
    return "User-agent: *\nDisallow: /"
