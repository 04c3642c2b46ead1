"""
Moderation routes.

  POST /moderate        multipart upload ('file', 'title', optional
                        'description', comma-separated 'tags', 'category')
  POST /moderate/quick  JSON { "title", "description", "tags" } text-only pre-screen

Uploads are rate limited per client IP and validated before a pipeline
slot is taken. Analysis failures never surface as a 5xx: the pipeline
returns a fail-closed rejection instead.
"""

import logging
import os
import tempfile
from typing import List, Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile

from clipguard.core.dependencies import get_client_ip, security_manager
from clipguard.moderation.pipeline import moderate
from clipguard.schemas.moderation import (
    ModerationRequest,
    ModerationResult,
    QuickCheckRequest,
    QuickCheckResult,
)
from clipguard.services.moderation_service import log_memory, quick_check

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Moderation"])


def _parse_tags(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    return [t.strip() for t in raw.split(",") if t.strip()]


@router.post("/moderate", response_model=ModerationResult)
async def moderate_upload(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(...),
    description: str = Form(""),
    tags: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
):
    """
    Moderate an uploaded video and return the publish verdict.
    """
    ip = get_client_ip(request)
    security_manager.check_rate_limit(ip)

    file_content = await file.read()
    filename = file.filename or "uploaded_video"
    if not file_content:
        raise HTTPException(status_code=400, detail="Empty upload")

    # Reject by extension and size before anything touches disk.
    security_manager.validate_video(filename, len(file_content))

    suffix = os.path.splitext(filename)[1].lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as tmp_file:
        tmp_file.write(file_content)
        temp_path = tmp_file.name
    del file_content

    try:
        security_manager.validate_video(filename, os.path.getsize(temp_path), temp_path)

        moderation_request = ModerationRequest(
            media_path=temp_path,
            title=title,
            description=description,
            tags=_parse_tags(tags),
            category=category,
        )

        def _log_progress(percent: float, stage: str) -> None:
            logger.info(f"[MODERATE] {filename}: {stage} ({percent:.0f}%)")

        gate = request.app.state.moderation_gate
        async with gate.admit():
            log_memory(f"Pre-Moderate: {filename}")
            result = await moderate(moderation_request, on_progress=_log_progress)
            log_memory(f"Post-Moderate: {filename}")

        logger.info(
            f"[MODERATE] {ip} | {filename} | approved={result.approved} "
            f"| {result.processing_time_ms}ms"
        )
        return result

    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


@router.post("/moderate/quick", response_model=QuickCheckResult)
async def moderate_quick(request: Request, payload: QuickCheckRequest):
    security_manager.check_rate_limit(get_client_ip(request))
    result = quick_check(payload.title, payload.description, payload.tags)
    if not result.approved:
        logger.info(f"[QUICK] Rejected '{security_manager.sanitize_log_message(payload.title)}': {result.reason}")
    return result
