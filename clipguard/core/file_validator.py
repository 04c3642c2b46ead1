"""
Upload validation and log sanitization.

Uploads must be a supported video container within the size cap, and
OpenCV must be able to decode at least one frame from them before the
pipeline spends ffmpeg time on the file.
"""

import os
import re
import logging

import cv2
from fastapi import HTTPException

from clipguard.config import settings

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ('.mp4', '.mov', '.avi', '.mkv', '.webm')


def validate_video(filename: str, filesize: int, file_path: str = None) -> bool:
    """Check extension, size, and (when a path is given) that the stream decodes."""
    ext = os.path.splitext(filename)[1].lower()

    if ext not in VIDEO_EXTENSIONS:
        raise HTTPException(status_code=415, detail="Unsupported file format.")

    if filesize > settings.max_video_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Video too large. Max {settings.max_video_upload_mb}MB allowed."
        )

    if file_path:
        cap = cv2.VideoCapture(file_path)
        try:
            if not cap.isOpened():
                raise HTTPException(status_code=400, detail="Could not open video stream.")
            ret, _ = cap.read()
            if not ret:
                raise HTTPException(status_code=400, detail="Could not read video frames.")
        finally:
            cap.release()

    return True


def sanitize_log_message(message: str) -> str:
    """Strip sensitive file paths from log messages."""
    msg = re.sub(r'\/[^\s]+\/tmp[a-zA-Z0-9_]+', '[TEMP_FILE]', message)
    msg = re.sub(r'\/[^\s]+\/([^\/\s]+)', r'.../\1', msg)
    return msg
