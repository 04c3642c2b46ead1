"""
ClipGuard moderation API.

Run with:
    uvicorn clipguard.main:app --host 0.0.0.0 --port 8000
"""

import logging

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from clipguard.api import moderation, system  # noqa: E402
from clipguard.config import settings  # noqa: E402
from clipguard.core.dependencies import ModerationGate  # noqa: E402
from clipguard.integrations import http_client, redis_client  # noqa: E402
from clipguard.integrations.gemini import client as gemini_client  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    gemini_client.initialize()
    redis_client.initialize()
    await http_client.initialize()

    app.state.moderation_gate = ModerationGate(settings.max_concurrent_runs)
    logger.info(f"[STARTUP] Moderation gate allows {settings.max_concurrent_runs} concurrent runs")

    yield

    await http_client.close()
    logger.info("[SHUTDOWN] ClipGuard stopped")


app = FastAPI(title="ClipGuard Moderation API", lifespan=lifespan)


# HTTP errors keep CORS headers so browser clients can read the JSON body.
@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers["Access-Control-Allow-Origin"] = "*"

    # Drain the rest of a rejected upload so the connection is not reset mid-body.
    try:
        async for _ in request.stream():
            pass
    except Exception as e:
        logger.warning(f"Error draining request stream in exception handler: {e}")

    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} to client: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(moderation.router)
