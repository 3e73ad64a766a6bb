"""FastAPI application entry point."""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slack_oauth.api.routes import auth
from slack_oauth.config import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Slack OAuth",
    description="Sign in with Slack over OAuth 2.0 v2",
    version="0.1.0",
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log and handle all unhandled exceptions."""
    logger.error(f"Unhandled error: {type(exc).__name__}: {exc}")
    logger.error(traceback.format_exc())
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {type(exc).__name__}"},
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.app_env.value,
    }


app.include_router(auth.router, prefix="/api/auth/slack", tags=["auth"])
