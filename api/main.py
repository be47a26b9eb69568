"""
LLM Check API

FastAPI application serving the AI visibility scan:
1. Receives scan requests from the dashboard (premium users)
2. Reuses scans younger than 72 hours
3. Otherwise fans out 15 queries to ChatGPT, Gemini and Perplexity
4. Stores results and returns them with a visibility trend
"""

import logging
import os
import secrets
import sys
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from llmcheck import __version__
from llmcheck.database import (
    check_db_connection,
    get_database_url,
    get_db_context,
    init_db,
)
from api.visibility import router as visibility_router, close_model_clients

# Configure logging to stdout (most PaaS log collectors treat stderr as errors)
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,  # Explicitly use stdout
    force=True,  # Override any existing config
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Create FastAPI app
app = FastAPI(
    title="LLM Check",
    description="AI visibility scans across ChatGPT, Gemini and Perplexity",
    version=__version__,
)

app.include_router(visibility_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Keep the {"error": ...} shape for requests FastAPI rejects itself."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request: {field}: {first.get('msg', 'invalid value')}"},
    )


# ============================================================================
# STARTUP / SHUTDOWN
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    logger.info("Initializing database...")
    try:
        init_db()
        if check_db_connection():
            logger.info("Database connection verified")
        else:
            logger.warning("Database connection check failed - continuing anyway")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        # Don't fail startup - health endpoint reports the problem


@app.on_event("shutdown")
async def shutdown_event():
    await close_model_clients()


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "LLM Check"}


@app.get("/api/health")
async def health():
    """Detailed health check including database status."""
    db_connected = check_db_connection()

    return {
        "status": "healthy" if db_connected else "degraded",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "database": "connected" if db_connected else "disconnected",
    }


# Rubric columns added after the first release of ai_visibility_results
RUBRIC_MIGRATION = """
    ALTER TABLE ai_visibility_results
      ADD COLUMN IF NOT EXISTS prominence VARCHAR(10)  DEFAULT NULL,
      ADD COLUMN IF NOT EXISTS sentiment  FLOAT        DEFAULT NULL,
      ADD COLUMN IF NOT EXISTS cited      BOOLEAN      DEFAULT FALSE,
      ADD COLUMN IF NOT EXISTS score      INTEGER      DEFAULT NULL
"""

PROMPTS_MIGRATION = """
    ALTER TABLE ai_visibility_scans
      ADD COLUMN IF NOT EXISTS prompts JSON DEFAULT NULL
"""


@app.post("/api/admin/migrate-visibility-schema")
async def migrate_visibility_schema(x_admin_secret: Optional[str] = Header(None)):
    """
    Create visibility tables and add rubric and prompt columns to older deployments.
    Safe to run multiple times. Protected by the ADMIN_SECRET header.
    """
    expected = os.getenv("ADMIN_SECRET")
    if not expected or not x_admin_secret or not secrets.compare_digest(x_admin_secret, expected):
        return JSONResponse(status_code=403, content={"error": "Forbidden"})

    init_db()

    if get_database_url().startswith("postgresql"):
        with get_db_context() as db:
            db.execute(text(RUBRIC_MIGRATION))
            db.execute(text(PROMPTS_MIGRATION))

    logger.info("Visibility schema migration complete")
    return {"ok": True, "message": "Migration complete"}


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
