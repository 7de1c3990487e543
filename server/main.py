"""
Code Tutor API

Ingests repositories, generates interview-preparation analyses with Gemini
and serves them as JSON or rendered HTML.
"""

import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session

from config import ALLOWED_ORIGINS, VIEWER_REPOSITORY_LIMIT
from database import get_db, init_db
from logging_config import setup_logging
from models import Repository
from report import render_viewer_page
from routers import explanations, limiter, quizzes, repositories

setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Create tables
init_db()

app = FastAPI(
    title="Code Tutor API",
    description="Code analysis, explanation and interactive learning for interview preparation",
    version=VERSION,
)

app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - start) * 1000, 1)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."},
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(repositories.router)
app.include_router(explanations.router)
app.include_router(quizzes.router)


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
def read_root():
    """Service description."""
    return {
        "name": "Code Tutor API",
        "version": VERSION,
        "description": "Code analysis, explanation, and interactive learning",
        "endpoints": {
            "health": "/health",
            "repositories": "/repositories",
            "upload": "/repositories/upload",
            "github": "/repositories/github",
            "analyze": "/repositories/analyze",
            "viewer": "/viewer",
        },
    }


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/viewer", response_class=HTMLResponse)
def viewer(db: Session = Depends(get_db)):
    """HTML list of analyzed repositories."""
    rows = (
        db.query(Repository)
        .order_by(Repository.created_at.desc())
        .limit(VIEWER_REPOSITORY_LIMIT)
        .all()
    )
    return HTMLResponse(render_viewer_page(rows))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
