"""
HTTP routers and the helpers they share.
"""

import logging

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from config import RATE_LIMIT_ENABLED
from models import Repository
from services.gemini import GeminiError, GeminiNotConfigured
from services.github import GitHubError, InvalidRepositoryUrl

logger = logging.getLogger(__name__)

# Rate limiting
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


def get_repository_or_404(db: Session, repository_id: str) -> Repository:
    repository = db.query(Repository).filter(Repository.id == repository_id).first()
    if not repository:
        raise HTTPException(status_code=404, detail="Repository not found")
    return repository


async def call_model(func, *args):
    """Run a blocking Gemini call off the event loop and map its failures to HTTP errors."""
    try:
        return await run_in_threadpool(func, *args)
    except GeminiNotConfigured:
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY not configured")
    except GeminiError as e:
        logger.error(f"Model call failed: {e}")
        raise HTTPException(status_code=503, detail="Model service temporarily unavailable.")


def github_http_error(e: GitHubError) -> HTTPException:
    if isinstance(e, InvalidRepositoryUrl):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"GitHub fetch failed: {e}")
    return HTTPException(status_code=502, detail=f"Failed to fetch GitHub repository: {e}")
