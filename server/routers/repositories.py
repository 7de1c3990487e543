"""
Repository ingestion and file access endpoints.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config import MAX_REPOSITORY_LISTING
from database import get_db
from models import Repository
from routers import get_repository_or_404, github_http_error, limiter
from schemas import GithubIngestRequest, SourceType
from services import repositories as repository_service
from services.github import GitHubClient, GitHubError, get_github_client
from services.ingest import IngestError, extract_zip
from services.storage import BlobStore, StorageError, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repositories", tags=["repositories"])


@router.post("/upload", status_code=201)
@limiter.limit("10/minute")
async def upload_repository(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    """Ingest a zip archive of a codebase."""
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        ingested = extract_zip(data)
    except IngestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    filename = file.filename or "upload.zip"
    name = filename[:-4] if filename.lower().endswith(".zip") else filename
    repository = repository_service.create_repository(
        db,
        store,
        name=name,
        source_type=SourceType.UPLOAD.value,
        files=ingested.files,
        total_size=ingested.total_size,
    )
    return {"repository": repository.to_dict()}


@router.post("/github")
@limiter.limit("10/minute")
async def ingest_github(
    request: Request,
    body: GithubIngestRequest,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    github: GitHubClient = Depends(get_github_client),
):
    """Fetch a GitHub repository. An already-ingested URL returns the existing row."""
    try:
        repository, created = await repository_service.ingest_github_repository(
            db, store, github, body.url.strip(), body.branch
        )
    except GitHubError as e:
        raise github_http_error(e)

    if not created:
        return {"repository": repository.to_dict(), "message": "Repository already exists"}
    return JSONResponse(status_code=201, content={"repository": repository.to_dict()})


@router.get("")
def list_repositories(db: Session = Depends(get_db)):
    rows = db.query(Repository).order_by(Repository.created_at).all()
    unique, duplicates = repository_service.unique_repositories(rows)

    response = {
        "repositories": [repository.to_dict() for repository in unique[:MAX_REPOSITORY_LISTING]],
        "duplicates_found": duplicates,
    }
    if duplicates:
        response["message"] = f"Found {duplicates} duplicate repositories"
    return response


@router.get("/{repository_id}")
def get_repository(
    repository_id: str,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    repository = get_repository_or_404(db, repository_id)
    return {
        "repository": repository.to_dict(),
        "files": repository_service.list_files(store, repository),
    }


@router.get("/{repository_id}/files/{file_path:path}")
def get_file(
    repository_id: str,
    file_path: str,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    repository = get_repository_or_404(db, repository_id)
    try:
        content = repository_service.read_file(store, repository, file_path)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if content is None:
        raise HTTPException(status_code=404, detail="File not found")
    return {"content": content, "path": file_path}
