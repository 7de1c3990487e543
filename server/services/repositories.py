"""
Repository persistence: writes ingested files to blob storage and the
metadata row to the database.
"""

import json
import logging
import uuid

from sqlalchemy.orm import Session

from config import MAX_ANALYSIS_FILES, MAX_AUTH_FILES, MAX_FILE_CHARS
from models import Repository
from services.github import GitHubClient
from services.ingest import detect_languages, is_auth_file, is_code_file
from services.storage import BlobStore, repository_prefix

logger = logging.getLogger(__name__)


def find_by_source_url(db: Session, source_url: str) -> Repository | None:
    return (
        db.query(Repository)
        .filter(Repository.source_url == source_url)
        .order_by(Repository.created_at)
        .first()
    )


def create_repository(
    db: Session,
    store: BlobStore,
    *,
    name: str,
    source_type: str,
    files: dict[str, str],
    total_size: int,
    source_url: str | None = None,
) -> Repository:
    """Store every file under repositories/<id>/ and insert the metadata row."""
    repository_id = str(uuid.uuid4())
    prefix = repository_prefix(repository_id)

    repository = Repository(
        id=repository_id,
        name=name,
        source_type=source_type,
        source_url=source_url,
        file_count=len(files),
        total_size=total_size,
        languages=json.dumps(detect_languages(files.keys())),
        storage_path=prefix,
    )
    try:
        for file_path, content in files.items():
            store.put(f"{prefix}/{file_path}", content)
        db.add(repository)
        db.commit()
    except Exception:
        db.rollback()
        store.delete_prefix(prefix)
        logger.error(f"Failed to create repository {repository_id}; removed {prefix}")
        raise
    db.refresh(repository)

    logger.info(
        f"Created repository {repository.id} ({name}, {len(files)} files)",
        extra={"repository_id": repository.id},
    )
    return repository


async def ingest_github_repository(
    db: Session,
    store: BlobStore,
    github: GitHubClient,
    url: str,
    branch: str = "main",
) -> tuple[Repository, bool]:
    """Return (repository, created). An already-ingested URL is returned as is."""
    existing = find_by_source_url(db, url)
    if existing:
        logger.info(f"Repository already exists for {url}: {existing.id}")
        return existing, False

    fetched = await github.fetch_repository(url, branch)
    repository = create_repository(
        db,
        store,
        name=fetched.name,
        source_type="github",
        source_url=url,
        files=fetched.files,
        total_size=fetched.total_size,
    )
    return repository, True


def unique_repositories(repositories: list[Repository]) -> tuple[list[Repository], int]:
    """
    Keep the first row per source URL. Uploads (no source URL) are always
    kept. Returns (unique rows, number of duplicates found).
    """
    unique = []
    seen_urls = set()
    duplicates = 0
    for repository in repositories:
        if repository.source_url:
            if repository.source_url in seen_urls:
                duplicates += 1
                continue
            seen_urls.add(repository.source_url)
        unique.append(repository)
    return unique, duplicates


# =============================================================================
# FILE ACCESS
# =============================================================================

def list_files(store: BlobStore, repository: Repository) -> list[dict]:
    prefix = f"{repository.storage_path}/"
    return [
        {
            "path": obj.key[len(prefix):],
            "size": obj.size,
            "last_modified": obj.last_modified.isoformat(),
        }
        for obj in store.list(repository.storage_path)
    ]


def read_file(store: BlobStore, repository: Repository, file_path: str) -> str | None:
    return store.get(f"{repository.storage_path}/{file_path}")


def collect_code_files(
    store: BlobStore,
    repository: Repository,
    max_files: int = MAX_ANALYSIS_FILES,
    max_chars: int = MAX_FILE_CHARS,
) -> list[tuple[str, str]]:
    """First `max_files` stored code files, each cut to `max_chars` characters."""
    code_files = []
    for entry in list_files(store, repository):
        if not is_code_file(entry["path"]):
            continue
        content = read_file(store, repository, entry["path"])
        if content is None:
            continue
        code_files.append((entry["path"], content[:max_chars]))
        if len(code_files) >= max_files:
            break
    return code_files


def collect_auth_files(
    store: BlobStore,
    repository: Repository,
    max_files: int = MAX_AUTH_FILES,
) -> list[tuple[str, str]]:
    auth_files = []
    for entry in list_files(store, repository):
        if not is_auth_file(entry["path"]):
            continue
        content = read_file(store, repository, entry["path"])
        if content is not None:
            auth_files.append((entry["path"], content))
        if len(auth_files) >= max_files:
            break
    return auth_files
