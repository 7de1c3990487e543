"""
Repository ingestion helpers.

Turns an uploaded zip archive into a path -> text mapping and derives the
language list from file extensions.
"""

import io
import logging
import zipfile
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

MAX_FILE_SIZE = 200 * 1024  # 200KB per file

LANGUAGE_BY_EXTENSION = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "c": "C",
    "cs": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "go": "Go",
    "rs": "Rust",
    "kt": "Kotlin",
    "swift": "Swift",
}

# Files sent to the model for the comprehensive analysis
CODE_EXTENSIONS = (
    ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cpp", ".c",
    ".cs", ".php", ".rb", ".go", ".rs", ".swift", ".kt",
)

# Binary/generated extensions to skip entirely
SKIP_EXTENSIONS = (
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".webp",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    ".mp3", ".mp4", ".wav", ".avi", ".mov",
    ".zip", ".tar", ".gz", ".rar", ".7z",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".exe", ".dll", ".so", ".dylib",
    ".pyc", ".pyo", ".class", ".o", ".obj",
)

SKIP_DIRS = (
    "node_modules", "venv", ".venv",
    "__pycache__", ".git", ".next",
    "coverage", ".pytest_cache", ".mypy_cache",
    ".idea", ".vscode", ".vs",
    "__MACOSX",
)

AUTH_PATH_MARKERS = ("auth", "login", "jwt", "oauth", "session", "middleware")


class IngestError(Exception):
    """Raised when an upload cannot be read as a zip archive"""


@dataclass
class IngestedFiles:
    files: dict[str, str] = field(default_factory=dict)  # path -> content
    total_size: int = 0


# =============================================================================
# HELPERS
# =============================================================================

def detect_languages(paths) -> list[str]:
    """Languages present in `paths`, in first-seen order, without duplicates."""
    languages = []
    for path in paths:
        name = path.rsplit("/", 1)[-1]
        if "." not in name:
            continue
        language = LANGUAGE_BY_EXTENSION.get(name.rsplit(".", 1)[-1].lower())
        if language and language not in languages:
            languages.append(language)
    return languages


def is_code_file(file_path: str) -> bool:
    """Check if file is a code file based on extension."""
    return file_path.lower().endswith(CODE_EXTENSIONS)


def is_auth_file(file_path: str) -> bool:
    path = file_path.lower()
    return any(marker in path for marker in AUTH_PATH_MARKERS)


def should_skip(file_path: str) -> bool:
    parts = file_path.split("/")
    if any(part in SKIP_DIRS for part in parts[:-1]):
        return True
    return file_path.lower().endswith(SKIP_EXTENSIONS)


def _strip_common_root(files: dict[str, str]) -> dict[str, str]:
    """Drop a single top-level folder shared by every path (GitHub-style archives)."""
    if not files:
        return files
    roots = {path.split("/", 1)[0] for path in files}
    if len(roots) != 1 or any("/" not in path for path in files):
        return files
    return {path.split("/", 1)[1]: content for path, content in files.items()}


# =============================================================================
# ZIP EXTRACTION
# =============================================================================

def extract_zip(data: bytes) -> IngestedFiles:
    """
    Read every text file out of a zip archive.

    Directories, vendored/binary paths, oversized files and files that are
    not valid UTF-8 are skipped.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise IngestError("Uploaded file is not a valid zip archive") from e

    files: dict[str, str] = {}
    skipped = 0
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            path = info.filename.replace("\\", "/").lstrip("/")
            if not path or ".." in path.split("/") or should_skip(path):
                skipped += 1
                continue
            if info.file_size > MAX_FILE_SIZE:
                skipped += 1
                continue
            try:
                files[path] = archive.read(info).decode("utf-8")
            except UnicodeDecodeError:
                skipped += 1
                continue

    files = _strip_common_root(files)
    total_size = sum(len(content) for content in files.values())
    logger.info(f"Extracted {len(files)} files from archive ({skipped} skipped)")
    return IngestedFiles(files=files, total_size=total_size)
