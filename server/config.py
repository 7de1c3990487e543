"""
Runtime configuration for the Code Tutor API.

Everything is read from the environment; a local .env file is loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# Storage
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'database.db'}")
BLOB_STORAGE_DIR = Path(os.getenv("BLOB_STORAGE_DIR", str(BASE_DIR / "blobs")))

# External services
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")

# HTTP
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://localhost:8080",
    ).split(",")
    if origin.strip()
]
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() not in ("0", "false", "no")

# Analysis limits
MAX_ANALYSIS_FILES = 15  # stored files considered for the comprehensive analysis
MAX_FILE_CHARS = 3000  # characters per file sent to the model
MAX_AUTH_FILES = 3
MAX_REPOSITORY_LISTING = 50
VIEWER_REPOSITORY_LIMIT = 10
