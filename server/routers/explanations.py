"""
Explanation endpoints: per-file explanations, the comprehensive analysis
and the auth-flow analysis.
"""

import base64
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from database import get_db
from models import Explanation
from report import generate_diagram, render_analysis_page
from report.render import CODE_ANALOGIES_DIAGRAM_PATH, COMPREHENSIVE_PATH, DATA_FLOW_DIAGRAM_PATH
from routers import call_model, get_repository_or_404, github_http_error, limiter
from schemas import AnalyzeRequest, ExplainRequest, ExplanationType, GeneratedExplanation
from services import prompts
from services import repositories as repository_service
from services.gemini import GeminiClient, get_gemini_client
from services.github import GitHubClient, GitHubError, get_github_client
from services.storage import BlobStore, StorageError, get_blob_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["explanations"])

AUTH_FLOW_PATH = "auth-flow-analysis"
GITHUB_PREFIX = "https://github.com/"


def _text_data_uri(text: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"data:text/plain;base64,{encoded}"


def _parse_generated(parsed) -> GeneratedExplanation:
    if not isinstance(parsed, dict):
        return GeneratedExplanation()
    try:
        return GeneratedExplanation(**parsed)
    except ValidationError as e:
        logger.warning(f"Explanation JSON had unexpected fields: {e}")
        return GeneratedExplanation()


def _save(db: Session, **fields) -> Explanation:
    explanation = Explanation(**fields)
    db.add(explanation)
    db.commit()
    db.refresh(explanation)
    return explanation


# =============================================================================
# PER-FILE EXPLANATIONS
# =============================================================================

@router.post("/repositories/{repository_id}/explain", status_code=201)
@limiter.limit("20/minute")
async def explain_code(
    request: Request,
    repository_id: str,
    body: ExplainRequest,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """Explain a file, or a line range of it."""
    repository = get_repository_or_404(db, repository_id)
    try:
        content = repository_service.read_file(store, repository, body.file_path)
    except StorageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if content is None:
        raise HTTPException(status_code=404, detail="File not found")

    lines = content.split("\n")
    code_section = "\n".join(lines[(body.start_line or 1) - 1:body.end_line or len(lines)])
    explanation_type = body.explanation_type.value

    prompt = prompts.build_explain_prompt(explanation_type, body.file_path, code_section)
    parsed, raw_text = await call_model(gemini.generate_json, prompt)
    generated = _parse_generated(parsed)

    explanation = _save(
        db,
        repository_id=repository.id,
        file_path=body.file_path,
        explanation_type=explanation_type,
        title=generated.title or f"{explanation_type} explanation",
        content=generated.content or raw_text,
        diagram_url=_text_data_uri(generated.diagram) if generated.diagram else None,
    )
    return {"explanation": explanation.to_dict()}


@router.get("/repositories/{repository_id}/explanations")
def list_explanations(
    request: Request,
    repository_id: str,
    type: str | None = None,
    file_path: str | None = None,
    db: Session = Depends(get_db),
):
    """JSON by default; the rendered analysis page for browsers."""
    repository = get_repository_or_404(db, repository_id)

    query = db.query(Explanation).filter(Explanation.repository_id == repository.id)
    if type:
        query = query.filter(Explanation.explanation_type == type)
    if file_path:
        query = query.filter(Explanation.file_path == file_path)
    explanations = query.order_by(Explanation.created_at).all()

    if "text/html" in request.headers.get("accept", ""):
        return HTMLResponse(render_analysis_page(repository, explanations))
    return {"explanations": [explanation.to_dict() for explanation in explanations]}


@router.get("/explanations/{explanation_id}")
def get_explanation(explanation_id: str, db: Session = Depends(get_db)):
    explanation = db.query(Explanation).filter(Explanation.id == explanation_id).first()
    if not explanation:
        raise HTTPException(status_code=404, detail="Explanation not found")
    return {"explanation": explanation.to_dict()}


# =============================================================================
# REPOSITORY-WIDE ANALYSES
# =============================================================================

@router.post("/repositories/analyze", status_code=201)
@limiter.limit("5/minute")
async def analyze_repository(
    request: Request,
    body: AnalyzeRequest,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    github: GitHubClient = Depends(get_github_client),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    """
    Comprehensive interview-preparation analysis of a GitHub repository.

    Ingests the repository when it is new, sends up to 15 code files to the
    model and stores the report with its three diagrams.
    """
    source = body.source.strip()
    if not source.startswith(GITHUB_PREFIX):
        raise HTTPException(
            status_code=400,
            detail="Only GitHub sources can be analyzed. For file uploads, use POST /repositories/upload",
        )

    try:
        repository, created = await repository_service.ingest_github_repository(
            db, store, github, source, body.branch
        )
    except GitHubError as e:
        raise github_http_error(e)

    code_files = repository_service.collect_code_files(store, repository)
    logger.info(
        f"Analyzing {repository.id} with {len(code_files)} code files (new={created})",
        extra={"repository_id": repository.id},
    )

    prompt = prompts.build_analysis_prompt(repository.name, source, repository.language_list, code_files)
    analysis = await call_model(gemini.generate_text, prompt)

    api_key = gemini.api_key
    structure_diagram = generate_diagram(prompts.project_structure_description(repository.name), api_key)
    data_flow_diagram = generate_diagram(prompts.data_flow_description(repository.name), api_key)
    analogies_diagram = generate_diagram(prompts.code_analogies_description(repository.name), api_key)

    explanation = _save(
        db,
        repository_id=repository.id,
        file_path=COMPREHENSIVE_PATH,
        explanation_type=ExplanationType.COMPREHENSIVE.value,
        title=prompts.COMPREHENSIVE_TITLE,
        content=analysis,
        diagram_url=structure_diagram,
    )
    diagrams = [
        _save(
            db,
            repository_id=repository.id,
            file_path=DATA_FLOW_DIAGRAM_PATH,
            explanation_type=ExplanationType.DIAGRAM.value,
            title=prompts.DATA_FLOW_TITLE,
            content="Tree-structure diagram showing data flow, shared state, and component relationships",
            diagram_url=data_flow_diagram,
        ),
        _save(
            db,
            repository_id=repository.id,
            file_path=CODE_ANALOGIES_DIAGRAM_PATH,
            explanation_type=ExplanationType.DIAGRAM.value,
            title=prompts.CODE_ANALOGIES_TITLE,
            content="Visual diagrams with analogies for notable code sections",
            diagram_url=analogies_diagram,
        ),
    ]

    return {
        "repository": repository.to_dict(),
        "explanation": explanation.to_dict(),
        "diagrams": [diagram.to_dict() for diagram in diagrams],
        "viewer_url": f"/repositories/{repository.id}/explanations",
    }


@router.post("/repositories/{repository_id}/auth-flow")
@limiter.limit("10/minute")
async def analyze_auth_flow(
    request: Request,
    repository_id: str,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    gemini: GeminiClient = Depends(get_gemini_client),
):
    repository = get_repository_or_404(db, repository_id)
    auth_files = repository_service.collect_auth_files(store, repository)
    if not auth_files:
        return {"explanation": None, "message": "No authentication-related files found in this repository."}

    analysis = await call_model(gemini.generate_text, prompts.build_auth_flow_prompt(auth_files))
    explanation = _save(
        db,
        repository_id=repository.id,
        file_path=AUTH_FLOW_PATH,
        explanation_type=ExplanationType.FLOW.value,
        title=prompts.AUTH_FLOW_TITLE,
        content=analysis,
    )
    return JSONResponse(status_code=201, content={"explanation": explanation.to_dict()})
