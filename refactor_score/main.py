"""
RefactorScore API

FastAPI application exposing stored commit analyses and an endpoint that
runs the analysis of one commit on demand.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from . import __version__
from .logging_config import setup_logging
from .pipeline.entities import AnalysisStatus
from .pipeline.errors import CommitNotFoundError, DomainError, LLMError
from .schemas import (
    AnalyzeCommitResponse,
    CommitAnalysisResponse,
    CommitAnalysisSummary,
    build_commit_analysis_response,
    build_summary,
)
from .settings import get_settings
from .wiring import Components, build_components

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    components = build_components(get_settings())
    app.state.components = components
    try:
        yield
    finally:
        await components.aclose()


app = FastAPI(
    title="RefactorScore API",
    description="Clean-code scoring of git commits with a local LLM",
    version=__version__,
    lifespan=lifespan,
)

# Rate limiting
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."},
    )


@app.exception_handler(CommitNotFoundError)
async def commit_not_found_handler(request: Request, exc: CommitNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.error(f"Domain error on {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(LLMError)
async def llm_error_handler(request: Request, exc: LLMError):
    logger.error(f"LLM failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "Analysis model unavailable or failed. The commit was not saved."},
    )


def get_components(request: Request) -> Components:
    return request.app.state.components


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
def read_root():
    """Status endpoint."""
    return {"status": "ok", "version": __version__, "message": "RefactorScore API"}


@app.get("/health")
async def health(components: Components = Depends(get_components)):
    """Reports whether the model server answers."""
    ollama_ok = await components.ollama.ping()
    return {"status": "ok" if ollama_ok else "degraded", "ollama": ollama_ok}


@app.get("/analyses", response_model=list[CommitAnalysisSummary])
def list_analyses(
    limit: int = Query(20, ge=1, le=100),
    components: Components = Depends(get_components),
):
    """Most recent stored analyses, newest first."""
    return [build_summary(a) for a in components.repository.list_recent(limit)]


@app.get("/analyses/{commit_id}", response_model=CommitAnalysisResponse)
def get_analysis(commit_id: str, components: Components = Depends(get_components)):
    """Stored analysis for one commit."""
    analysis = components.repository.get_by_commit_id(commit_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Commit analysis not found")
    return build_commit_analysis_response(analysis)


@app.post("/analyses/{commit_id}", response_model=AnalyzeCommitResponse)
@limiter.limit("10/minute")
async def analyze_commit(request: Request, commit_id: str, components: Components = Depends(get_components)):
    """
    Analyze a commit of the configured repository.

    Returns the stored analysis unchanged if the commit was already analyzed.
    Skipped commits (nothing analyzable) are reported but not saved.
    """
    run = await components.orchestrator.analyze_commit(commit_id)

    analysis = None
    if run.analysis is not None and run.status != AnalysisStatus.SKIPPED:
        analysis = build_commit_analysis_response(run.analysis)

    return AnalyzeCommitResponse(commit_id=run.commit_id, status=run.status.value, analysis=analysis)
