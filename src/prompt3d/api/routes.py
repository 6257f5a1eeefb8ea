from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, JSONResponse

from prompt3d.api.config import settings
from prompt3d.api.engine import get_orchestrator, get_store, health_report
from prompt3d.api.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    JobStatusResponse,
)
from prompt3d.errors import InputError
from prompt3d.llm.base import ImagePart
from prompt3d.pipeline.jobs import JobStore, job_store
from prompt3d.pipeline.models import HINT_FIELDS, GenerationRequest, JobFailed
from prompt3d.pipeline.orchestration import GenerationOrchestrator
from prompt3d.storage import OUTPUT_ROUTE, ArtifactStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")
output_router = APIRouter()


def get_jobs() -> JobStore:
    return job_store


def _to_pipeline_request(req: GenerateRequest) -> GenerationRequest:
    image = None
    if req.image:
        image = ImagePart.from_base64(req.image, max_bytes=settings.max_image_bytes)

    hints = {name: getattr(req, name) for name in HINT_FIELDS if getattr(req, name) is not None}
    return GenerationRequest(prompt=req.prompt, image=image, hints=hints)


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(**health_report())


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse},
               500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def generate(
    req: GenerateRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    try:
        request = _to_pipeline_request(req)
    except InputError as e:
        return JSONResponse(status_code=e.http_status, content=e.to_dict())

    outcome = orchestrator.run(request)

    if isinstance(outcome, JobFailed):
        return JSONResponse(status_code=outcome.error.http_status, content=outcome.to_dict())

    return outcome.result.to_dict()


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
def get_job(job_id: str, jobs: JobStore = Depends(get_jobs)):
    try:
        job = jobs.get(job_id)
    except KeyError:
        raise HTTPException(status_code=404, detail={"type": "NotFound", "message": "Job not found"})

    return JobStatusResponse(
        job_id=job.job_id,
        state=job.state.value,
        model=job.model,
        stl_path=job.stl_path,
        error=job.error,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@output_router.get(OUTPUT_ROUTE + "/{filename}")
def download_artifact(filename: str, store: ArtifactStore = Depends(get_store)):
    try:
        target = store.resolve(filename)
    except ValueError:
        raise HTTPException(status_code=400, detail={"type": "BadPath", "message": "Invalid artifact path"})
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail={"type": "NotFound", "message": "Artifact not found"})

    media_type = "model/stl" if target.suffix == ".stl" else "text/plain"
    return FileResponse(path=str(target), filename=target.name, media_type=media_type)
