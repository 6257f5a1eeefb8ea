"""
prompt3d Pipeline Orchestration
===============================

Purpose:
- Own the job lifecycle: created -> generating -> sanitizing ->
  compiling -> verifying -> succeeded (or failed from any step)
- Enforce step order; no retries across steps
- Convert every failure into a structured JobFailed outcome

This module:
- DOES NOT talk to a model provider directly (Selector does)
- DOES NOT spawn processes directly (Compiler Adapter does)
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Optional, Protocol

from prompt3d.errors import (
    ArtifactMissing,
    ConfigurationError,
    InputError,
    InternalError,
    Prompt3DError,
)
from prompt3d.llm.base import ImagePart
from prompt3d.pipeline.jobs import Job, JobState, JobStore, job_store
from prompt3d.pipeline.models import (
    GenerationRequest,
    GenerationResult,
    JobFailed,
    JobOutcome,
    JobSucceeded,
    Strategy,
)
from prompt3d.pipeline.prompts import build_prompt, describe_hints
from prompt3d.pipeline.sanitize import extract_source
from prompt3d.storage import ArtifactStore

logger = logging.getLogger(__name__)


# -----------------------------
# Protocols
# -----------------------------

class SelectorStage(Protocol):
    configured: bool

    def select(self, prompt: str, image: Optional[ImagePart] = None):
        ...


class CompilerStage(Protocol):
    def compile(self, source_path: Path, artifact_path: Path):
        ...


# -----------------------------
# Orchestrator
# -----------------------------

class GenerationOrchestrator:
    """
    Drives one request through the generation pipeline, synchronously.

    Safe to share between threads: all per-job state lives on the Job,
    and distinct jobs never share file paths.
    """

    def __init__(
        self,
        selector: SelectorStage,
        compiler: CompilerStage,
        store: ArtifactStore,
        *,
        jobs: Optional[JobStore] = None,
    ):
        self._selector = selector
        self._compiler = compiler
        self._store = store
        self._jobs = jobs if jobs is not None else job_store

    # -------------------------
    # Public API
    # -------------------------

    @property
    def selector(self) -> SelectorStage:
        return self._selector

    def run(self, request: GenerationRequest) -> JobOutcome:
        try:
            self._validate_input(request)
            self._check_configuration()
        except Prompt3DError as e:
            logger.warning("Rejected request: %s", e)
            return JobFailed(error=e)

        job = self._jobs.create(self._store)
        logger.info(
            "New generation request job=%s has_image=%s hints=%s",
            job.job_id, request.has_image, describe_hints(request.hints),
        )

        source: Optional[str] = None
        try:
            self._advance(job, JobState.GENERATING)
            selection = self._selector.select(
                build_prompt(request.prompt, has_image=request.has_image),
                request.image,
            )

            self._advance(job, JobState.SANITIZING, model=selection.model)
            source = extract_source(selection.text)
            self._store.write_source(job.paths, source)

            self._advance(job, JobState.COMPILING)
            self._compiler.compile(job.paths.source, job.paths.artifact)

            self._advance(job, JobState.VERIFYING)
            file_size = self._verify_artifact(job)

            result = GenerationResult(
                job_id=job.job_id,
                stl_path=self._store.url_for(job.job_id),
                scad_source=source,
                file_size=file_size,
                parameters=self._echo_parameters(request),
                strategy=Strategy.GENERATIVE,
                model=selection.model,
                attempts=[a.summary() for a in selection.attempts],
            )
            self._advance(job, JobState.SUCCEEDED, stl_path=result.stl_path)

        except Prompt3DError as e:
            return self._fail(job, e, source)

        except Exception as e:
            logger.error(
                "Unexpected failure in job %s:\n%s",
                job.job_id, "".join(traceback.format_exc().splitlines(True)[-25:]),
            )
            return self._fail(job, InternalError(str(e) or e.__class__.__name__), source)

        logger.info("Job %s succeeded: %s (%d bytes)", job.job_id, result.stl_path, file_size)
        return JobSucceeded(result=result)

    # -------------------------
    # Steps
    # -------------------------

    def _verify_artifact(self, job: Job) -> int:
        size = self._store.artifact_size(job.paths)
        if size is None:
            raise ArtifactMissing(
                "STL file was not created. OpenSCAD may have failed silently."
            )
        if size == 0:
            raise ArtifactMissing("STL file is empty. OpenSCAD may have failed silently.")
        return size

    def _fail(self, job: Job, error: Prompt3DError, source: Optional[str]) -> JobFailed:
        logger.error("Job %s failed: %s", job.job_id, error)

        try:
            self._store.discard_artifact(job.paths)
        except OSError as e:
            logger.warning("Could not remove partial artifact for %s: %s", job.job_id, e)

        self._jobs.advance(job.job_id, JobState.FAILED, error=error.to_dict())
        return JobFailed(error=error, job_id=job.job_id, scad_source=source)

    def _advance(self, job: Job, state: JobState, **changes) -> None:
        self._jobs.advance(job.job_id, state, **changes)
        logger.debug("Job %s -> %s", job.job_id, state.value)

    # -------------------------
    # Validation
    # -------------------------

    def _validate_input(self, request: GenerationRequest) -> None:
        if not isinstance(request.prompt, str):
            raise InputError("Prompt must be a string")
        request.validate()

    def _check_configuration(self) -> None:
        if not self._selector.configured:
            raise ConfigurationError(
                "Gemini API key not configured. Please set GEMINI_API_KEY environment variable."
            )

    @staticmethod
    def _echo_parameters(request: GenerationRequest) -> dict:
        params = {
            "shape": request.hints.get("target_shape") or "custom",
            "prompt": request.prompt,
            "has_reference_image": request.has_image,
        }
        params.update({k: v for k, v in request.hints.items() if k != "target_shape"})
        return params
