from pydantic import BaseModel, Field
from typing import Any, Optional


class HealthResponse(BaseModel):
    status: str = "ok"
    gemini_configured: bool
    openscad_available: bool
    openscad_version: str = "unknown"
    openscad_path: str
    compilation_mode: str = "server-side"
    backend: str
    models: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    message: str = ""


class GenerateRequest(BaseModel):
    prompt: str = ""
    # base64, optionally as a data: URL
    image: Optional[str] = None

    # Structural hints, echoed back but not used by the generative path
    target_shape: Optional[str] = None
    height_mm: Optional[float] = Field(default=None, gt=0)
    width_mm: Optional[float] = Field(default=None, gt=0)
    depth_mm: Optional[float] = Field(default=None, gt=0)
    wall_thickness_mm: Optional[float] = Field(default=None, gt=0)
    pattern: Optional[str] = None


class AttemptSummary(BaseModel):
    model: str
    ok: bool
    elapsed_s: float = 0.0
    error: Optional[str] = None


class GenerateResponse(BaseModel):
    job_id: str
    stl_path: str
    scad_source: str
    file_size: int
    parameters: dict[str, Any]
    strategy: str
    model: Optional[str] = None
    attempts: list[AttemptSummary] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    code: str
    job_id: Optional[str] = None
    scad_source: Optional[str] = None
    hint: Optional[str] = None
    detail: Optional[str] = None
    attempts: Optional[list[AttemptSummary]] = None


class JobStatusResponse(BaseModel):
    job_id: str
    state: str  # created|generating|sanitizing|compiling|verifying|succeeded|failed
    model: Optional[str] = None
    stl_path: Optional[str] = None
    error: Optional[dict[str, Any]] = None
    created_at: float
    updated_at: float
