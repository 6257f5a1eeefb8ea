"""
Pipeline data model: requests, results and terminal job outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from prompt3d.errors import InputError, Prompt3DError
from prompt3d.llm.base import ImagePart


class Strategy(str, Enum):
    GENERATIVE = "generative"
    TEMPLATE = "template"


HINT_FIELDS = (
    "target_shape",
    "height_mm",
    "width_mm",
    "depth_mm",
    "wall_thickness_mm",
    "pattern",
)


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str = ""
    image: Optional[ImagePart] = None
    # Advisory only; inert on the generative path
    hints: dict[str, Any] = field(default_factory=dict)

    @property
    def has_image(self) -> bool:
        return self.image is not None

    def validate(self) -> None:
        if not self.prompt.strip() and self.image is None:
            raise InputError("Prompt or image is required")


@dataclass
class GenerationResult:
    job_id: str
    stl_path: str
    scad_source: str
    file_size: int
    parameters: dict[str, Any]
    strategy: Strategy = Strategy.GENERATIVE
    model: Optional[str] = None
    attempts: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "stl_path": self.stl_path,
            "scad_source": self.scad_source,
            "file_size": self.file_size,
            "parameters": self.parameters,
            "strategy": self.strategy.value,
            "model": self.model,
            "attempts": self.attempts,
        }


# ---------------------------------------------------------------------------
# Terminal outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JobSucceeded:
    result: GenerationResult


@dataclass(frozen=True)
class JobFailed:
    error: Prompt3DError
    job_id: Optional[str] = None
    # Best-effort source, kept so a caller can inspect what was attempted
    scad_source: Optional[str] = None

    def to_dict(self) -> dict:
        body = self.error.to_dict()
        if self.job_id:
            body["job_id"] = self.job_id
        if self.scad_source:
            body["scad_source"] = self.scad_source
        return body


JobOutcome = Union[JobSucceeded, JobFailed]
