from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

OUTPUT_ROUTE = "/output"


@dataclass(frozen=True)
class JobPaths:
    source: Path
    artifact: Path


class ArtifactStore:
    """
    Flat directory of job files.

    <root>/<job_id>.scad  generated source
    <root>/<job_id>.stl   compiled artifact

    Presence on disk is the only existence signal.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def paths_for(self, job_id: str) -> JobPaths:
        return JobPaths(
            source=self.root / f"{job_id}.scad",
            artifact=self.root / f"{job_id}.stl",
        )

    @staticmethod
    def url_for(job_id: str) -> str:
        return f"{OUTPUT_ROUTE}/{job_id}.stl"

    def write_source(self, paths: JobPaths, source: str) -> None:
        paths.source.write_text(source, encoding="utf-8")
        logger.info("Saved SCAD file: %s", paths.source)

    def artifact_size(self, paths: JobPaths) -> Optional[int]:
        """Size in bytes, or None if the artifact does not exist."""
        try:
            return paths.artifact.stat().st_size
        except FileNotFoundError:
            return None

    def discard_artifact(self, paths: JobPaths) -> None:
        paths.artifact.unlink(missing_ok=True)

    def resolve(self, filename: str) -> Path:
        """
        Map a read-path filename to a file under the root.

        Raises:
            ValueError if the name escapes the root
            FileNotFoundError if no such file exists
        """
        target = (self.root / filename).resolve()
        if target.parent != self.root:
            raise ValueError(f"Invalid artifact path: {filename}")
        if not target.is_file():
            raise FileNotFoundError(filename)
        return target
