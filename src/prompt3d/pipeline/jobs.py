from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from prompt3d.errors import InternalError
from prompt3d.storage import ArtifactStore, JobPaths


class JobState(str, Enum):
    CREATED = "created"
    GENERATING = "generating"
    SANITIZING = "sanitizing"
    COMPILING = "compiling"
    VERIFYING = "verifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


_FORWARD = {
    JobState.CREATED: JobState.GENERATING,
    JobState.GENERATING: JobState.SANITIZING,
    JobState.SANITIZING: JobState.COMPILING,
    JobState.COMPILING: JobState.VERIFYING,
    JobState.VERIFYING: JobState.SUCCEEDED,
}

TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    state: frozenset({nxt, JobState.FAILED}) for state, nxt in _FORWARD.items()
}
TRANSITIONS[JobState.SUCCEEDED] = frozenset()
TRANSITIONS[JobState.FAILED] = frozenset()


# Finished jobs beyond this many are forgotten, oldest first
DEFAULT_MAX_JOBS = 1000


def new_job_id() -> str:
    return f"job_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


@dataclass
class Job:
    job_id: str
    paths: JobPaths
    state: JobState = JobState.CREATED
    model: Optional[str] = None
    error: Optional[dict] = None
    stl_path: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)


class JobStore:
    """
    In-process job registry.

    Ids are time-prefixed and re-drawn on a clash with a held job, so
    they stay unique for the process lifetime. The state machine is
    enforced on every update. Past `max_jobs` entries the oldest terminal
    jobs are dropped; jobs still in flight are never evicted.
    """

    def __init__(self, max_jobs: int = DEFAULT_MAX_JOBS):
        self._jobs: dict[str, Job] = {}
        self._max_jobs = max_jobs
        self._lock = threading.Lock()

    def create(self, store: ArtifactStore) -> Job:
        with self._lock:
            job_id = new_job_id()
            while job_id in self._jobs:
                job_id = new_job_id()
            job = Job(job_id=job_id, paths=store.paths_for(job_id))
            self._jobs[job_id] = job
            self._evict()
        return job

    def _evict(self) -> None:
        excess = len(self._jobs) - self._max_jobs
        if excess <= 0:
            return
        # dicts keep insertion order, so this walks oldest first
        stale = [jid for jid, job in self._jobs.items() if job.state.terminal][:excess]
        for jid in stale:
            del self._jobs[jid]

    def get(self, job_id: str) -> Job:
        with self._lock:
            if job_id not in self._jobs:
                raise KeyError(job_id)
            return self._jobs[job_id]

    def advance(
        self,
        job_id: str,
        state: JobState,
        *,
        model: Optional[str] = None,
        error: Optional[dict] = None,
        stl_path: Optional[str] = None,
    ) -> Job:
        with self._lock:
            job = self._jobs[job_id]
            if state not in TRANSITIONS[job.state]:
                raise InternalError(
                    f"Illegal job transition {job.state.value} -> {state.value} for {job_id}"
                )
            job.state = state
            job.updated_at = time.time()
            if model is not None:
                job.model = model
            if error is not None:
                job.error = error
            if stl_path is not None:
                job.stl_path = stl_path
            return job

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


job_store = JobStore()
