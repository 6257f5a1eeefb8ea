from .models import GenerationRequest, GenerationResult, JobFailed, JobSucceeded, Strategy
from .orchestration import GenerationOrchestrator

__all__ = [
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationResult",
    "JobFailed",
    "JobSucceeded",
    "Strategy",
]
