"""
prompt3d.llm

Generation backends and the fallback chain over them.

Public API:
- Generator, ImagePart: the one-method backend interface
- ModelFallbackSelector: ordered fallback across generators
"""

from .base import Generator, ImagePart
from .selector import GenerationAttempt, ModelFallbackSelector, Selection

__all__ = [
    "Generator",
    "ImagePart",
    "GenerationAttempt",
    "ModelFallbackSelector",
    "Selection",
]
