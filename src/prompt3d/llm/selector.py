"""
Model Fallback Selector
=======================

Purpose:
- Try an ordered, caller-supplied list of generators
- Return the first non-empty raw response and the model that produced it
- Record every attempt before moving to the next candidate

This module:
- DOES NOT sanitize output
- DOES NOT race candidates (strictly sequential)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from prompt3d.errors import ConfigurationError, GenerationExhausted
from prompt3d.llm.base import Generator, ImagePart

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationAttempt:
    model: str
    text: Optional[str] = None
    error: Optional[BaseException] = None
    elapsed_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def summary(self) -> dict:
        out = {"model": self.model, "ok": self.ok, "elapsed_s": round(self.elapsed_s, 3)}
        if self.error is not None:
            out["error"] = str(self.error)
        return out


@dataclass
class Selection:
    text: str
    model: str
    attempts: list[GenerationAttempt] = field(default_factory=list)


class EmptyResponseError(RuntimeError):
    pass


class ModelFallbackSelector:
    def __init__(
        self,
        candidates: Sequence[Generator],
        *,
        timeout: Optional[float] = None,
        on_attempt: Optional[Callable[[GenerationAttempt], None]] = None,
    ):
        if not candidates:
            raise ConfigurationError("No candidate models configured")
        self._candidates = list(candidates)
        self._timeout = timeout
        self._on_attempt = on_attempt

    @property
    def candidates(self) -> list[Generator]:
        return list(self._candidates)

    @property
    def configured(self) -> bool:
        """True when at least one candidate has its credentials."""
        return any(c.configured for c in self._candidates)

    def select(self, prompt: str, image: Optional[ImagePart] = None) -> Selection:
        """
        Run the fallback chain.

        Raises:
            GenerationExhausted if every candidate fails.
        """
        attempts: list[GenerationAttempt] = []
        last_error: Optional[BaseException] = None

        for candidate in self._candidates:
            attempt = self._attempt(candidate, prompt, image)
            attempts.append(attempt)
            self._observe(attempt)

            if attempt.ok:
                return Selection(text=attempt.text, model=attempt.model, attempts=attempts)

            last_error = attempt.error

        raise GenerationExhausted(
            f"Failed to generate OpenSCAD code: {last_error}",
            last_error=last_error,
            attempts=attempts,
        )

    def _attempt(
        self,
        candidate: Generator,
        prompt: str,
        image: Optional[ImagePart],
    ) -> GenerationAttempt:
        started = time.monotonic()
        try:
            text = candidate.generate(prompt, image, timeout=self._timeout)
            if not text or not text.strip():
                raise EmptyResponseError(f"{candidate.name} returned an empty response")
        except Exception as e:
            return GenerationAttempt(
                model=candidate.name,
                error=e,
                elapsed_s=time.monotonic() - started,
            )

        return GenerationAttempt(
            model=candidate.name,
            text=text,
            elapsed_s=time.monotonic() - started,
        )

    def _observe(self, attempt: GenerationAttempt) -> None:
        if attempt.ok:
            logger.info("Model %s succeeded in %.2fs", attempt.model, attempt.elapsed_s)
        else:
            logger.warning("Model %s failed: %s", attempt.model, attempt.error)

        if self._on_attempt is not None:
            self._on_attempt(attempt)
