from __future__ import annotations

from typing import Optional


class Prompt3DError(Exception):
    """
    User-facing, structured error.

    These errors are safe to show directly to users of the API
    without leaking stack traces.
    """

    code = "error"
    http_status = 500

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.hint = hint
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.hint:
            body["hint"] = self.hint
        if self.detail:
            body["detail"] = self.detail
        return body


class InputError(Prompt3DError):
    """Neither prompt nor image supplied, or the image is unusable."""

    code = "input_error"
    http_status = 400


class ConfigurationError(Prompt3DError):
    code = "configuration_error"
    http_status = 500


class GenerationExhausted(Prompt3DError):
    """Every candidate model failed."""

    code = "generation_exhausted"
    http_status = 502

    def __init__(self, message: str, *, last_error: Optional[BaseException] = None, attempts=None):
        super().__init__(message)
        self.last_error = last_error
        self.attempts = list(attempts or [])

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.attempts:
            body["attempts"] = [a.summary() for a in self.attempts]
        return body


class SanitizationEmpty(Prompt3DError):
    code = "sanitization_empty"
    http_status = 502

    def __init__(self, message: str = "Generation produced no usable source"):
        super().__init__(message)


class CompilationFailed(Prompt3DError):
    """Compiler exited non-zero, timed out, or could not be started."""

    code = "compilation_failed"
    http_status = 422

    def __init__(
        self,
        message: str,
        *,
        timed_out: bool = False,
        returncode: Optional[int] = None,
        diagnostics: str = "",
    ):
        super().__init__(
            message,
            hint="The generated code may have syntax errors. Check the OpenSCAD code above.",
            detail=diagnostics or None,
        )
        self.timed_out = timed_out
        self.returncode = returncode
        self.diagnostics = diagnostics


class ArtifactMissing(Prompt3DError):
    """Compiler reported success but no usable artifact was written."""

    code = "artifact_missing"
    http_status = 500


class InternalError(Prompt3DError):
    code = "internal_error"
    http_status = 500
