"""
Artifact Compiler Adapter
=========================

Purpose:
- Run the OpenSCAD binary as a child process: source -> STL
- Bound every run with a wall-clock timeout and kill on expiry
- Capture diagnostics

This module:
- DOES NOT interpret diagnostic text
- DOES NOT check the produced file (the orchestrator does)

All platform-specific process handling lives here.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from prompt3d.errors import CompilationFailed

logger = logging.getLogger(__name__)

VERSION_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class CompileResult:
    returncode: Optional[int]
    stdout: str
    stderr: str
    elapsed_s: float
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0

    @property
    def diagnostics(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def _kill(proc: subprocess.Popen) -> None:
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        proc.kill()


def run_process(args: list[str], timeout: float) -> CompileResult:
    """
    Run `args` (no shell) and wait at most `timeout` seconds.

    On timeout the child, and on POSIX its whole process group, is killed
    and reaped before returning.

    Raises:
        FileNotFoundError if the executable does not exist.
    """
    started = time.monotonic()
    proc = subprocess.Popen(
        args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        start_new_session=(os.name == "posix"),
    )

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill(proc)
        stdout, stderr = proc.communicate()
        return CompileResult(
            returncode=proc.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            elapsed_s=time.monotonic() - started,
            timed_out=True,
        )

    return CompileResult(
        returncode=proc.returncode,
        stdout=stdout or "",
        stderr=stderr or "",
        elapsed_s=time.monotonic() - started,
    )


class OpenSCADCompiler:
    """
    Stateless wrapper around the OpenSCAD command line.

    Safe to call concurrently for distinct output paths.
    """

    def __init__(self, command: str = "openscad", timeout: float = 120.0):
        self.command = command
        self.timeout = timeout

    def compile(
        self,
        source_path: Path,
        artifact_path: Path,
        *,
        timeout: Optional[float] = None,
    ) -> CompileResult:
        """
        Compile `source_path` into `artifact_path`.

        Raises:
            CompilationFailed on non-zero exit, timeout, or missing binary.
        """
        limit = self.timeout if timeout is None else timeout
        args = [self.command, "-o", str(artifact_path), str(source_path)]
        logger.info("Compiling: %s", " ".join(f'"{a}"' for a in args))

        try:
            result = run_process(args, limit)
        except (FileNotFoundError, PermissionError) as e:
            raise CompilationFailed(
                f"OpenSCAD compilation failed: cannot run {self.command}: {e}"
            ) from e

        if result.stdout:
            logger.debug("OpenSCAD stdout: %s", result.stdout.strip())
        if result.stderr:
            logger.debug("OpenSCAD stderr: %s", result.stderr.strip())

        if result.timed_out:
            raise CompilationFailed(
                f"OpenSCAD compilation timed out after {limit:g}s",
                timed_out=True,
                diagnostics=result.diagnostics,
            )

        if result.returncode != 0:
            raise CompilationFailed(
                f"OpenSCAD compilation failed with exit status {result.returncode}",
                returncode=result.returncode,
                diagnostics=result.diagnostics,
            )

        logger.info("OpenSCAD finished in %.2fs", result.elapsed_s)
        return result

    def version(self) -> Optional[str]:
        """Reported version string, or None when the binary is unreachable."""
        try:
            result = run_process([self.command, "--version"], VERSION_TIMEOUT_S)
        except OSError as e:
            logger.info("OpenSCAD not available: %s", e)
            return None

        if not result.ok:
            logger.info("OpenSCAD not available: exit status %s", result.returncode)
            return None

        # OpenSCAD prints its version on stderr
        return (result.stdout.strip() or result.stderr.strip()) or "unknown"
