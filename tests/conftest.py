import os
import stat
import tempfile

# Settings are read at import time; keep test runs out of ./output
os.environ.setdefault("PROMPT3D_OUTPUT_DIR", tempfile.mkdtemp(prefix="prompt3d-test-"))
os.environ.setdefault("PROMPT3D_LOG_LEVEL", "DEBUG")

import pytest

from prompt3d.compiler.openscad import OpenSCADCompiler
from prompt3d.llm.base import Generator
from prompt3d.llm.selector import ModelFallbackSelector
from prompt3d.pipeline.jobs import JobStore
from prompt3d.pipeline.orchestration import GenerationOrchestrator
from prompt3d.storage import ArtifactStore


# Fake OpenSCAD binaries. Invoked as: <script> -o <artifact> <source>
COMPILER_SCRIPTS = {
    "ok": (
        'if [ "$1" = "--version" ]; then echo "OpenSCAD version 2021.01" >&2; exit 0; fi\n'
        "printf 'solid prompt3d\\nendsolid prompt3d\\n' > \"$2\"\n"
    ),
    "strict": (
        "if grep -Eq 'sphere|cube|cylinder' \"$3\"; then\n"
        "  printf 'solid prompt3d\\nendsolid prompt3d\\n' > \"$2\"\n"
        "else\n"
        "  echo \"ERROR: Parser error in file $3, line 1: syntax error\" >&2\n"
        "  exit 1\n"
        "fi\n"
    ),
    "partial": "printf 'solid' > \"$2\"\necho 'CGAL error' >&2\nexit 1\n",
    "silent": "exit 0\n",
    "empty": ": > \"$2\"\n",
    "slow": 'echo $$ > "$2.pid"\nexec sleep 30\n',
}


@pytest.fixture
def fake_compiler(tmp_path):
    """Factory: write an executable fake compiler script, return its path."""

    def make(kind: str) -> str:
        path = tmp_path / f"openscad-{kind}"
        path.write_text("#!/bin/sh\n" + COMPILER_SCRIPTS[kind])
        path.chmod(path.stat().st_mode | stat.S_IEXEC)
        return str(path)

    return make


class StubGenerator(Generator):
    """Returns queued outcomes in order; exceptions are raised."""

    def __init__(self, name, *outcomes, configured=True):
        self.name = name
        self._outcomes = list(outcomes)
        self._configured = configured
        self.calls = []

    @property
    def configured(self):
        return self._configured

    def generate(self, prompt, image=None, *, timeout=None):
        self.calls.append({"prompt": prompt, "image": image, "timeout": timeout})
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def make_generator():
    return StubGenerator


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path / "output")


@pytest.fixture
def jobs():
    return JobStore()


@pytest.fixture
def make_orchestrator(store, jobs, fake_compiler):
    def make(*generators, compiler="strict", timeout=10.0):
        selector = ModelFallbackSelector(list(generators), timeout=5.0)
        return GenerationOrchestrator(
            selector,
            OpenSCADCompiler(fake_compiler(compiler), timeout=timeout),
            store,
            jobs=jobs,
        )

    return make
