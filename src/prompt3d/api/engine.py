from __future__ import annotations

from functools import lru_cache
from typing import Optional

from prompt3d.api.config import Settings, settings
from prompt3d.capabilities import supported_features
from prompt3d.compiler.openscad import OpenSCADCompiler
from prompt3d.errors import ConfigurationError
from prompt3d.llm.base import Generator
from prompt3d.llm.gemini import GeminiGenerator
from prompt3d.llm.local import LocalGenerator
from prompt3d.llm.mock import MockGenerator
from prompt3d.llm.selector import ModelFallbackSelector
from prompt3d.pipeline.orchestration import GenerationOrchestrator
from prompt3d.storage import ArtifactStore


BACKENDS = ("gemini", "local", "hybrid", "mock")


def build_generators(cfg: Settings) -> list[Generator]:
    if cfg.backend == "mock":
        # great for frontend development
        return [MockGenerator()]

    gemini = [GeminiGenerator(name, cfg.gemini_api_key) for name in cfg.models]
    local = [LocalGenerator(cfg.local_model, cfg.local_adapter)]

    if cfg.backend == "gemini":
        return gemini
    if cfg.backend == "local":
        return local
    if cfg.backend == "hybrid":
        return gemini + local

    raise ConfigurationError(
        f"Unknown backend '{cfg.backend}'. Expected one of: {', '.join(BACKENDS)}"
    )


def build_orchestrator(cfg: Settings) -> GenerationOrchestrator:
    selector = ModelFallbackSelector(
        build_generators(cfg),
        timeout=cfg.generation_timeout_s,
    )
    compiler = OpenSCADCompiler(cfg.openscad_cmd, timeout=cfg.compile_timeout_s)
    return GenerationOrchestrator(selector, compiler, ArtifactStore(cfg.output_dir))


@lru_cache(maxsize=1)
def get_orchestrator() -> GenerationOrchestrator:
    return build_orchestrator(settings)


@lru_cache(maxsize=1)
def get_store() -> ArtifactStore:
    return ArtifactStore(settings.output_dir)


def warm_up(orchestrator: GenerationOrchestrator) -> list[str]:
    """
    Load local model weights ahead of the first request.

    The per-attempt generation timeout only bounds token generation, so a
    hub download inside the first request would otherwise be unbounded.
    Returns the names of the generators that were loaded.
    """
    loaded = []
    for generator in getattr(orchestrator.selector, "candidates", []):
        if isinstance(generator, LocalGenerator):
            generator.load()
            loaded.append(generator.name)
    return loaded


def health_report(cfg: Optional[Settings] = None) -> dict:
    """Diagnostic snapshot; not part of the pipeline contract."""
    cfg = cfg or settings
    version = OpenSCADCompiler(cfg.openscad_cmd).version()

    try:
        models = [g.name for g in build_generators(cfg)]
    except ConfigurationError:
        models = []

    return {
        "status": "ok",
        "gemini_configured": bool(cfg.gemini_api_key),
        "openscad_available": version is not None,
        "openscad_version": version or "unknown",
        "openscad_path": cfg.openscad_cmd,
        "compilation_mode": "server-side",
        "backend": cfg.backend,
        "models": models,
        "features": supported_features(),
        "message": "Backend generates OpenSCAD code (with vision support) and compiles it to STL.",
    }
