"""
prompt3d CLI

Runs the generation pipeline locally, prints diagnostics, or serves the API.
"""

from __future__ import annotations

import argparse
import base64
import json
import sys
from pathlib import Path

from prompt3d.api.config import settings
from prompt3d.api.engine import BACKENDS, build_orchestrator, health_report
from prompt3d.errors import Prompt3DError
from prompt3d.logger import setup_logging
from prompt3d.llm.base import ImagePart
from prompt3d.pipeline.models import GenerationRequest, JobFailed


class CLIError(Exception):
    """User-facing CLI error."""
    pass


def load_image(path: Path) -> ImagePart:
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CLIError(f"Failed to read image file: {e}") from e

    return ImagePart.from_base64(
        base64.b64encode(data).decode("ascii"),
        max_bytes=settings.max_image_bytes,
    )


def cmd_generate(args) -> int:
    cfg = settings.model_copy(update={
        k: v for k, v in (("backend", args.backend), ("output_dir", args.out_dir)) if v
    })
    if args.out_dir:
        Path(args.out_dir).mkdir(parents=True, exist_ok=True)

    image = load_image(args.image.resolve()) if args.image else None
    request = GenerationRequest(prompt=args.prompt or "", image=image)

    outcome = build_orchestrator(cfg).run(request)

    if isinstance(outcome, JobFailed):
        print(json.dumps(outcome.to_dict(), indent=2))
        return 1

    print(json.dumps(outcome.result.to_dict(), indent=2))
    return 0


def cmd_health(args) -> int:
    print(json.dumps(health_report(), indent=2))
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run(
        "prompt3d.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prompt3d",
        description="prompt3d: natural language -> OpenSCAD -> STL",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Run one generation job locally")
    gen.add_argument("prompt", nargs="?", default="", help="Model description")
    gen.add_argument("--image", type=Path, default=None, help="Reference image file")
    gen.add_argument("--backend", choices=BACKENDS, default=None)
    gen.add_argument("--out-dir", default=None, help="Output directory (default: PROMPT3D_OUTPUT_DIR)")
    gen.set_defaults(func=cmd_generate)

    health = sub.add_parser("health", help="Print backend diagnostics")
    health.set_defaults(func=cmd_health)

    serve = sub.add_parser("serve", help="Serve the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.log_level)

    try:
        return args.func(args)
    except (CLIError, Prompt3DError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
