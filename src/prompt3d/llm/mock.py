"""
Mock generator for deterministic testing and frontend development.
"""

from __future__ import annotations

import re
from typing import Optional

from prompt3d.llm.base import Generator, ImagePart


_NUMBER = re.compile(r"(\d+(?:\.\d+)?)\s*mm")


class MockGenerator(Generator):
    name = "mock"

    def generate(
        self,
        prompt: str,
        image: Optional[ImagePart] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        text = prompt.rsplit("User request:", 1)[-1].lower()
        match = _NUMBER.search(text)
        size = float(match.group(1)) if match else 20.0

        if image is not None:
            body = f"cylinder(h={size * 2:g}, r={size:g});"
        elif "cube" in text or "box" in text:
            body = f"cube([{size:g}, {size:g}, {size:g}]);"
        elif "cylinder" in text or "vase" in text:
            body = f"cylinder(h={size * 2:g}, r={size / 2:g});"
        else:
            body = f"sphere(r={size:g});"

        return f"```openscad\n$fn = 64;\n{body}\n```"
