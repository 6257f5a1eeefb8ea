from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Capability:
    name: str
    supported: bool
    notes: str = ""


def get_capabilities() -> Dict[str, List[Capability]]:
    """
    Canonical declaration of what prompt3d supports TODAY.
    """
    return {
        "inputs": [
            Capability("text-to-3d", True),
            Capability("image-to-3d", True, "Reference image via vision models"),
        ],
        "strategies": [
            Capability("generative", True, "LLM-written OpenSCAD"),
            Capability("template", False, "Deterministic parametric templates"),
        ],
        "export": [
            Capability("STL", True, "Compiled server-side by OpenSCAD"),
        ],
    }


def supported_features() -> List[str]:
    return [c.name for c in get_capabilities()["inputs"] if c.supported]
