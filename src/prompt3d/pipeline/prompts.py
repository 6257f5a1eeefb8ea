"""
Prompt construction for OpenSCAD generation.
"""

from __future__ import annotations

from typing import Optional


DEFAULT_IMAGE_REQUEST = "Create a 3D model based on this reference image"

_EXAMPLES = (
    "CORRECT FORMAT:\n"
    "$fn = 64;\n\n"
    "// Variables at top\n"
    "height = 50;\n"
    "width = 30;\n\n"
    "// Then geometry\n"
    "union() {\n"
    "  sphere(r=10);\n"
    "  translate([0, 0, 15])\n"
    "    cylinder(h=20, r=5);\n"
    "}\n\n"
    "Example - Simple sphere:\n"
    "$fn = 64;\n"
    "sphere(r=20);\n\n"
    "Example - Hollow box:\n"
    "$fn = 64;\n"
    "difference() {\n"
    "  cube([60, 40, 30]);\n"
    "  translate([3, 3, 3])\n"
    "    cube([54, 34, 27]);\n"
    "}\n\n"
    "Example - Vase shape:\n"
    "$fn = 64;\n"
    "difference() {\n"
    "  cylinder(h=80, r1=30, r2=20);\n"
    "  translate([0, 0, 3])\n"
    "    cylinder(h=80, r1=27, r2=17);\n"
    "}"
)


def system_prompt() -> str:
    return (
        "You are an expert OpenSCAD programmer. Generate valid OpenSCAD code "
        "based on user descriptions or reference images.\n\n"
        "CRITICAL RULES:\n"
        "1. Return ONLY valid OpenSCAD code - no explanations, no markdown, no text.\n"
        "2. Use proper OpenSCAD syntax and functions.\n"
        "3. Make objects printable (wall thickness, overhangs).\n"
        "4. Use reasonable dimensions in millimeters (typically 10-200mm).\n"
        "5. ALWAYS set $fn=64 as the very first line, as a global variable.\n"
        "6. NEVER assign variables inside union(), difference() or intersection().\n"
        "7. Define all variables at the top, before any geometry.\n"
        "8. The code must be complete and compilable by OpenSCAD.\n"
        "9. Keep designs simple: cube, sphere, cylinder and CSG operations.\n"
        "10. Approximate complex objects with simple geometry.\n"
        "11. When given a reference image, build a simplified 3D version of it.\n\n"
        + _EXAMPLES
    )


def image_analysis_prompt() -> str:
    return (
        "You are an expert at analyzing images and creating 3D models.\n"
        "Look at this reference image and create OpenSCAD code that represents "
        "a simplified 3D version of what you see.\n\n"
        "IMPORTANT:\n"
        "- Focus on the main shape and silhouette\n"
        "- Use basic primitives (sphere, cube, cylinder) combined with union, "
        "difference, intersection\n"
        "- Keep the design simple and printable\n"
        "- Approximate complex curves with multiple cylinders or spheres\n"
        "- Use reasonable dimensions (50-150mm typical)\n\n"
        + system_prompt()
    )


def build_prompt(user_text: str, *, has_image: bool) -> str:
    """Full instructional text for one generation call."""
    if has_image:
        preamble = image_analysis_prompt()
        request = user_text or DEFAULT_IMAGE_REQUEST
    else:
        preamble = system_prompt()
        request = user_text

    return (
        f"{preamble}\n\n"
        f"User request: {request}\n\n"
        "Generate ONLY the OpenSCAD code (no explanations):"
    )


def describe_hints(hints: Optional[dict]) -> str:
    """One-line summary of structural hints, for logs."""
    if not hints:
        return "-"
    return ", ".join(f"{k}={v}" for k, v in sorted(hints.items()))
