"""
Source Sanitizer
================

Purpose:
- Extract pure OpenSCAD source from a raw model response
- Tolerate prose wrapping and markdown code fences

This module:
- DOES NOT validate OpenSCAD syntax
- DOES NOT touch the filesystem
"""

from __future__ import annotations

import re

from prompt3d.errors import SanitizationEmpty


# Tagged (openscad / scad) or untagged fence; first block wins.
FENCED_BLOCK = re.compile(r"```(?:openscad|scad)?[ \t]*\n?([\s\S]*?)```")

STRAY_FENCE = re.compile(r"```(?:openscad|scad)?\n?")


def sanitize(raw: str) -> str:
    """
    Return the code payload of `raw`, trimmed.

    If a fenced block is present its inner content is returned, otherwise
    stray fence tokens are removed from the whole text. Total and idempotent.
    """
    if not raw:
        return ""

    match = FENCED_BLOCK.search(raw)
    if match:
        return match.group(1).strip()

    return STRAY_FENCE.sub("", raw).strip()


def extract_source(raw: str) -> str:
    """
    Sanitize and require a non-empty result.

    Raises:
        SanitizationEmpty if nothing usable remains.
    """
    source = sanitize(raw)
    if not source:
        raise SanitizationEmpty()
    return source
