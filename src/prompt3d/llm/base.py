"""
Generator interface.

A generator turns an instructional prompt (plus an optional reference
image) into raw source text, or raises. The fallback selector depends
ONLY on this interface.
"""

from __future__ import annotations

import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from prompt3d.errors import InputError


@dataclass(frozen=True)
class ImagePart:
    """Reference image bytes for a multimodal call."""

    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_base64(cls, payload: str, *, max_bytes: Optional[int] = None) -> "ImagePart":
        """
        Decode a base64 payload, optionally a `data:<mime>;base64,` URL.

        Raises:
            InputError if the payload is not base64 or exceeds max_bytes.
        """
        mime_type = None
        if payload.startswith("data:") and "," in payload:
            header, payload = payload.split(",", 1)
            mime_type = header[len("data:"):].split(";")[0] or None

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InputError(f"Image is not valid base64: {e}") from e

        if not data:
            raise InputError("Image payload is empty")
        if max_bytes is not None and len(data) > max_bytes:
            raise InputError(
                f"Image is too large ({len(data)} bytes, limit {max_bytes})"
            )

        return cls(data=data, mime_type=mime_type or sniff_mime_type(data))


def sniff_mime_type(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    # JPEG is also the fallback for anything unrecognised
    return "image/jpeg"


class Generator(ABC):
    """
    Abstract generation backend.

    `name` identifies the model in attempts, logs and responses.
    """

    name: str = "generator"

    @property
    def configured(self) -> bool:
        """False when a required credential is missing."""
        return True

    @abstractmethod
    def generate(
        self,
        prompt: str,
        image: Optional[ImagePart] = None,
        *,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Return raw generated text.

        With `image` the call is multimodal (prompt text + image bytes);
        without it the call is text-only.
        """
        raise NotImplementedError
