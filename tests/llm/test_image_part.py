import base64

import pytest

from prompt3d.errors import InputError
from prompt3d.llm.base import ImagePart
from prompt3d.llm.mock import MockGenerator

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16


def test_plain_base64_sniffs_png():
    part = ImagePart.from_base64(base64.b64encode(PNG).decode())

    assert part.data == PNG
    assert part.mime_type == "image/png"


def test_unknown_bytes_default_to_jpeg():
    part = ImagePart.from_base64(base64.b64encode(JPEG).decode())

    assert part.mime_type == "image/jpeg"


def test_data_url_header_sets_mime_type():
    payload = "data:image/webp;base64," + base64.b64encode(JPEG).decode()

    part = ImagePart.from_base64(payload)

    assert part.mime_type == "image/webp"
    assert part.data == JPEG


def test_invalid_base64_is_an_input_error():
    with pytest.raises(InputError):
        ImagePart.from_base64("not base64 !!!")


def test_oversized_image_is_an_input_error():
    with pytest.raises(InputError) as excinfo:
        ImagePart.from_base64(base64.b64encode(PNG).decode(), max_bytes=8)

    assert "too large" in excinfo.value.message


def test_mock_generator_is_deterministic():
    gen = MockGenerator()

    first = gen.generate("User request: a cube of 30mm")

    assert first == gen.generate("User request: a cube of 30mm")
    assert "cube([30, 30, 30]);" in first
