from types import SimpleNamespace

import pytest

from prompt3d.errors import ConfigurationError
from prompt3d.llm import gemini
from prompt3d.llm.base import ImagePart
from prompt3d.llm.gemini import GeminiGenerator


class FakeModel:
    def __init__(self, name, text="sphere(r=20);"):
        self.name = name
        self.text = text
        self.calls = []

    def generate_content(self, contents, request_options=None):
        self.calls.append((contents, request_options))
        return SimpleNamespace(text=self.text)


@pytest.fixture
def fake_genai(monkeypatch):
    state = SimpleNamespace(keys=[], models={})

    def configure(api_key):
        state.keys.append(api_key)

    def GenerativeModel(name):
        model = FakeModel(name)
        state.models[name] = model
        return model

    monkeypatch.setattr(gemini, "genai", SimpleNamespace(configure=configure, GenerativeModel=GenerativeModel))
    monkeypatch.setattr(gemini, "_configured_key", None)
    return state


def test_text_only_request(fake_genai):
    gen = GeminiGenerator("gemini-2.0-flash", "key-123")

    out = gen.generate("make a sphere", timeout=30)

    assert out == "sphere(r=20);"
    contents, options = fake_genai.models["gemini-2.0-flash"].calls[0]
    assert contents == "make a sphere"
    assert options == {"timeout": 30}
    assert fake_genai.keys == ["key-123"]


def test_multimodal_request_carries_text_and_image(fake_genai):
    gen = GeminiGenerator("gemini-2.5-flash", "key-123")
    image = ImagePart(data=b"\x89PNG\r\n\x1a\nrest", mime_type="image/png")

    gen.generate("copy this", image)

    contents, _ = fake_genai.models["gemini-2.5-flash"].calls[0]
    assert contents[0] == "copy this"
    assert contents[1] == {"mime_type": "image/png", "data": image.data}


def test_model_is_created_once(fake_genai):
    gen = GeminiGenerator("gemini-1.5-pro", "key-123")

    gen.generate("a")
    gen.generate("b")

    assert len(fake_genai.models["gemini-1.5-pro"].calls) == 2
    assert fake_genai.keys == ["key-123"]


def test_missing_key_is_not_configured(fake_genai):
    gen = GeminiGenerator("gemini-2.0-flash", "")

    assert not gen.configured
    with pytest.raises(ConfigurationError):
        gen.generate("a")
    assert fake_genai.models == {}
