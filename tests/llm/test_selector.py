import pytest

from prompt3d.errors import ConfigurationError, GenerationExhausted
from prompt3d.llm.base import ImagePart
from prompt3d.llm.selector import ModelFallbackSelector


def test_first_success_wins(make_generator):
    a = make_generator("A", "sphere(r=1);")
    b = make_generator("B", "cube(1);")

    selection = ModelFallbackSelector([a, b]).select("prompt")

    assert selection.model == "A"
    assert selection.text == "sphere(r=1);"
    assert b.calls == []


def test_falls_back_to_third_candidate_and_stops(make_generator):
    a = make_generator("A", RuntimeError("quota exceeded"))
    b = make_generator("B", ConnectionError("connection reset"))
    c = make_generator("C", "sphere(r=20);")
    d = make_generator("D", "cube(5);")

    selection = ModelFallbackSelector([a, b, c, d]).select("prompt")

    assert selection.model == "C"
    assert selection.text == "sphere(r=20);"
    assert [att.model for att in selection.attempts] == ["A", "B", "C"]
    assert [att.ok for att in selection.attempts] == [False, False, True]
    assert len(a.calls) == len(b.calls) == len(c.calls) == 1
    assert d.calls == []


def test_empty_text_counts_as_failure(make_generator):
    a = make_generator("A", "   \n")
    b = make_generator("B", "cube(1);")

    selection = ModelFallbackSelector([a, b]).select("prompt")

    assert selection.model == "B"
    assert not selection.attempts[0].ok
    assert "empty" in str(selection.attempts[0].error)


def test_exhaustion_reports_last_error(make_generator):
    first = RuntimeError("first failure")
    last = TimeoutError("last failure")
    a = make_generator("A", first)
    b = make_generator("B", "")
    c = make_generator("C", last)

    with pytest.raises(GenerationExhausted) as excinfo:
        ModelFallbackSelector([a, b, c]).select("prompt")

    err = excinfo.value
    assert err.last_error is last
    assert "last failure" in err.message
    assert [att.model for att in err.attempts] == ["A", "B", "C"]
    assert all(att.text is None for att in err.attempts)
    assert [s["model"] for s in err.to_dict()["attempts"]] == ["A", "B", "C"]


def test_each_attempt_is_observed_before_the_next(make_generator):
    seen = []
    a = make_generator("A", RuntimeError("boom"))
    b = make_generator("B", "cube(1);")

    def on_attempt(attempt):
        # B must not have been called yet when A's failure is reported
        seen.append((attempt.model, attempt.ok, len(b.calls)))

    ModelFallbackSelector([a, b], on_attempt=on_attempt).select("prompt")

    assert seen == [("A", False, 0), ("B", True, 1)]


def test_timeout_and_image_are_forwarded(make_generator):
    image = ImagePart(data=b"\xff\xd8\xff", mime_type="image/jpeg")
    a = make_generator("A", "sphere(1);")

    ModelFallbackSelector([a], timeout=12.5).select("prompt", image)

    assert a.calls[0]["timeout"] == 12.5
    assert a.calls[0]["image"] is image


def test_text_only_call_carries_no_image(make_generator):
    a = make_generator("A", "sphere(1);")

    ModelFallbackSelector([a]).select("prompt")

    assert a.calls[0]["image"] is None


def test_no_candidates_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        ModelFallbackSelector([])


def test_configured_when_any_candidate_has_credentials(make_generator):
    missing = make_generator("A", "x", configured=False)
    present = make_generator("B", "x")

    assert ModelFallbackSelector([missing, present]).configured
    assert not ModelFallbackSelector([missing]).configured
