import pytest

from prompt3d.errors import SanitizationEmpty
from prompt3d.pipeline.sanitize import extract_source, sanitize


@pytest.mark.parametrize("tag", ["openscad", "scad"])
def test_tagged_fence_returns_inner_content(tag):
    raw = f"Sure!\n```{tag}\nfoo();\n```\nDone"

    assert sanitize(raw) == "foo();"


def test_untagged_fence_returns_inner_content():
    raw = "Here you go:\n```\n$fn = 64;\nsphere(r=20);\n```\nEnjoy."

    assert sanitize(raw) == "$fn = 64;\nsphere(r=20);"


def test_first_fenced_block_wins():
    raw = "```scad\ncube(10);\n```\nor maybe\n```scad\nsphere(5);\n```"

    assert sanitize(raw) == "cube(10);"


def test_unfenced_text_is_trimmed_only():
    raw = "\n\n  $fn = 64;\n  sphere(r=20);  \n"

    assert sanitize(raw) == "$fn = 64;\n  sphere(r=20);"


def test_stray_fence_tokens_are_removed():
    raw = "```openscad\ncube([10, 10, 10]);"

    assert sanitize(raw) == "cube([10, 10, 10]);"


def test_backtick_runs_leave_no_fence():
    raw = "cube(1);`````\n`"

    out = sanitize(raw)

    assert "```" not in out
    assert out.startswith("cube(1);")


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "sphere(r=20);",
        "Sure!\n```scad\nfoo();\n```\nDone",
        "```\n```",
        "cube(1);`````\n`",
        "``` ```openscad\nx();",
        "text ``scad`` more",
        "```openscad\n\n```",
    ],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize(raw)

    assert sanitize(once) == once


def test_sanitized_output_has_no_fence_markers():
    raw = "Sure!\n```openscad\nunion() { cube(5); sphere(3); }\n```\n"

    assert "```" not in sanitize(raw)


def test_extract_source_rejects_empty_result():
    with pytest.raises(SanitizationEmpty):
        extract_source("```openscad\n   \n```")


def test_extract_source_rejects_fence_only_text():
    with pytest.raises(SanitizationEmpty):
        extract_source("```")


def test_extract_source_returns_code():
    assert extract_source("```scad\nsphere(r=20);\n```") == "sphere(r=20);"
