from __future__ import annotations

import math

from perkboard.normalize.text import (
    generate_slug,
    names,
    optional_int,
    optional_number,
    sanitize_text,
    strip_html,
)


def test_generate_slug_collapses_non_alphanumerics() -> None:
    assert generate_slug("  AWS Activate: $5k Credits!! ", "1") == "aws-activate-5k-credits"


def test_generate_slug_falls_back_to_id() -> None:
    assert generate_slug("", 42) == "42"
    assert generate_slug("!!!", "abc") == "abc"
    assert generate_slug(None, "x-1") == "x-1"


def test_sanitize_text_truncates_with_ellipsis() -> None:
    assert sanitize_text("  hello  ") == "hello"
    assert sanitize_text("abcdefghij", 8) == "abcde..."
    assert sanitize_text(None) == ""


def test_strip_html_removes_tags_and_entities() -> None:
    assert strip_html("<p>Save&nbsp;<b>50%</b></p>") == "Save 50%"


def test_names_accepts_strings_and_objects_and_dedupes() -> None:
    assert names(["Seed", {"name": "seed"}, {"name": "Series A"}, None, ""]) == ("Seed", "Series A")
    assert names("Cloud") == ("Cloud",)
    assert names(5) == ()


def test_optional_number_parses_money_and_rejects_non_finite() -> None:
    assert optional_number("$1,250.50") == 1250.5
    assert optional_number(True) is None
    assert optional_number("n/a") is None
    assert optional_number(math.inf) is None
    assert optional_number("nan") is None
    assert optional_int("12.9") == 12
