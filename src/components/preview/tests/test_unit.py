"""
Unit tests for preview text helpers.
"""

import pytest

from src.components.preview import truncate_preview


@pytest.mark.parametrize(
    ("text", "limit", "expected"),
    [
        ("short", 10, ("short", False)),
        ("exactly-10", 10, ("exactly-10", False)),
        ("a longer sentence", 8, ("a longer...", True)),
        ("anything", 0, ("", True)),
        ("", 0, ("", False)),
    ],
)
def test_truncate_preview(text: str, limit: int, expected: tuple[str, bool]) -> None:
    assert truncate_preview(text, limit) == expected


def test_custom_ellipsis() -> None:
    assert truncate_preview("abcdef", 3, ellipsis="…") == ("abc…", True)
