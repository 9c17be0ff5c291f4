"""Tests for the content-type classifier."""
from __future__ import annotations

import pytest

from bearer_agent.strings.content_type import is_parseable_content_type


@pytest.mark.parametrize(
    "value, expected",
    [
        ("json", True),
        ("application/json", True),
        ("apPlication/JSON", True),
        ("jsan", False),
        ("text/plain", True),
        ("", False),
        ("blah/xml/blih", True),
        ("x-www-form-urlencoded", True),
    ],
)
def test_observed_behaviour_table(value, expected):
    assert is_parseable_content_type(value) is expected


def test_parameters_do_not_matter():
    assert is_parseable_content_type("application/json; charset=utf-8")
    assert is_parseable_content_type("application/vnd.api+json")


def test_binary_types_are_opaque():
    assert not is_parseable_content_type("image/png")
    assert not is_parseable_content_type("application/octet-stream")
    assert not is_parseable_content_type("application/x-protobuf")


def test_none_is_opaque():
    assert not is_parseable_content_type(None)
