"""Unit tests for the structural diff primitive."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from google.protobuf.descriptor_pb2 import FieldDescriptorProto, FieldOptions
from pydantic import BaseModel

from goldencmp.diff import structural_diff, to_comparable


class Bar(BaseModel):
    bla: str
    env: dict[str, str] = {}


class Foo(BaseModel):
    name: str
    values: list[int]
    barbi: Bar


@dataclass
class Event:
    id: str
    stamp: int


def _foo(**overrides: object) -> Foo:
    payload: dict[str, object] = {
        "name": "bla",
        "values": [1, 2, 3],
        "barbi": Bar(bla="blabla", env={"ACCOUNT": "1234"}),
    }
    payload.update(overrides)
    return Foo.model_validate(payload)


@pytest.mark.unit
def test_equal_values_produce_empty_diff() -> None:
    """Structurally equal values should yield an empty report."""
    assert structural_diff(_foo(), _foo()) == ""


@pytest.mark.unit
def test_changed_field_is_named_in_report() -> None:
    """A differing scalar should be reported with its field path and both values."""
    diff = structural_diff(_foo(), _foo(name="blb"))

    assert diff == "Foo.name:\n  - 'bla'\n  + 'blb'"


@pytest.mark.unit
def test_nested_mapping_key_changes_are_reported() -> None:
    """Missing and extra mapping keys should each get an entry."""
    # Arrange - env loses ACCOUNT and gains ID
    want = _foo()
    got = _foo(barbi=Bar(bla="blabla", env={"ID": "4321"}))

    # Act - diff
    diff = structural_diff(want, got)

    # Assert - both keys named
    assert "Foo.barbi.env.ACCOUNT:" in diff
    assert "Foo.barbi.env.ID:" in diff
    assert "+ <missing>" in diff
    assert "- <missing>" in diff


@pytest.mark.unit
def test_list_length_change_is_reported() -> None:
    """An appended list element should be reported at its index."""
    diff = structural_diff(_foo(values=[1, 2]), _foo(values=[1, 2, 3]))

    assert diff == "Foo.values[2]:\n  - <missing>\n  + 3"


@pytest.mark.unit
def test_ignored_field_is_invisible() -> None:
    """Differences only in ignored fields should produce an empty diff."""
    want = _foo()
    got = _foo(barbi=Bar(bla="other", env={"ACCOUNT": "1234"}))

    assert structural_diff(want, got, ignore_fields=["barbi.bla"]) == ""
    assert structural_diff(want, got) != ""


@pytest.mark.unit
def test_ignored_field_does_not_hide_other_fields() -> None:
    """Non-ignored differences should still be reported."""
    want = _foo()
    got = _foo(name="blb", barbi=Bar(bla="other", env={"ACCOUNT": "1234"}))

    diff = structural_diff(want, got, ignore_fields=["barbi.bla"])

    assert "Foo.name:" in diff
    assert "bla'" in diff
    assert "barbi" not in diff


@pytest.mark.unit
def test_ignored_field_applies_through_lists() -> None:
    """An ignore path crossing a list should apply to every element."""
    want = [Event(id="a", stamp=1), Event(id="b", stamp=2)]
    got = [Event(id="a", stamp=10), Event(id="b", stamp=20)]

    assert structural_diff(want, got, ignore_fields=["stamp"]) == ""


@pytest.mark.unit
def test_nested_ignore_path_applies_to_list_elements() -> None:
    """A nested ignore path should hide the field inside every list element."""
    want = [_foo(), _foo(name="two")]
    got = [
        _foo(barbi=Bar(bla="x", env={"ACCOUNT": "1234"})),
        _foo(name="two", barbi=Bar(bla="y", env={"ACCOUNT": "1234"})),
    ]

    assert structural_diff(want, got, ignore_fields=["barbi.bla"]) == ""
    assert structural_diff(want, got, ignore_fields=["barbi"]) == ""
    assert "list[1].barbi.bla:" in structural_diff(want, got)


@pytest.mark.unit
def test_unknown_ignore_path_is_a_noop() -> None:
    """Ignore paths that match nothing should not change the comparison."""
    assert structural_diff(_foo(), _foo(), ignore_fields=["nope.never"]) == ""


@pytest.mark.unit
def test_bool_never_equals_number() -> None:
    """Booleans and numbers should compare as different kinds."""
    diff = structural_diff({"flag": True}, {"flag": 1})

    assert "dict.flag:" in diff
    assert "(bool)" in diff


@pytest.mark.unit
def test_int_and_float_compare_by_value() -> None:
    """Integers and floats with the same value should compare equal."""
    assert structural_diff({"n": 1}, {"n": 1.0}) == ""


@pytest.mark.unit
def test_sets_compare_without_order() -> None:
    """Sets should compare by membership, not iteration order."""
    assert structural_diff({"tags": {"b", "a"}}, {"tags": {"a", "b"}}) == ""


@pytest.mark.unit
def test_proto_messages_compare_semantically() -> None:
    """Messages should compare by field content with proto field names."""
    # Arrange - same content, built in different field order
    want = FieldDescriptorProto(name="John", number=1, json_name="john")
    got = FieldDescriptorProto(json_name="john", number=1)
    got.name = "John"

    # Act / Assert - equal, and a change is reported with its proto name
    assert structural_diff(want, got) == ""
    got.options.CopyFrom(FieldOptions(deprecated=True))
    diff = structural_diff(want, got)
    assert diff.startswith("FieldDescriptorProto.options:")


@pytest.mark.unit
def test_proto_ignore_fields_use_proto_names() -> None:
    """Ignore paths on messages should use proto field names."""
    want = FieldDescriptorProto(name="John", json_name="john")
    got = FieldDescriptorProto(name="John", json_name="jonny")

    assert structural_diff(want, got, ignore_fields=["json_name"]) == ""


@pytest.mark.unit
def test_to_comparable_reduces_models_and_dataclasses() -> None:
    """Models and dataclasses should reduce to plain field dicts."""
    assert to_comparable(Event(id="a", stamp=1)) == {"id": "a", "stamp": 1}
    assert to_comparable(_foo()) == {
        "name": "bla",
        "values": [1, 2, 3],
        "barbi": {"bla": "blabla", "env": {"ACCOUNT": "1234"}},
    }
