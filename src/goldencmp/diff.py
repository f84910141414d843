"""Structural diff of golden and actual values.

Values are first reduced to plain data (``to_comparable``): protobuf messages
compare by their JSON field view instead of their bytes, pydantic models and
dataclasses by their fields. The plain trees are then compared with DeepDiff,
excluding ignored field paths.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Mapping
from typing import Any

from deepdiff import DeepDiff
from deepdiff.helper import notpresent
from deepdiff.model import DiffLevel
from google.protobuf import json_format
from google.protobuf.message import Message
from pydantic import BaseModel

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Any run of list indexes DeepDiff may place between two ignored path segments.
_LIST_INDEXES = r"(?:\[\d+\])*"


def to_comparable(value: object) -> Any:
    """Reduce a value to plain dict/list/scalar data for comparison.

    Args:
        value: Arbitrary golden or actual value.

    Returns:
        Plain data tree. Containers are always fresh copies.
    """
    if isinstance(value, Message):
        return json_format.MessageToDict(value, preserving_proto_field_name=True)
    if isinstance(value, BaseModel):
        return {
            name: to_comparable(getattr(value, name))
            for name in type(value).model_fields
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_comparable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {key: to_comparable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_comparable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((to_comparable(item) for item in value), key=repr)
    return value


def structural_diff(
    want: object,
    got: object,
    *,
    ignore_fields: Iterable[str] = (),
) -> str:
    """Compute a human-readable structural diff between two values.

    Args:
        want: Golden (reference) value.
        got: Freshly computed value.
        ignore_fields: Dotted field paths, relative to the root value, to exclude.
            A path crossing a list applies to every element.

    Returns:
        Empty string when equal, otherwise one report entry per differing path.
    """
    result = DeepDiff(
        to_comparable(want),
        to_comparable(got),
        exclude_regex_paths=[_exclude_pattern(path) for path in ignore_fields],
        ignore_numeric_type_changes=True,
        threshold_to_diff_deeper=0,
        view="tree",
    )
    if not result:
        return ""

    label = _root_label(want, got)
    entries: list[tuple[str, list[str]]] = []
    for report_type, levels in result.items():
        for level in levels:
            path = _render_path(label, level)
            entries.append((path, _render_level(path, report_type, level)))
    entries.sort(key=lambda entry: entry[0])
    return "\n".join(line for _, lines in entries for line in lines)


def _exclude_pattern(field_path: str) -> str:
    """Translate a dotted field path into a DeepDiff exclude regex.

    Args:
        field_path: Dotted path such as ``"barbi.bla"``.

    Returns:
        Anchored regex over DeepDiff paths, allowing list indexes before each
        segment.
    """
    segments = "".join(
        f"{_LIST_INDEXES}\\[{re.escape(repr(part))}\\]"
        for part in field_path.split(".")
    )
    return f"^root{segments}$"


def _root_label(want: object, got: object) -> str:
    """Return the type name that prefixes every report path."""
    sample = want if want is not None else got
    if isinstance(sample, Message):
        return sample.DESCRIPTOR.name
    return type(sample).__name__


def _render_path(label: str, level: DiffLevel) -> str:
    """Render a DeepDiff level path as ``Label.field[index]`` text.

    Args:
        label: Root type name.
        level: DeepDiff tree level.

    Returns:
        Dotted path with bracketed list indexes and non-identifier keys.
    """
    path = label
    for key in level.path(output_format="list"):
        if isinstance(key, str) and _IDENTIFIER.match(key):
            path = f"{path}.{key}"
        else:
            path = f"{path}[{key!r}]"
    return path


def _render_level(path: str, report_type: str, level: DiffLevel) -> list[str]:
    """Render one differing path as a header plus golden/actual lines.

    Args:
        path: Rendered path of the level.
        report_type: DeepDiff report category, e.g. ``values_changed``.
        level: DeepDiff tree level holding both sides.

    Returns:
        Report lines for the entry.
    """
    want = "<missing>" if level.t1 is notpresent else repr(level.t1)
    got = "<missing>" if level.t2 is notpresent else repr(level.t2)
    if report_type == "type_changes":
        want = f"{want} ({type(level.t1).__name__})"
        got = f"{got} ({type(level.t2).__name__})"
    return [f"{path}:", f"  - {want}", f"  + {got}"]
