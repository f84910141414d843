"""Golden-file update and structural comparison."""

from goldencmp.config import GoldenSettings, load_golden_settings
from goldencmp.diff import structural_diff, to_comparable
from goldencmp.encoders import Encoder, JsonEncoder, ProtoJsonEncoder
from goldencmp.errors import GoldenError, GoldenErrorCode
from goldencmp.golden import (
    CompareHook,
    CompareOutcome,
    Golden,
    UpdateHook,
    new_golden,
)
from goldencmp.storage import DEFAULT_WRITE_MODE, read_golden_bytes, write_golden_bytes

__all__ = [
    "DEFAULT_WRITE_MODE",
    "CompareHook",
    "CompareOutcome",
    "Encoder",
    "GoldenError",
    "GoldenErrorCode",
    "GoldenSettings",
    "Golden",
    "JsonEncoder",
    "ProtoJsonEncoder",
    "UpdateHook",
    "load_golden_settings",
    "new_golden",
    "read_golden_bytes",
    "structural_diff",
    "to_comparable",
    "write_golden_bytes",
]
