"""Errors raised while reading, writing, encoding, or comparing golden files."""

from __future__ import annotations

from enum import StrEnum


class GoldenErrorCode(StrEnum):
    """Failure kinds of golden file operations."""

    READ_FAILED = "golden_read_failed"
    WRITE_FAILED = "golden_write_failed"
    ENCODE_FAILED = "golden_encode_failed"
    DECODE_FAILED = "golden_decode_failed"
    COUNT_MISMATCH = "golden_count_mismatch"
    UNSUPPORTED_TYPE = "golden_unsupported_type"
    UNSUPPORTED_DESTINATION = "golden_unsupported_destination"
    INVALID_MESSAGE = "golden_invalid_message"
    CONFIG_INVALID = "golden_config_invalid"


class GoldenError(RuntimeError):
    """A golden file operation that could not complete.

    The underlying ``OSError``, pydantic, or protobuf exception, when there is
    one, is chained as ``__cause__``.
    """

    def __init__(
        self,
        code: GoldenErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create a golden error.

        Args:
            code: Kind of failure, e.g. ``GoldenErrorCode.READ_FAILED``.
            message: Message prefixed with the failing step, e.g. ``"read file:"``.
            data: Context of the failure, such as the golden ``path``, the
                ``want``/``got`` item counts, or the offending ``index``.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}
