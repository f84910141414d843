"""Golden handle: update and compare one reference file."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from goldencmp.config import GoldenSettings
from goldencmp.diff import structural_diff
from goldencmp.encoders import Encoder, JsonEncoder
from goldencmp.errors import GoldenError, GoldenErrorCode
from goldencmp.storage import DEFAULT_WRITE_MODE, read_golden_bytes, write_golden_bytes

_LOGGER = logging.getLogger(__name__)

type CompareHook[T] = Callable[[T, T], None]
type UpdateHook[T] = Callable[[T | None, T], None]


@dataclass(frozen=True)
class CompareOutcome[T]:
    """Golden value, actual value, and their structural diff."""

    want: T | None
    got: T | None
    diff: str = ""

    @property
    def ok(self) -> bool:
        """Return whether golden and actual compared equal."""
        return self.diff == ""


@dataclass(frozen=True)
class Golden[T]:
    """Reusable descriptor for one golden file of ``value_type`` values.

    Configuration methods return a modified copy and never mutate the handle,
    so a handle can be shared between tests.
    """

    value_type: type[T]
    path: Path
    packed: bool = False
    encoder: Encoder = field(default_factory=JsonEncoder)
    write_mode: int = DEFAULT_WRITE_MODE
    ignore_fields: tuple[str, ...] = ()
    before_compare: CompareHook[T] | None = None
    before_update: UpdateHook[T] | None = None

    def __post_init__(self) -> None:
        """Normalize path and ignore-field inputs."""
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(
            self, "ignore_fields", tuple(dict.fromkeys(self.ignore_fields))
        )

    def with_ignore_fields(self, *fields: str) -> Golden[T]:
        """Return a copy that ignores the given dotted field paths.

        Args:
            *fields: Dotted paths relative to the root value, e.g. ``"meta.ts"``.

        Returns:
            Handle whose ignore list is replaced by ``fields``.
        """
        return replace(self, ignore_fields=fields)

    def with_packed_output(self, packed: bool) -> Golden[T]:
        """Return a copy writing compact (``True``) or indented output."""
        return replace(self, packed=packed)

    def with_write_file_mode(self, mode: int) -> Golden[T]:
        """Return a copy creating golden files with ``mode`` bits (0 means default)."""
        return replace(self, write_mode=mode)

    def with_before_update(self, hook: UpdateHook[T] | None) -> Golden[T]:
        """Return a copy calling ``hook(want, got)`` before each update."""
        return replace(self, before_update=hook)

    def with_before_compare(self, hook: CompareHook[T] | None) -> Golden[T]:
        """Return a copy calling ``hook(want, got)`` before each diff."""
        return replace(self, before_compare=hook)

    def with_encoder(self, encoder: Encoder) -> Golden[T]:
        """Return a copy serializing through ``encoder``."""
        return replace(self, encoder=encoder)

    def update(self, got: T) -> None:
        """Serialize ``got`` and overwrite the golden file.

        Args:
            got: Fresh value to persist.

        Raises:
            GoldenError: If encoding or writing fails.
        """
        if self.before_update is not None:
            stored = self._stored_value()
            self._run_hook(self.before_update, stored, got, "before_update")
        self._persist(got)

    def update_values(self, got_values: Sequence[T]) -> None:
        """Serialize all values into one golden file, preserving order.

        The update hook runs per position; ``want`` is the stored element at the
        same index, or ``None`` when there is none.

        Args:
            got_values: Fresh values to persist.

        Raises:
            GoldenError: If encoding or writing fails.
        """
        if self.before_update is not None:
            stored = self._stored_values()
            for index, got in enumerate(got_values):
                want = stored[index] if index < len(stored) else None
                self._run_hook(self.before_update, want, got, "before_update", index)
        self._persist(list(got_values))

    def write(self, data: bytes) -> None:
        """Write raw payload bytes to the golden path with the active mode."""
        write_golden_bytes(self.path, data, self.write_mode)

    def compare(self, got: T) -> CompareOutcome[T]:
        """Load the golden value and diff it against ``got``.

        Args:
            got: Freshly computed value.

        Returns:
            Outcome whose ``diff`` is empty when both values match.

        Raises:
            GoldenError: If the golden file cannot be read or decoded.
        """
        want = self._load(self.value_type, "unmarshal golden")
        outcome = self._compare_pair(want, got)
        _LOGGER.debug("golden compare path=%s ok=%s", self.path, outcome.ok)
        return outcome

    def compare_values(
        self,
        got_values: Sequence[T],
        *,
        results: dict[int, CompareOutcome[T]] | None = None,
    ) -> dict[int, CompareOutcome[T]]:
        """Compare a list of values positionally against a golden list.

        Args:
            got_values: Freshly computed values.
            results: Optional mapping to fill in place. When a hook raises, it
                keeps the outcomes gathered before the failure.

        Returns:
            Outcomes keyed by index, only for positions that differ.

        Raises:
            GoldenError: If the golden file cannot be read or decoded, or the
                golden and actual lists differ in length.
        """
        if results is None:
            results = {}
        want_values = self._load(list[self.value_type], "unmarshal golden values")
        if len(want_values) != len(got_values):
            raise GoldenError(
                GoldenErrorCode.COUNT_MISMATCH,
                f"want {len(want_values)} items but got {len(got_values)}",
                data={
                    "path": str(self.path),
                    "want": len(want_values),
                    "got": len(got_values),
                },
            )

        for index, (want, got) in enumerate(zip(want_values, got_values, strict=True)):
            outcome = self._compare_pair(want, got, index)
            if not outcome.ok:
                results[index] = outcome

        _LOGGER.debug(
            "golden compare path=%s items=%d differing=%d",
            self.path,
            len(got_values),
            len(results),
        )
        return results

    compare_elements = compare_values

    def _compare_pair(
        self, want: T, got: T, index: int | None = None
    ) -> CompareOutcome[T]:
        """Run the compare hook, then diff one golden/actual pair.

        Args:
            want: Decoded golden value.
            got: Freshly computed value.
            index: Batch position, used only in hook failure notes.

        Returns:
            Outcome carrying both values and their diff.
        """
        if self.before_compare is not None:
            self._run_hook(self.before_compare, want, got, "before_compare", index)
        diff = structural_diff(want, got, ignore_fields=self.ignore_fields)
        return CompareOutcome(want=want, got=got, diff=diff)

    def _run_hook(
        self,
        hook: Callable[[Any, Any], None],
        want: Any,
        got: Any,
        stage: str,
        index: int | None = None,
    ) -> None:
        """Call a hook, noting the golden path on failure and re-raising as is.

        Args:
            hook: Caller-supplied compare or update hook.
            want: Golden value, or None for updates without a stored golden.
            got: Freshly computed value.
            stage: Hook name used in the failure note.
            index: Batch position, when called from a batch operation.
        """
        try:
            hook(want, got)
        except Exception as exc:
            where = "" if index is None else f" at index {index}"
            exc.add_note(f"golden {self.path}: {stage} hook failed{where}")
            raise

    def _persist(self, value: object) -> None:
        """Marshal value with the active encoder and write it to the golden path.

        Args:
            value: Single value or list of values to persist.

        Raises:
            GoldenError: If encoding or writing fails.
        """
        try:
            data = self.encoder.marshal(value, self.packed)
        except (GoldenError, TypeError, ValueError) as exc:
            raise GoldenError(
                _cause_code(exc, GoldenErrorCode.ENCODE_FAILED),
                f"marshal: {exc}",
                data={"path": str(self.path)},
            ) from exc
        self.write(data)
        _LOGGER.debug("golden updated path=%s bytes=%d", self.path, len(data))

    def _load(self, destination: Any, context: str) -> Any:
        """Read the golden file and decode it into destination.

        Args:
            destination: Type form passed to the encoder.
            context: Prefix for the wrapped decode error message.

        Returns:
            Decoded golden value.

        Raises:
            GoldenError: If the file cannot be read or decoded.
        """
        data = read_golden_bytes(self.path)
        try:
            return self.encoder.unmarshal(data, destination)
        except (GoldenError, TypeError, ValueError) as exc:
            raise GoldenError(
                _cause_code(exc, GoldenErrorCode.DECODE_FAILED),
                f"{context}: {exc}",
                data={"path": str(self.path)},
            ) from exc

    def _stored_value(self) -> T | None:
        """Return the stored golden value, or None when absent or stale."""
        if not self.path.exists():
            return None
        try:
            return self._load(self.value_type, "unmarshal golden")
        except GoldenError as exc:
            _LOGGER.debug("golden stale path=%s error=%s", self.path, exc)
            return None

    def _stored_values(self) -> list[T]:
        """Return the stored golden list, or an empty list when absent or stale."""
        if not self.path.exists():
            return []
        try:
            return list(self._load(list[self.value_type], "unmarshal golden values"))
        except GoldenError as exc:
            _LOGGER.debug("golden stale path=%s error=%s", self.path, exc)
            return []


def new_golden[T](
    value_type: type[T],
    path: str | Path,
    *,
    settings: GoldenSettings | None = None,
) -> Golden[T]:
    """Create a golden handle, applying optional settings defaults.

    Args:
        value_type: Type golden values decode into.
        path: Golden file path; relative paths resolve under
            ``settings.root_dir`` when set.
        settings: Optional defaults for packing, file mode, and root directory.

    Returns:
        Configured golden handle using the JSON encoder.
    """
    if settings is None:
        return Golden(value_type, Path(path))
    resolved = Path(path)
    if settings.root_dir is not None and not resolved.is_absolute():
        resolved = Path(settings.root_dir) / resolved
    return Golden(
        value_type,
        resolved,
        packed=settings.packed,
        write_mode=settings.write_mode,
    )


def _cause_code(exc: Exception, default: GoldenErrorCode) -> GoldenErrorCode:
    """Return the code of a wrapped golden error, or default for foreign errors."""
    if isinstance(exc, GoldenError):
        return exc.code
    return default
