"""Golden settings models and loading helpers."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from goldencmp.errors import GoldenError, GoldenErrorCode
from goldencmp.storage import DEFAULT_WRITE_MODE


class GoldenSettings(BaseModel):
    """Project-wide defaults applied to new golden handles."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    packed: bool = False
    write_mode: int = Field(default=DEFAULT_WRITE_MODE, ge=0, le=0o7777)
    root_dir: str | None = None


def _decode_settings_payload(path: Path) -> dict[str, object]:
    """Decode settings payload from JSON or YAML.

    Args:
        path: Settings file path.

    Returns:
        Parsed mapping payload.

    Raises:
        GoldenError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw) if raw.strip() else None
        except json.JSONDecodeError as exc:
            raise GoldenError(
                GoldenErrorCode.CONFIG_INVALID, f"Invalid golden settings JSON: {exc}"
            ) from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise GoldenError(
                GoldenErrorCode.CONFIG_INVALID, f"Invalid golden settings YAML: {exc}"
            ) from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise GoldenError(
            GoldenErrorCode.CONFIG_INVALID,
            "Invalid golden settings payload: root must be an object",
        )
    return payload


def load_golden_settings(path: Path) -> GoldenSettings:
    """Load golden settings from disk, defaulting when missing.

    Args:
        path: Settings file path (``.json``, ``.yaml`` or ``.yml``).

    Returns:
        Parsed settings, or defaults when the file does not exist.

    Raises:
        GoldenError: If payload decode or validation fails.
    """
    if not path.exists():
        return GoldenSettings()
    payload = _decode_settings_payload(path)
    try:
        return GoldenSettings.model_validate(payload)
    except ValidationError as exc:
        raise GoldenError(
            GoldenErrorCode.CONFIG_INVALID,
            f"Invalid golden settings payload: {exc}",
            data={"path": str(path)},
        ) from exc
