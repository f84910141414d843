"""Pluggable golden payload encoders.

Two strategies ship with the package:

* ``JsonEncoder`` serializes a value's natural shape through pydantic and is the
  default for every golden handle.
* ``ProtoJsonEncoder`` serializes protobuf messages (or lists of them) through
  ``google.protobuf.json_format``.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, get_args, get_origin

from google.protobuf import json_format
from google.protobuf.message import Message
from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from goldencmp.errors import GoldenError, GoldenErrorCode

_INDENT = 2

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class Encoder(Protocol):
    """Protocol for golden payload serialization strategies."""

    def marshal(self, value: object, packed: bool) -> bytes:
        """Serialize one value (or a list of values) to bytes.

        Args:
            value: Value to serialize.
            packed: Emit compact output when true, indented output otherwise.

        Returns:
            Serialized payload.
        """

    def unmarshal(self, data: bytes, destination: Any) -> Any:
        """Decode payload bytes into an instance of ``destination``.

        Args:
            data: Serialized payload.
            destination: Type form to decode into, e.g. ``Foo`` or ``list[Foo]``.

        Returns:
            Decoded value.
        """


class JsonEncoder:
    """Structured JSON encoder backed by pydantic."""

    def marshal(self, value: object, packed: bool) -> bytes:
        """Serialize value with pydantic's JSON serializer, using field aliases.

        Args:
            value: Model, dataclass, builtin value, or a list of those.
            packed: Emit compact output when true, indented output otherwise.

        Returns:
            UTF-8 JSON bytes.

        Raises:
            GoldenError: If the value has no JSON representation.
        """
        try:
            return _ANY_ADAPTER.dump_json(
                value, indent=None if packed else _INDENT, by_alias=True
            )
        except PydanticSerializationError as exc:
            raise GoldenError(
                GoldenErrorCode.ENCODE_FAILED,
                f"json encode: {exc}",
                data={"type": type(value).__name__},
            ) from exc

    def unmarshal(self, data: bytes, destination: Any) -> Any:
        """Validate JSON bytes into ``destination``.

        Args:
            data: UTF-8 JSON bytes.
            destination: Type form understood by ``pydantic.TypeAdapter``.

        Returns:
            Validated value.

        Raises:
            GoldenError: If the destination is unsupported or validation fails.
        """
        try:
            adapter: TypeAdapter[Any] = TypeAdapter(destination)
        except PydanticSchemaGenerationError as exc:
            raise GoldenError(
                GoldenErrorCode.UNSUPPORTED_DESTINATION,
                f"unsupported destination: {destination!r}",
            ) from exc
        try:
            return adapter.validate_json(data)
        except ValidationError as exc:
            raise GoldenError(
                GoldenErrorCode.DECODE_FAILED,
                f"json decode: {exc}",
                data={"destination": repr(destination)},
            ) from exc


class ProtoJsonEncoder:
    """Protobuf JSON encoder for single messages and message lists."""

    def marshal(self, value: object, packed: bool) -> bytes:
        """Serialize a message, or a list/tuple of messages, to JSON bytes.

        Args:
            value: One protobuf message or a sequence of messages.
            packed: Emit compact output when true, indented output otherwise.

        Returns:
            UTF-8 JSON bytes; a JSON array for sequences.

        Raises:
            GoldenError: If the value is neither a message nor a sequence of
                messages, or message conversion fails.
        """
        if isinstance(value, Message):
            return _dump_json(_message_to_obj(value), packed)
        if not isinstance(value, (list, tuple)):
            raise GoldenError(
                GoldenErrorCode.UNSUPPORTED_TYPE,
                f"unsupported type: {type(value).__name__}",
            )
        objects: list[dict[str, Any]] = []
        for index, item in enumerate(value):
            if not isinstance(item, Message):
                raise GoldenError(
                    GoldenErrorCode.INVALID_MESSAGE,
                    f"invalid proto message at index {index}",
                    data={"index": index, "type": type(item).__name__},
                )
            objects.append(_message_to_obj(item))
        return _dump_json(objects, packed)

    def unmarshal(self, data: bytes, destination: Any) -> Any:
        """Parse JSON bytes into a message or a list of messages.

        A list destination accepts a single JSON object (one-element list), and a
        message destination accepts a one-element JSON array.

        Args:
            data: UTF-8 JSON bytes.
            destination: Message class, message instance (merged in place), or
                ``list[MessageClass]`` / ``tuple[MessageClass, ...]``.

        Returns:
            Parsed message, or a list/tuple of parsed messages.

        Raises:
            GoldenError: If the destination is unsupported or parsing fails.
        """
        if destination is None:
            raise GoldenError(
                GoldenErrorCode.UNSUPPORTED_DESTINATION, "missing destination"
            )
        payload = _load_json(data)

        if isinstance(destination, Message):
            return _parse_single(payload, destination)
        if isinstance(destination, type) and issubclass(destination, Message):
            return _parse_single(payload, destination())

        origin = get_origin(destination)
        args = get_args(destination)
        if (
            origin in (list, tuple)
            and args
            and isinstance(args[0], type)
            and issubclass(args[0], Message)
        ):
            items = payload if isinstance(payload, list) else [payload]
            messages = [_parse_message(item, args[0]()) for item in items]
            return tuple(messages) if origin is tuple else messages

        raise GoldenError(
            GoldenErrorCode.UNSUPPORTED_DESTINATION,
            f"unsupported destination: {destination!r}",
        )


def _message_to_obj(message: Message) -> dict[str, Any]:
    """Convert one message to its protobuf JSON object form.

    Args:
        message: Message to convert.

    Returns:
        JSON-compatible mapping keyed by JSON field names.

    Raises:
        GoldenError: If the message cannot be represented as JSON.
    """
    try:
        return json_format.MessageToDict(message)
    except json_format.Error as exc:
        raise GoldenError(
            GoldenErrorCode.ENCODE_FAILED,
            f"proto encode: {exc}",
            data={"message": message.DESCRIPTOR.full_name},
        ) from exc


def _dump_json(obj: object, packed: bool) -> bytes:
    """Dump plain JSON data compact or 2-space indented."""
    if packed:
        raw = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    else:
        raw = json.dumps(obj, indent=_INDENT, ensure_ascii=False)
    return raw.encode("utf-8")


def _load_json(data: bytes) -> Any:
    """Load golden bytes as JSON, raising a decode error on failure."""
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GoldenError(
            GoldenErrorCode.DECODE_FAILED, f"proto decode: {exc}"
        ) from exc


def _parse_single(payload: Any, message: Message) -> Message:
    """Parse a JSON object, or a one-element JSON array, into message.

    Args:
        payload: Decoded JSON payload.
        message: Destination message, filled in place.

    Returns:
        The filled destination message.

    Raises:
        GoldenError: If the array does not hold exactly one element.
    """
    if isinstance(payload, list):
        if len(payload) != 1:
            raise GoldenError(
                GoldenErrorCode.DECODE_FAILED,
                f"proto decode: expected one message but got {len(payload)}",
            )
        payload = payload[0]
    return _parse_message(payload, message)


def _parse_message(payload: Any, message: Message) -> Message:
    """Parse one JSON object into message."""
    if not isinstance(payload, dict):
        raise GoldenError(
            GoldenErrorCode.DECODE_FAILED,
            f"proto decode: expected JSON object but got {type(payload).__name__}",
        )
    try:
        return json_format.ParseDict(payload, message)
    except json_format.Error as exc:
        raise GoldenError(
            GoldenErrorCode.DECODE_FAILED,
            f"proto decode: {exc}",
            data={"message": message.DESCRIPTOR.full_name},
        ) from exc
