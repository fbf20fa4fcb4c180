"""Analytics event messages and their protobuf wire encoding."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from typing import Optional, Union

_VARINT = 0
_I64 = 1
_LEN = 2
_I32 = 5
_MASK64 = (1 << 64) - 1
_INT_BITS = {"int32": 32, "enum": 32, "int64": 64}


class ExitCode(enum.IntEnum):
    """Exit status reported by a client application."""

    UNKNOWN = 0
    SUCCESS = 1
    FAILURE = 2

    def as_str_name(self) -> str:
        return f"EXIT_CODE_{self.name}"

    @classmethod
    def from_str_name(cls, value: str) -> Optional["ExitCode"]:
        prefix = "EXIT_CODE_"
        if not value.startswith(prefix):
            return None
        return cls.__members__.get(value[len(prefix):])


def _string(tag: int):
    return field(default="", metadata={"tag": tag, "kind": "string"})


def _int(tag: int, kind: str):
    return field(default=0, metadata={"tag": tag, "kind": kind})


def _message(tag: int, cls: type):
    return field(default=None, metadata={"tag": tag, "kind": "message", "type": cls})


@dataclass
class AppStartEvent:
    pass


@dataclass
class AppExitEvent:
    exit_code: int = _int(1, "enum")


@dataclass
class UserLoginEvent:
    email: str = _string(1)


@dataclass
class UserLogoutEvent:
    email: str = _string(1)


@dataclass
class UserRegisterEvent:
    email: str = _string(1)
    workspace_id: str = _string(2)


@dataclass
class ChatCreatedEvent:
    workspace_id: str = _string(1)


@dataclass
class MessageSentEvent:
    chat_id: str = _string(1)
    type: str = _string(2)
    size: int = _int(3, "int32")
    total_files: int = _int(4, "int32")


@dataclass
class ChatJoinedEvent:
    chat_id: str = _string(1)


@dataclass
class ChatLeftEvent:
    chat_id: str = _string(1)


@dataclass
class NavigationEvent:
    from_: str = _string(1)
    to: str = _string(2)


@dataclass
class SystemInfo:
    os: str = _string(1)
    arch: str = _string(2)
    language: str = _string(3)
    timezone: str = _string(4)


@dataclass
class GeoLocation:
    country: str = _string(1)
    region: str = _string(2)
    city: str = _string(3)


@dataclass
class EventContext:
    client_id: str = _string(1)
    app_version: str = _string(2)
    system: Optional[SystemInfo] = _message(3, SystemInfo)
    user_id: str = _string(4)
    ip_address: str = _string(5)
    user_agent: str = _string(6)
    referer: str = _string(7)
    geo: Optional[GeoLocation] = _message(8, GeoLocation)
    client_ts: int = _int(9, "int64")
    server_ts: int = _int(10, "int64")


EventType = Union[
    AppStartEvent,
    AppExitEvent,
    UserLoginEvent,
    UserLogoutEvent,
    UserRegisterEvent,
    MessageSentEvent,
    ChatCreatedEvent,
    ChatJoinedEvent,
    ChatLeftEvent,
    NavigationEvent,
]

_EVENT_CHOICES = {
    8: AppStartEvent,
    9: AppExitEvent,
    10: UserLoginEvent,
    11: UserLogoutEvent,
    12: UserRegisterEvent,
    13: MessageSentEvent,
    14: ChatCreatedEvent,
    15: ChatJoinedEvent,
    16: ChatLeftEvent,
    17: NavigationEvent,
}


@dataclass
class AnalyticsEvent:
    """A user event together with the context it happened in."""

    context: Optional[EventContext] = _message(1, EventContext)
    event_type: Optional[EventType] = field(
        default=None, metadata={"kind": "oneof", "choices": _EVENT_CHOICES}
    )

    def to_bytes(self) -> bytes:
        """Encode as protobuf wire bytes."""
        return _encode(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> "AnalyticsEvent":
        """Decode protobuf wire bytes; raises ValueError on malformed input."""
        return _decode(cls, data)


def _write_varint(out: bytearray, value: int) -> None:
    value &= _MASK64
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return


def _write_key(out: bytearray, tag: int, wire_type: int) -> None:
    _write_varint(out, (tag << 3) | wire_type)


def _write_len(out: bytearray, tag: int, payload: bytes) -> None:
    _write_key(out, tag, _LEN)
    _write_varint(out, len(payload))
    out.extend(payload)


def _encode(msg) -> bytes:
    out = bytearray()
    for f in fields(msg):
        kind = f.metadata["kind"]
        value = getattr(msg, f.name)
        if kind == "string":
            if value:
                _write_len(out, f.metadata["tag"], value.encode("utf-8"))
        elif kind in _INT_BITS:
            bits = _INT_BITS[kind]
            value = int(value)
            if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
                raise ValueError(f"{f.name} out of range for {kind}: {value}")
            if value:
                _write_key(out, f.metadata["tag"], _VARINT)
                _write_varint(out, value)
        elif kind == "message":
            if value is not None:
                _write_len(out, f.metadata["tag"], _encode(value))
        elif kind == "oneof":
            if value is not None:
                tags = {cls: tag for tag, cls in f.metadata["choices"].items()}
                tag = tags.get(type(value))
                if tag is None:
                    raise ValueError(f"unsupported {f.name}: {type(value).__name__}")
                _write_len(out, tag, _encode(value))
    return bytes(out)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def varint(self) -> int:
        result = 0
        shift = 0
        while True:
            if self._pos >= len(self._data):
                raise ValueError("truncated varint")
            byte = self._data[self._pos]
            self._pos += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result & _MASK64
            shift += 7
            if shift >= 70:
                raise ValueError("varint too long")

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise ValueError("truncated field")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def skip(self, wire_type: int) -> None:
        if wire_type == _VARINT:
            self.varint()
        elif wire_type == _I64:
            self.take(8)
        elif wire_type == _LEN:
            self.take(self.varint())
        elif wire_type == _I32:
            self.take(4)
        else:
            raise ValueError(f"unsupported wire type {wire_type}")


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _decode(cls, data: bytes):
    by_tag: dict[int, tuple[str, str, Optional[type]]] = {}
    for f in fields(cls):
        kind = f.metadata["kind"]
        if kind == "oneof":
            for tag, sub in f.metadata["choices"].items():
                by_tag[tag] = (f.name, kind, sub)
        else:
            by_tag[f.metadata["tag"]] = (f.name, kind, f.metadata.get("type"))

    values: dict[str, object] = {}
    pending: dict[str, tuple[type, bytearray]] = {}
    reader = _Reader(data)
    while not reader.at_end():
        key = reader.varint()
        tag, wire_type = key >> 3, key & 7
        if tag == 0:
            raise ValueError("invalid field tag 0")
        spec = by_tag.get(tag)
        if spec is None:
            reader.skip(wire_type)
            continue
        name, kind, sub = spec
        expected = _VARINT if kind in _INT_BITS else _LEN
        if wire_type != expected:
            raise ValueError(f"wrong wire type {wire_type} for field {name}")
        if kind == "string":
            values[name] = reader.take(reader.varint()).decode("utf-8")
        elif kind in _INT_BITS:
            values[name] = _signed(reader.varint(), _INT_BITS[kind])
        else:
            chunk = reader.take(reader.varint())
            current = pending.get(name)
            if current is None or current[0] is not sub:
                pending[name] = (sub, bytearray(chunk))
            else:
                current[1].extend(chunk)

    for name, (sub, raw) in pending.items():
        values[name] = _decode(sub, bytes(raw))
    return cls(**values)