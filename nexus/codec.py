"""Compact binary encoding: little-endian fixed-width integers and
length-prefixed byte strings."""

from __future__ import annotations

import struct

from .errors import ConfigError

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def _decode_error(message: str) -> ConfigError:
    return ConfigError(f"Bincode Error: {message}")


def _pack(layout: struct.Struct, value: int, name: str) -> bytes:
    if not isinstance(value, int):
        raise ValueError(f"{name} expects an integer, got {value!r}")
    try:
        return layout.pack(value)
    except struct.error as exc:
        raise ValueError(f"{value} does not fit in {name}") from exc


class Encoder:
    """Accumulates encoded values into a byte string."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write_u32(self, value: int) -> "Encoder":
        self._buffer += _pack(_U32, value, "u32")
        return self

    def write_u64(self, value: int) -> "Encoder":
        self._buffer += _pack(_U64, value, "u64")
        return self

    def write_bool(self, value: bool) -> "Encoder":
        self._buffer.append(1 if value else 0)
        return self

    def write_bytes(self, value: bytes) -> "Encoder":
        data = bytes(value)
        self.write_u64(len(data))
        self._buffer += data
        return self

    def write_str(self, value: str) -> "Encoder":
        return self.write_bytes(value.encode("utf-8"))

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


class Decoder:
    """Reads encoded values back from a byte string, in order."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def _take(self, size: int) -> bytes:
        left = len(self._data) - self._pos
        if size > left:
            raise _decode_error(
                f"unexpected end of input: needed {size} bytes, {left} left"
            )
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def read_u32(self) -> int:
        return _U32.unpack(self._take(4))[0]

    def read_u64(self) -> int:
        return _U64.unpack(self._take(8))[0]

    def read_bool(self) -> bool:
        byte = self._take(1)[0]
        if byte > 1:
            raise _decode_error(f"invalid value for bool: {byte}")
        return byte == 1

    def read_bytes(self) -> bytes:
        return self._take(self.read_u64())

    def read_str(self) -> str:
        raw = self.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _decode_error(f"invalid utf-8: {exc}") from exc

    def finish(self) -> None:
        """Raise if any input is left unread."""
        left = len(self._data) - self._pos
        if left:
            raise _decode_error(f"{left} trailing bytes after value")