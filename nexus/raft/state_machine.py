"""State machine interface and an in-memory key-value implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from ..codec import Decoder, Encoder
from ..errors import ConfigError


class StateMachine(ABC):
    """Anything that consumes committed commands from the Raft log."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``."""

    @abstractmethod
    def apply(self, command: Any) -> Any:
        """Apply a command and return its response."""

    @abstractmethod
    def snapshot(self) -> bytes:
        """Return a binary snapshot of the current state."""

    @abstractmethod
    def restore(self, snapshot: bytes) -> None:
        """Replace the current state with the one in ``snapshot``."""


class KvCommand:
    """A command understood by the key-value store."""

    _TAG: ClassVar[int]

    def _encode_fields(self, encoder: Encoder) -> None:
        raise NotImplementedError

    def to_bytes(self) -> bytes:
        encoder = Encoder()
        encoder.write_u32(self._TAG)
        self._encode_fields(encoder)
        return encoder.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "KvCommand":
        decoder = Decoder(data)
        tag = decoder.read_u32()
        command: KvCommand
        match tag:
            case SetCommand._TAG:
                command = SetCommand(decoder.read_str(), decoder.read_str())
            case GetCommand._TAG:
                command = GetCommand(decoder.read_str())
            case DeleteCommand._TAG:
                command = DeleteCommand(decoder.read_str())
            case _:
                raise ConfigError(f"Bincode Error: invalid variant index {tag} for KvCommand")
        decoder.finish()
        if not isinstance(command, cls):
            raise ConfigError(f"Bincode Error: expected {cls.__name__}, got {command!r}")
        return command


@dataclass(frozen=True)
class SetCommand(KvCommand):
    key: str
    value: str

    _TAG: ClassVar[int] = 0

    def _encode_fields(self, encoder: Encoder) -> None:
        encoder.write_str(self.key)
        encoder.write_str(self.value)


@dataclass(frozen=True)
class GetCommand(KvCommand):
    key: str

    _TAG: ClassVar[int] = 1

    def _encode_fields(self, encoder: Encoder) -> None:
        encoder.write_str(self.key)


@dataclass(frozen=True)
class DeleteCommand(KvCommand):
    key: str

    _TAG: ClassVar[int] = 2

    def _encode_fields(self, encoder: Encoder) -> None:
        encoder.write_str(self.key)


class KvResponse:
    """A response returned by the key-value store."""


@dataclass(frozen=True)
class ValueResponse(KvResponse):
    value: str | None


@dataclass(frozen=True)
class AckResponse(KvResponse):
    pass


class KeyValueStore(StateMachine):
    """In-memory key-value store driven by committed commands."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def apply(self, command: KvCommand) -> KvResponse:
        match command:
            case SetCommand(key=key, value=value):
                self._data[key] = value
                return AckResponse()
            case GetCommand(key=key):
                return ValueResponse(self._data.get(key))
            case DeleteCommand(key=key):
                self._data.pop(key, None)
                return AckResponse()
        raise TypeError(f"unsupported command: {command!r}")

    def snapshot(self) -> bytes:
        encoder = Encoder()
        encoder.write_u64(len(self._data))
        for key, value in self._data.items():
            encoder.write_str(key)
            encoder.write_str(value)
        return encoder.getvalue()

    def restore(self, snapshot: bytes) -> None:
        decoder = Decoder(snapshot)
        count = decoder.read_u64()
        restored = {}
        for _ in range(count):
            key = decoder.read_str()
            restored[key] = decoder.read_str()
        decoder.finish()
        self._data = restored