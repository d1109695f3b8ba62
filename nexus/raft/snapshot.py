"""Point-in-time snapshots of the state machine and their storage."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..codec import Decoder, Encoder
from ..errors import IoError


@dataclass
class RaftSnapshot:
    """State machine contents covering the log up to an index and term."""

    last_included_index: int
    last_included_term: int
    state: bytes = b""

    def __post_init__(self) -> None:
        self.state = bytes(self.state)

    def to_bytes(self) -> bytes:
        return (
            Encoder()
            .write_u64(self.last_included_index)
            .write_u64(self.last_included_term)
            .write_bytes(self.state)
            .getvalue()
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "RaftSnapshot":
        decoder = Decoder(data)
        snapshot = cls(
            last_included_index=decoder.read_u64(),
            last_included_term=decoder.read_u64(),
            state=decoder.read_bytes(),
        )
        decoder.finish()
        return snapshot


class SnapshotStorage(ABC):
    """A place where snapshots can be kept and read back."""

    @abstractmethod
    def save(self, snapshot: RaftSnapshot) -> None:
        """Store ``snapshot``, replacing any earlier one."""

    @abstractmethod
    def load(self) -> RaftSnapshot | None:
        """Return the stored snapshot, or None if there is none."""


class FileSnapshotStorage(SnapshotStorage):
    """Keeps a single snapshot in a binary file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileSnapshotStorage(path={str(self.path)!r})"

    def save(self, snapshot: RaftSnapshot) -> None:
        encoded = snapshot.to_bytes()
        try:
            self.path.write_bytes(encoded)
        except OSError as exc:
            raise IoError(exc) from exc

    def load(self) -> RaftSnapshot | None:
        if not self.path.exists():
            return None
        try:
            data = self.path.read_bytes()
        except OSError as exc:
            raise IoError(exc) from exc
        return RaftSnapshot.from_bytes(data)