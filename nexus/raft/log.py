"""Raft log entries, the log itself and a minimal node holding one."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..codec import Decoder, Encoder
from ..errors import ConfigError


class LogEntryType(Enum):
    """How the state machine interprets an entry."""

    COMMAND = 0
    CONFIGURATION = 1
    NOOP = 2


@dataclass
class LogEntry:
    """A single entry of the replicated log."""

    term: int
    index: int
    entry_type: LogEntryType
    data: bytes = b""

    def __post_init__(self) -> None:
        self.data = bytes(self.data)

    def encode(self, encoder: Encoder) -> None:
        encoder.write_u64(self.term)
        encoder.write_u64(self.index)
        encoder.write_u32(self.entry_type.value)
        encoder.write_bytes(self.data)

    @classmethod
    def decode(cls, decoder: Decoder) -> "LogEntry":
        term = decoder.read_u64()
        index = decoder.read_u64()
        tag = decoder.read_u32()
        try:
            entry_type = LogEntryType(tag)
        except ValueError:
            raise ConfigError(
                f"Bincode Error: invalid variant index {tag} for LogEntryType"
            ) from None
        return cls(term=term, index=index, entry_type=entry_type, data=decoder.read_bytes())


@dataclass
class RaftLog:
    """Ordered entries together with commit and apply progress."""

    entries: list[LogEntry] = field(default_factory=list)
    commit_index: int = 0
    last_applied: int = 0

    def append(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def get(self, index: int) -> LogEntry | None:
        """Return the entry with the given Raft index, if present."""
        return next((entry for entry in self.entries if entry.index == index), None)

    def last_index(self) -> int:
        return self.entries[-1].index if self.entries else 0

    def last_term(self) -> int:
        return self.entries[-1].term if self.entries else 0


class RaftRole(Enum):
    FOLLOWER = "follower"
    CANDIDATE = "candidate"
    LEADER = "leader"


@dataclass
class RaftNode:
    """Role and term bookkeeping of a single node."""

    id: str
    current_term: int = 0
    voted_for: str | None = None
    role: RaftRole = RaftRole.FOLLOWER
    log: RaftLog = field(default_factory=RaftLog)

    def become_candidate(self) -> None:
        self.current_term += 1
        self.voted_for = self.id
        self.role = RaftRole.CANDIDATE

    def become_leader(self) -> None:
        """Take leadership and append a no-op entry to assert it."""
        self.role = RaftRole.LEADER
        self.log.append(
            LogEntry(
                term=self.current_term,
                index=self.log.last_index() + 1,
                entry_type=LogEntryType.NOOP,
            )
        )

    def become_follower(self, term: int) -> None:
        self.current_term = term
        self.voted_for = None
        self.role = RaftRole.FOLLOWER