"""Messages exchanged between Raft nodes."""

from __future__ import annotations

from dataclasses import dataclass

from ..codec import Decoder, Encoder
from .log import LogEntry


@dataclass
class AppendEntriesRequest:
    """Sent by the leader to replicate entries, or empty as a heartbeat."""

    term: int
    leader_id: str
    prev_log_index: int
    prev_log_term: int
    entries: list[LogEntry]
    leader_commit: int

    def to_bytes(self) -> bytes:
        encoder = Encoder()
        encoder.write_u64(self.term)
        encoder.write_str(self.leader_id)
        encoder.write_u64(self.prev_log_index)
        encoder.write_u64(self.prev_log_term)
        encoder.write_u64(len(self.entries))
        for entry in self.entries:
            entry.encode(encoder)
        encoder.write_u64(self.leader_commit)
        return encoder.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "AppendEntriesRequest":
        decoder = Decoder(data)
        term = decoder.read_u64()
        leader_id = decoder.read_str()
        prev_log_index = decoder.read_u64()
        prev_log_term = decoder.read_u64()
        count = decoder.read_u64()
        entries = [LogEntry.decode(decoder) for _ in range(count)]
        leader_commit = decoder.read_u64()
        decoder.finish()
        return cls(term, leader_id, prev_log_index, prev_log_term, entries, leader_commit)


@dataclass
class AppendEntriesResponse:
    """A follower's answer to an append-entries request."""

    term: int
    success: bool

    def to_bytes(self) -> bytes:
        return Encoder().write_u64(self.term).write_bool(self.success).getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "AppendEntriesResponse":
        decoder = Decoder(data)
        response = cls(term=decoder.read_u64(), success=decoder.read_bool())
        decoder.finish()
        return response


@dataclass
class RequestVoteRequest:
    """Sent by a candidate to ask a peer for its vote."""

    term: int
    candidate_id: str
    last_log_index: int
    last_log_term: int

    def to_bytes(self) -> bytes:
        return (
            Encoder()
            .write_u64(self.term)
            .write_str(self.candidate_id)
            .write_u64(self.last_log_index)
            .write_u64(self.last_log_term)
            .getvalue()
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "RequestVoteRequest":
        decoder = Decoder(data)
        request = cls(
            term=decoder.read_u64(),
            candidate_id=decoder.read_str(),
            last_log_index=decoder.read_u64(),
            last_log_term=decoder.read_u64(),
        )
        decoder.finish()
        return request


@dataclass
class RequestVoteResponse:
    """A peer's answer to a vote request."""

    term: int
    vote_granted: bool

    def to_bytes(self) -> bytes:
        return Encoder().write_u64(self.term).write_bool(self.vote_granted).getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "RequestVoteResponse":
        decoder = Decoder(data)
        response = cls(term=decoder.read_u64(), vote_granted=decoder.read_bool())
        decoder.finish()
        return response