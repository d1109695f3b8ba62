"""A Raft node taking part in elections and log replication."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from ..errors import ConfigError, ConsensusError
from .log import LogEntry, LogEntryType, RaftLog
from .rpc import AppendEntriesRequest, AppendEntriesResponse
from .state_machine import KeyValueStore, KvCommand, StateMachine

logger = logging.getLogger(__name__)


class NodeRole(Enum):
    FOLLOWER = "follower"
    CANDIDATE = "candidate"
    LEADER = "leader"


@dataclass
class RaftNode:
    """Controls its own state and participates in consensus.

    ``election_timeout`` and ``last_heartbeat`` are in seconds; the latter
    is a ``time.monotonic()`` reading.
    """

    id: str
    peers: list[str]
    election_timeout: float
    current_term: int = 0
    voted_for: str | None = None
    role: NodeRole = NodeRole.FOLLOWER
    commit_index: int = 0
    log: RaftLog = field(default_factory=RaftLog)
    last_heartbeat: float = field(default_factory=time.monotonic)
    votes_received: set[str] = field(default_factory=set)
    next_index: dict[str, int] = field(default_factory=dict)
    match_index: dict[str, int] = field(default_factory=dict)
    state_machine: StateMachine = field(default_factory=KeyValueStore)

    def send_heartbeats(self) -> list[tuple[str, AppendEntriesRequest]]:
        """Build an empty append-entries request for every peer."""
        requests = []
        for peer in self.peers:
            next_idx = self.next_index.get(peer, 1)
            if next_idx < 1:
                raise ConsensusError(f"next index for {peer} is {next_idx}")
            prev_log_index = next_idx - 1
            prev_entry = self.log.get(prev_log_index)
            request = AppendEntriesRequest(
                term=self.current_term,
                leader_id=self.id,
                prev_log_index=prev_log_index,
                prev_log_term=prev_entry.term if prev_entry else 0,
                entries=[],
                leader_commit=self.commit_index,
            )
            logger.info("Sending heartbeat to %s: %r", peer, request)
            requests.append((peer, request))
        return requests

    def handle_append_entries_response(
        self, sender: str, response: AppendEntriesResponse
    ) -> None:
        if response.term > self.current_term:
            self.become_follower(response.term)
            return

        if response.success:
            sent_idx = self.next_index.get(sender, 1)
            if sent_idx < 1:
                raise ConsensusError(f"next index for {sender} is {sent_idx}")
            self.match_index[sender] = sent_idx - 1
            self.next_index[sender] = sent_idx
            self._update_commit_index()
        else:
            current = self.next_index.get(sender, 1)
            self.next_index[sender] = max(current - 1, 0)

    def _update_commit_index(self) -> None:
        """Commit the highest index replicated on a majority."""
        match_indexes = sorted(
            [*self.match_index.values(), self.log.last_index()], reverse=True
        )
        majority = (len(self.peers) + 1) // 2
        try:
            new_commit = match_indexes[majority]
        except IndexError:
            raise ConsensusError(
                f"only {len(match_indexes)} match indexes known for a majority of {majority}"
            ) from None

        if new_commit > self.commit_index:
            entry = self.log.get(new_commit)
            if entry is not None and entry.term == self.current_term:
                self.commit_index = new_commit
                logger.info("[%s] Commit index advanced to %d", self.id, self.commit_index)

    def append_entry(self, data: bytes) -> int:
        """Append a client command to the leader's log and return its index."""
        index = self.log.last_index() + 1
        self.log.append(
            LogEntry(
                term=self.current_term,
                index=index,
                entry_type=LogEntryType.COMMAND,
                data=data,
            )
        )
        self.match_index[self.id] = index
        self.next_index[self.id] = index + 1
        logger.info("[%s] Appended new command at index %d", self.id, index)
        return index

    def apply_committed_entries(self, sm: StateMachine) -> None:
        """Apply every committed but not yet applied entry to ``sm``."""
        while self.log.last_applied < self.commit_index:
            nxt = self.log.last_applied + 1
            entry = self.log.get(nxt)
            if entry is None:
                break
            if entry.entry_type is LogEntryType.COMMAND:
                try:
                    command = KvCommand.from_bytes(entry.data)
                except ConfigError:
                    logger.error("[%s] Failed to deserialize entry at %d", self.id, nxt)
                else:
                    sm.apply(command)
                logger.info("[%s] Applied log[%d] to state machine", self.id, nxt)
            self.log.last_applied = nxt

    def handle_append_entries(self, req: AppendEntriesRequest) -> AppendEntriesResponse:
        """Handle an append-entries request as a follower."""
        if req.term < self.current_term:
            return AppendEntriesResponse(term=self.current_term, success=False)

        if req.term > self.current_term:
            self.current_term = req.term
            self.voted_for = None
            self.role = NodeRole.FOLLOWER

        if req.prev_log_index > 0:
            prev = self.log.get(req.prev_log_index)
            if prev is None or prev.term != req.prev_log_term:
                return AppendEntriesResponse(term=self.current_term, success=False)

        for new_entry in req.entries:
            existing = self.log.get(new_entry.index)
            if existing is None:
                self.log.append(new_entry)
            elif existing.term != new_entry.term:
                self.log.entries = [e for e in self.log.entries if e.index < new_entry.index]
                self.log.append(new_entry)

        if req.leader_commit > self.log.commit_index:
            self.log.commit_index = min(req.leader_commit, self.log.last_index())

        return AppendEntriesResponse(term=self.current_term, success=True)

    def tick(self) -> None:
        """Start an election if the election timeout has passed."""
        elapsed = time.monotonic() - self.last_heartbeat
        if self.role is not NodeRole.LEADER and elapsed >= self.election_timeout:
            self.start_election()

    def start_election(self) -> None:
        self.role = NodeRole.CANDIDATE
        self.current_term += 1
        self.voted_for = self.id
        self.votes_received = {self.id}
        self.last_heartbeat = time.monotonic()
        logger.info("[%s] Starting election for term %d", self.id, self.current_term)

    def receive_vote(self, voter_id: str, term: int, vote_granted: bool) -> None:
        if term > self.current_term:
            self.become_follower(term)
            return

        if self.role is not NodeRole.CANDIDATE or term < self.current_term:
            return

        if vote_granted:
            self.votes_received.add(voter_id)
            majority = (len(self.peers) + 1) // 2 + 1
            if len(self.votes_received) >= majority:
                self.become_leader()

    def become_follower(self, term: int) -> None:
        self.role = NodeRole.FOLLOWER
        self.current_term = term
        self.voted_for = None
        self.last_heartbeat = time.monotonic()
        self.votes_received.clear()
        logger.info("[%s] Became Follower for term %d", self.id, self.current_term)

    def become_leader(self) -> None:
        self.role = NodeRole.LEADER
        logger.info("[%s] Became Leader for term %d", self.id, self.current_term)
        self.send_heartbeat()

    def send_heartbeat(self) -> None:
        self.last_heartbeat = time.monotonic()
        logger.info("[%s] Sending heartbeats", self.id)