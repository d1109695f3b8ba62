import time

import pytest

from nexus.errors import ConsensusError
from nexus.raft.log import LogEntry, LogEntryType
from nexus.raft.node import NodeRole, RaftNode
from nexus.raft.rpc import AppendEntriesRequest, AppendEntriesResponse
from nexus.raft.state_machine import KeyValueStore, SetCommand


def make_node(node_id="node1"):
    return RaftNode(node_id, ["node2", "node3"], 0.150)


def request(term, prev_index=0, prev_term=0, entries=(), commit=0):
    return AppendEntriesRequest(
        term=term,
        leader_id="leader",
        prev_log_index=prev_index,
        prev_log_term=prev_term,
        entries=list(entries),
        leader_commit=commit,
    )


def cmd(term, index, data=b""):
    return LogEntry(term=term, index=index, entry_type=LogEntryType.COMMAND, data=data)


def leader_node():
    node = make_node()
    node.start_election()
    node.receive_vote("node2", node.current_term, True)
    return node


def test_become_leader_on_majority_votes():
    node = make_node()
    node.start_election()
    node.receive_vote("node2", node.current_term, True)
    node.receive_vote("node3", node.current_term, True)
    assert node.role is NodeRole.LEADER


def test_step_down_on_higher_term_vote():
    node = make_node()
    node.start_election()
    node.receive_vote("node2", node.current_term + 1, False)
    assert node.role is NodeRole.FOLLOWER
    assert node.current_term == 2
    assert node.voted_for is None


def test_tick_triggers_election():
    node = make_node()
    node.last_heartbeat = time.monotonic() - 0.200
    node.tick()
    assert node.role is NodeRole.CANDIDATE
    assert node.current_term == 1
    assert node.votes_received == {"node1"}


def test_tick_before_timeout_keeps_follower():
    node = RaftNode("node1", ["node2"], 60.0)
    node.tick()
    assert node.role is NodeRole.FOLLOWER
    assert node.current_term == 0


def test_handle_append_entries_heartbeat():
    node = make_node()
    node.current_term = 1
    res = node.handle_append_entries(request(1))
    assert res.success
    assert res.term == 1


def test_handle_append_entries_reject_stale_term():
    node = make_node()
    node.current_term = 2
    res = node.handle_append_entries(request(1))
    assert not res.success
    assert res.term == 2


def test_append_and_apply_committed_entry():
    node = make_node()
    node.become_leader()
    index = node.append_entry(SetCommand("key", "value").to_bytes())
    node.commit_index = index
    node.apply_committed_entries(node.state_machine)
    assert node.state_machine.get("key") == "value"
    assert node.log.last_applied == 1


def test_vote_ignored_when_not_candidate():
    node = make_node()
    node.receive_vote("node2", 0, True)
    assert node.role is NodeRole.FOLLOWER
    assert node.votes_received == set()


def test_handle_append_entries_newer_term_steps_down():
    node = make_node()
    node.start_election()
    res = node.handle_append_entries(request(5))
    assert res.success
    assert node.current_term == 5
    assert node.role is NodeRole.FOLLOWER
    assert node.voted_for is None


def test_handle_append_entries_prev_mismatch():
    node = make_node()
    node.log.append(cmd(1, 1))
    assert not node.handle_append_entries(request(2, prev_index=1, prev_term=2)).success
    assert not node.handle_append_entries(request(2, prev_index=3, prev_term=1)).success


def test_handle_append_entries_appends_and_commits():
    node = make_node()
    res = node.handle_append_entries(request(1, entries=[cmd(1, 1), cmd(1, 2)], commit=5))
    assert res.success
    assert [e.index for e in node.log.entries] == [1, 2]
    assert node.log.commit_index == 2


def test_handle_append_entries_truncates_conflicts():
    node = make_node()
    node.log.append(cmd(1, 1, b"a"))
    node.log.append(cmd(1, 2, b"b"))
    node.log.append(cmd(1, 3, b"c"))
    res = node.handle_append_entries(
        request(2, prev_index=1, prev_term=1, entries=[cmd(2, 2, b"x")])
    )
    assert res.success
    assert [(e.index, e.term, e.data) for e in node.log.entries] == [(1, 1, b"a"), (2, 2, b"x")]


def test_handle_append_entries_keeps_matching_entries():
    node = make_node()
    node.log.append(cmd(1, 1, b"a"))
    node.handle_append_entries(request(1, entries=[cmd(1, 1, b"other")]))
    assert [e.data for e in node.log.entries] == [b"a"]


def test_send_heartbeats_builds_requests():
    node = leader_node()
    node.log.append(cmd(1, 1))
    node.next_index["node3"] = 2
    sent = dict(node.send_heartbeats())
    assert set(sent) == {"node2", "node3"}
    assert sent["node2"].prev_log_index == 0
    assert sent["node2"].prev_log_term == 0
    assert sent["node3"].prev_log_index == 1
    assert sent["node3"].prev_log_term == 1
    assert sent["node3"].entries == []
    assert sent["node3"].term == 1
    assert sent["node3"].leader_id == "node1"


def test_send_heartbeats_with_zero_next_index_raises():
    node = leader_node()
    node.next_index["node2"] = 0
    with pytest.raises(ConsensusError):
        node.send_heartbeats()


def test_successful_response_advances_commit():
    node = leader_node()
    index = node.append_entry(b"payload")
    node.handle_append_entries_response("node2", AppendEntriesResponse(term=1, success=True))
    assert node.match_index["node2"] == 0
    assert node.next_index["node2"] == 1
    assert node.commit_index == index


def test_failed_response_decrements_next_index():
    node = leader_node()
    node.next_index["node2"] = 3
    node.handle_append_entries_response("node2", AppendEntriesResponse(term=1, success=False))
    assert node.next_index["node2"] == 2
    node.handle_append_entries_response("node3", AppendEntriesResponse(term=1, success=False))
    node.handle_append_entries_response("node3", AppendEntriesResponse(term=1, success=False))
    assert node.next_index["node3"] == 0


def test_response_with_higher_term_steps_down():
    node = leader_node()
    node.handle_append_entries_response("node2", AppendEntriesResponse(term=4, success=True))
    assert node.role is NodeRole.FOLLOWER
    assert node.current_term == 4


def test_commit_without_enough_match_indexes_raises():
    node = RaftNode("node1", ["a", "b", "c", "d"], 0.15)
    node.next_index["a"] = 0
    with pytest.raises(ConsensusError):
        node.handle_append_entries_response("a", AppendEntriesResponse(term=0, success=True))


def test_apply_skips_noop_and_bad_entries():
    node = make_node()
    node.log.append(LogEntry(term=1, index=1, entry_type=LogEntryType.NOOP))
    node.log.append(cmd(1, 2, b"\xff\xff"))
    node.log.append(cmd(1, 3, SetCommand("k", "v").to_bytes()))
    node.commit_index = 3
    sm = KeyValueStore()
    node.apply_committed_entries(sm)
    assert node.log.last_applied == 3
    assert sm.get("k") == "v"


def test_apply_stops_at_missing_entry():
    node = make_node()
    node.log.append(cmd(1, 1, SetCommand("a", "1").to_bytes()))
    node.commit_index = 5
    sm = KeyValueStore()
    node.apply_committed_entries(sm)
    assert node.log.last_applied == 1
    assert sm.get("a") == "1"