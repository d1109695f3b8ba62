# nexus

This package provides building blocks for a Raft-replicated key-value service:

- cluster configuration
- an ordered log
- node roles and elections
- AppendEntries and RequestVote messages with a compact binary encoding
- file-backed snapshots
- an in-memory key-value state machine

The package has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Cluster configuration

A cluster is described in a JSON file:

```json
{
  "nodes": [
    {"host": "127.0.0.1", "port": 8080, "node_id": "node-1"},
    {"host": "127.0.0.1", "port": 8081, "node_id": "node-2"}
  ],
  "replication_factor": 2,
  "election_timeout_ms": 150,
  "heartbeat_interval_ms": 50
}
```

```python
from nexus.config import load_config

config = load_config("cluster.json")
print([node.node_id for node in config.nodes])
```

`load_config` can raise two errors:

- `nexus.errors.IoError` if the file cannot be read.
- `nexus.errors.SerdeError` if the JSON is malformed, a field is missing, or a field has the wrong type or range. For example, `port` must fit in 16 bits.

`NodeAddress` and `ClusterConfig` in `nexus.types` can also be converted with `to_dict`, `from_dict`, `to_json` and `from_json`.

All errors derive from `nexus.errors.NexusError`. Binary data that cannot be decoded raises `nexus.errors.ConfigError`.

## The key-value state machine

```python
from nexus.raft.state_machine import (
    KeyValueStore, SetCommand, GetCommand, DeleteCommand,
)

kv = KeyValueStore()
kv.apply(SetCommand("foo", "bar"))   # AckResponse()
kv.apply(GetCommand("foo"))          # ValueResponse(value='bar')
kv.apply(DeleteCommand("foo"))       # AckResponse()

restored = KeyValueStore()
restored.restore(kv.snapshot())
```

Commands convert to bytes with `to_bytes()` and back with `KvCommand.from_bytes(...)`. This is the payload form that log entries carry. Other state machines can be written by subclassing `StateMachine`.

## Driving a node

`nexus.raft.node.RaftNode` takes the following arguments:

- a node id
- the list of peer ids
- an election timeout in seconds

```python
from nexus.raft.node import RaftNode, NodeRole
from nexus.raft.state_machine import KeyValueStore, SetCommand

node = RaftNode("node1", ["node2", "node3"], 0.15)
node.start_election()
node.receive_vote("node2", node.current_term, True)
node.receive_vote("node3", node.current_term, True)
assert node.role is NodeRole.LEADER

index = node.append_entry(SetCommand("key", "value").to_bytes())
node.commit_index = index
store = KeyValueStore()
node.apply_committed_entries(store)
assert store.get("key") == "value"
```

Roles and timing:

- **As a follower**, a node answers `AppendEntriesRequest` messages with `handle_append_entries`. That method advances `node.log.commit_index`.
- **As a leader**, it processes replies with `handle_append_entries_response`. `send_heartbeats()` returns a list of `(peer, AppendEntriesRequest)` pairs, one empty request per peer.
- **Timing:** call `tick()` periodically. It starts an election once the election timeout has passed since the last heartbeat.

Progress is reported through the standard `logging` module under the `nexus.raft.node` logger.

`nexus.raft.log` also holds a smaller `RaftNode`, which tracks only role, term and vote. Its `become_leader()` appends a no-op entry to the log.

## Messages

`AppendEntriesRequest`, `AppendEntriesResponse`, `RequestVoteRequest` and `RequestVoteResponse` in `nexus.raft.rpc` each have `to_bytes()` and `from_bytes()`. The encoding is built on `nexus.codec.Encoder` and `Decoder`:

- integers are fixed-width little-endian
- byte strings and text are length-prefixed

## Snapshots

```python
from nexus.raft.snapshot import RaftSnapshot, FileSnapshotStorage

storage = FileSnapshotStorage("snapshot.bin")
storage.save(RaftSnapshot(last_included_index=42, last_included_term=3, state=b"..."))
loaded = storage.load()   # None if the file does not exist
```

## What the package does not do

There is no networking and no server. Requests are built and handled in memory, and carrying them between nodes is left to the caller.

`nexus.metrics.MetricsCollector` is an interface only. No collector implementation is included.