"""Raft log, node state, RPC messages, snapshots and state machines."""