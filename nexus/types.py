"""Identifiers and cluster description shared across the system."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import SerdeError

NodeId = str
StreamId = str
EventId = uuid.UUID
AggregatedId = str
Version = int
Term = int


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise SerdeError(f"invalid type: expected struct {what}, got {data!r}")
    return data


def _field(data: Mapping[str, Any], name: str) -> Any:
    try:
        return data[name]
    except KeyError:
        raise SerdeError(f"missing field `{name}`") from None


def _str_field(data: Mapping[str, Any], name: str) -> str:
    value = _field(data, name)
    if not isinstance(value, str):
        raise SerdeError(f"invalid type for `{name}`: expected a string, got {value!r}")
    return value


def _uint_field(data: Mapping[str, Any], name: str, bits: int) -> int:
    value = _field(data, name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise SerdeError(f"invalid type for `{name}`: expected u{bits}, got {value!r}")
    if not 0 <= value < 2**bits:
        raise SerdeError(f"invalid value for `{name}`: {value} does not fit in u{bits}")
    return value


def _parse_json(text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SerdeError(exc) from exc


def _dump_json(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


@dataclass
class NodeAddress:
    """Network location of one cluster member."""

    host: str
    port: int
    node_id: NodeId

    def to_dict(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port, "node_id": self.node_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NodeAddress":
        data = _require_mapping(data, "NodeAddress")
        return cls(
            host=_str_field(data, "host"),
            port=_uint_field(data, "port", 16),
            node_id=_str_field(data, "node_id"),
        )

    def to_json(self) -> str:
        return _dump_json(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes) -> "NodeAddress":
        return cls.from_dict(_parse_json(text))


@dataclass
class ClusterConfig:
    """Membership and timing settings of a cluster."""

    nodes: list[NodeAddress] = field(default_factory=list)
    replication_factor: int = 0
    election_timeout_ms: int = 0
    heartbeat_interval_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "replication_factor": self.replication_factor,
            "election_timeout_ms": self.election_timeout_ms,
            "heartbeat_interval_ms": self.heartbeat_interval_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClusterConfig":
        data = _require_mapping(data, "ClusterConfig")
        nodes = _field(data, "nodes")
        if not isinstance(nodes, list):
            raise SerdeError(f"invalid type for `nodes`: expected a sequence, got {nodes!r}")
        return cls(
            nodes=[NodeAddress.from_dict(node) for node in nodes],
            replication_factor=_uint_field(data, "replication_factor", 64),
            election_timeout_ms=_uint_field(data, "election_timeout_ms", 64),
            heartbeat_interval_ms=_uint_field(data, "heartbeat_interval_ms", 64),
        )

    def to_json(self) -> str:
        return _dump_json(self.to_dict())

    @classmethod
    def from_json(cls, text: str | bytes) -> "ClusterConfig":
        return cls.from_dict(_parse_json(text))