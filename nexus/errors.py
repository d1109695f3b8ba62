"""Error hierarchy shared by every part of the cluster."""

from __future__ import annotations


class NexusError(Exception):
    """Base class of all errors raised by the package."""

    prefix = "Nexus Error"

    def __init__(self, detail: object) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class IoError(NexusError):
    """A file or other I/O operation failed."""

    prefix = "I/O Error"


class SerdeError(NexusError):
    """A JSON document could not be read or written."""

    prefix = "Serialization Error"


class ConfigError(NexusError):
    """Invalid configuration, or binary data that could not be decoded."""

    prefix = "Configuration Error"


class ConsensusError(NexusError):
    """The consensus protocol reached an invalid state."""

    prefix = "Consensus Error"