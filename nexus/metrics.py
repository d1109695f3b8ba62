"""Interface for metrics instrumentation."""

from __future__ import annotations

from abc import ABC, abstractmethod


class MetricsCollector(ABC):
    """Receives counter increments and gauge observations."""

    @abstractmethod
    def inc_counter(self, name: str) -> None: ...

    @abstractmethod
    def observe_gauge(self, name: str, value: float) -> None: ...