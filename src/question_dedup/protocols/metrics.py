"""Protocol for metrics sinks."""

from __future__ import annotations

from typing import Protocol


class MetricsSink(Protocol):
    def increment(self, name: str, amount: int = 1) -> None: ...

    def gauge(self, name: str, value: float) -> None: ...

    def snapshot(self) -> dict[str, float]: ...
