from collections.abc import Sequence
from typing import TypeVar

from kiroku.simlog.events import SimLog

T = TypeVar("T", bound=SimLog)


def group_duplicate_timestamps(logs: Sequence[T]) -> list[list[T]]:
    """Split logs into maximal runs of consecutive entries sharing a timestamp."""
    grouped: list[list[T]] = []
    current: list[T] = []
    for log in logs:
        if current and log.timestamp != current[0].timestamp:
            grouped.append(current)
            current = []
        current.append(log)
    if current:
        grouped.append(current)
    return grouped
