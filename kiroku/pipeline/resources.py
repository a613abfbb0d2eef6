"""Group resource changes per resource type and timestamp."""

from collections.abc import Sequence

from kiroku.simlog.constants import ResourceType
from kiroku.simlog.events import (
    ResourceChanged,
    ResourceChangedLogGroup,
    SimLog,
    filter_events,
)
from kiroku.simlog.grouping import group_duplicate_timestamps


def group_resource_changes(
    logs: Sequence[SimLog],
) -> dict[ResourceType, list[ResourceChangedLogGroup]]:
    """Collapse simultaneous resource changes into one group per type.

    Each group spans the first change's value_before to the last change's
    value_after. max_value is the largest reported pool total in the group,
    or 0 when no change reported one.

    Returns:
        Groups per resource type, for types present in logs (in order of
        first appearance).
    """
    resource_logs = filter_events(logs, ResourceChanged)

    by_type: dict[ResourceType, list[ResourceChanged]] = {}
    for log in resource_logs:
        by_type.setdefault(log.resource_type, []).append(log)

    results: dict[ResourceType, list[ResourceChangedLogGroup]] = {}
    for resource_type, type_logs in by_type.items():
        results[resource_type] = [
            ResourceChangedLogGroup(
                log_index=group[0].log_index,
                timestamp=group[0].timestamp,
                source=group[0].source,
                target=group[0].target,
                spell_school=group[0].spell_school,
                resource_type=resource_type,
                value_before=group[0].value_before,
                value_after=group[-1].value_after,
                max_value=max(0.0, *(log.total for log in group)),
                logs=tuple(group),
            )
            for group in group_duplicate_timestamps(type_logs)
        ]

    return results
