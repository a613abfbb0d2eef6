"""Pydantic models for serialized log summaries."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class KirokuBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CastSummary(KirokuBaseModel):
    ability: str
    action_id: str
    casts: int
    completed: int
    avg_cast_time: float
    total_damage: float
    avg_travel_time: float | None = None


class AuraUptimeSummary(KirokuBaseModel):
    entity: str
    aura: str
    action_id: str
    applications: int
    uptime: float  # seconds
    uptime_pct: float
    max_stacks: int = 0


class ResourceSummary(KirokuBaseModel):
    resource: str
    groups: int
    start_value: float
    end_value: float
    min_value: float
    max_value: float


class LogSummary(KirokuBaseModel):
    entity: str | None = None
    encounter_duration: float
    total_lines: int
    event_counts: dict[str, int]
    total_damage: float
    avg_dps: float
    peak_dps: float
    total_threat: float
    casts: list[CastSummary] = []
    auras: list[AuraUptimeSummary] = []
    resources: list[ResourceSummary] = []
