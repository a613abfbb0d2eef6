import argparse
import asyncio
import logging
import sys
from contextlib import AsyncExitStack
from pathlib import Path

from kiroku.config import Settings, get_settings
from kiroku.models import LogSummary
from kiroku.pipeline.reconstruct import reconstruct
from kiroku.pipeline.summaries import build_log_summary
from kiroku.simlog.entity import Entity, parse_entities
from kiroku.simlog.parser import parse_all
from kiroku.simlog.resolver import ActionResolver, HttpNameResolver, LogStringResolver

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse a combat simulation log and summarize it",
    )
    parser.add_argument("logfile", type=Path, help="Path to the sim log text")
    parser.add_argument(
        "--duration", type=float, required=True,
        help="Encounter duration in seconds",
    )
    parser.add_argument(
        "--entity",
        help="Restrict to one participant, e.g. 'Bob (#1)'",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the summary as JSON",
    )
    return parser.parse_args(argv)


def parse_entity_label(label: str) -> Entity:
    """Turn 'Bob (#1)' / 'Target 1' / 'Bob (#1) - Wolf' into an Entity."""
    entities = parse_entities(f"[{label.strip().strip('[]')}]")
    if len(entities) != 1:
        raise ValueError(f"Not an entity label: {label!r}")
    return entities[0]


def format_summary(summary: LogSummary) -> str:
    lines = [
        f"Lines: {summary.total_lines}  Duration: {summary.encounter_duration:.1f}s",
        f"Damage: {summary.total_damage:.0f}  DPS: {summary.avg_dps:.1f}"
        f"  Peak DPS: {summary.peak_dps:.1f}  Threat: {summary.total_threat:.0f}",
    ]
    if summary.casts:
        lines.append("")
        lines.append("Casts:")
        for cast in summary.casts:
            lines.append(
                f"  {cast.ability:<30} {cast.casts:>5} casts"
                f" {cast.avg_cast_time:>7.2f}s {cast.total_damage:>12.0f} dmg"
            )
    if summary.auras:
        lines.append("")
        lines.append("Auras:")
        for aura in summary.auras:
            lines.append(
                f"  {aura.entity:<20} {aura.aura:<30} {aura.uptime_pct:>5.1f}%"
            )
    return "\n".join(lines)


async def run(
    logfile: Path,
    duration: float,
    *,
    entity: Entity | None = None,
    settings: Settings | None = None,
) -> LogSummary:
    settings = settings or get_settings()
    text = logfile.read_text(encoding="utf-8")

    async with AsyncExitStack() as stack:
        resolver: ActionResolver = LogStringResolver()
        if settings.resolver.enabled:
            resolver = await stack.enter_async_context(HttpNameResolver(
                settings.resolver.base_url, timeout=settings.resolver.timeout,
            ))
        events = await parse_all(
            text, resolver, concurrency=settings.parser.concurrency,
        )

    reconstructed = reconstruct(events, duration, entity=entity, settings=settings)
    return build_log_summary(reconstructed)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.debug else settings.log_level)

    try:
        entity = parse_entity_label(args.entity) if args.entity else None
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    summary = asyncio.run(run(args.logfile, args.duration, entity=entity, settings=settings))
    if args.json:
        print(summary.model_dump_json(by_alias=True, indent=2))
    else:
        print(format_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
