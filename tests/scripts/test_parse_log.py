import json
from unittest.mock import patch

import httpx
import pytest
import respx

from kiroku.config import ResolverConfig, Settings
from kiroku.models import LogSummary
from kiroku.scripts.parse_log import (
    format_summary,
    main,
    parse_args,
    parse_entity_label,
    run,
)
from kiroku.simlog.entity import Entity

BASE_URL = "https://names.example/api"

LOG_LINES = [
    "Simulation start",
    "[0.00] [Alice (#1)] Casting {SpellID: 133} "
    "(Cost = 120.000, Cast Time = 2.5s, Effective Time = 2000ms)",
    "[0.50] [Alice (#1)] Aura gained: {SpellID: 1459}",
    "[2.00] [Alice (#1)] Completed cast {SpellID: 133}",
    "[3.00] [Alice (#1)] [Target 1] {SpellID: 133} Hit for 150.000 damage."
    " (SpellSchool: 2) (Threat: 165.000)",
    "[4.00] [Bob (#2)] [Target 1] {SpellID: 116} Crit for 300.000 damage. (SpellSchool: 3)",
    "[5.00] [Alice (#1)] Spent 120.000 mana from {SpellID: 133}"
    " (1000.000 --> 880.000) of 1000.000 total.",
]


@pytest.fixture
def logfile(tmp_path):
    path = tmp_path / "sim.log"
    path.write_text("\n".join(LOG_LINES), encoding="utf-8")
    return path


@pytest.fixture
def settings():
    return Settings(_env_file=None)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def test_parse_args(tmp_path):
    args = parse_args([str(tmp_path / "sim.log"), "--duration", "120", "--json"])
    assert args.logfile == tmp_path / "sim.log"
    assert args.duration == 120.0
    assert args.json is True
    assert args.entity is None


def test_parse_args_requires_duration():
    with pytest.raises(SystemExit):
        parse_args(["sim.log"])


@pytest.mark.parametrize("label,expected", [
    ("Bob (#2)", Entity(name="Bob", index=1)),
    ("[Bob (#2)]", Entity(name="Bob", index=1)),
    ("Target 1", Entity(name="Target 1", index=0, is_target=True)),
    ("Bob (#2) - Wolf", Entity(name="Wolf", owner_name="Bob", index=1, is_pet=True)),
])
def test_parse_entity_label(label, expected):
    assert parse_entity_label(label) == expected


def test_parse_entity_label_rejects_plain_names():
    with pytest.raises(ValueError, match="Not an entity label"):
        parse_entity_label("Bob")


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

async def test_run_summarizes_log(logfile, settings):
    summary = await run(logfile, 10.0, settings=settings)

    assert summary.total_lines == 7
    assert summary.event_counts["Generic"] == 1
    assert summary.total_damage == 450.0
    assert summary.avg_dps == 45.0
    assert summary.peak_dps == 30.0
    assert summary.total_threat == 165.0

    [cast] = summary.casts
    assert cast.ability == "Spell-133"
    assert cast.avg_cast_time == 2.0
    assert cast.avg_travel_time == 1.0

    [aura] = summary.auras
    assert aura.entity == "Alice (#1)"
    assert aura.uptime_pct == 95.0

    [mana] = summary.resources
    assert (mana.start_value, mana.end_value) == (1000.0, 880.0)


async def test_run_for_entity(logfile, settings):
    summary = await run(logfile, 10.0, entity=Entity(name="Bob", index=1), settings=settings)

    assert summary.entity == "Bob (#2)"
    assert summary.total_damage == 300.0
    assert summary.casts == []
    assert summary.auras == []


@respx.mock
async def test_run_with_name_service(logfile):
    for path, name in [
        ("spell/133", "Fireball"),
        ("spell/116", "Frostbolt"),
        ("spell/1459", "Arcane Intellect"),
    ]:
        respx.get(f"{BASE_URL}/{path}").mock(
            return_value=httpx.Response(200, json={"name": name})
        )
    settings = Settings(
        _env_file=None,
        resolver=ResolverConfig(enabled=True, base_url=BASE_URL),
    )

    summary = await run(logfile, 10.0, settings=settings)

    assert [c.ability for c in summary.casts] == ["Fireball"]
    assert [a.aura for a in summary.auras] == ["Arcane Intellect"]


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

@patch("kiroku.scripts.parse_log.get_settings")
def test_main_prints_json(mock_get_settings, logfile, capsys):
    mock_get_settings.return_value = Settings(_env_file=None)

    rc = main([str(logfile), "--duration", "10", "--json"])

    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["totalDamage"] == 450.0
    assert data["encounterDuration"] == 10.0
    assert data["casts"][0]["actionId"] == "spell-133"


@patch("kiroku.scripts.parse_log.get_settings")
def test_main_prints_text(mock_get_settings, logfile, capsys):
    mock_get_settings.return_value = Settings(_env_file=None)

    rc = main([str(logfile), "--duration", "10", "--entity", "Alice (#1)"])

    assert rc == 0
    out = capsys.readouterr().out
    assert "Damage: 150" in out
    assert "Casts:" in out
    assert "Spell-133" in out
    assert "Auras:" in out


@patch("kiroku.scripts.parse_log.get_settings")
def test_main_rejects_bad_entity(mock_get_settings, logfile, capsys):
    mock_get_settings.return_value = Settings(_env_file=None)

    rc = main([str(logfile), "--duration", "10", "--entity", "Nobody"])

    assert rc == 2
    assert capsys.readouterr().out == ""


def test_format_summary_without_casts_or_auras():
    summary = LogSummary(
        encounter_duration=60.0, total_lines=0, event_counts={},
        total_damage=0.0, avg_dps=0.0, peak_dps=0.0, total_threat=0.0,
    )

    text = format_summary(summary)

    assert "Duration: 60.0s" in text
    assert "Casts:" not in text
    assert "Auras:" not in text
