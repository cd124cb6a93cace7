"""
CLI interface for RunTrack.

Usage:
    runtrack replay route.gpx
    runtrack replay route.gpx --unit mi --weight 62 --age 41 --sex female
    python -m runtrack.cli replay route.gpx --elevation
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from runtrack.config import settings
from runtrack.shared.constants import DEFAULT_AGE, DEFAULT_WEIGHT_KG, DistanceUnit, Sex
from runtrack.shared.formatters import (
    format_distance,
    format_duration,
    format_elevation,
    format_pace,
)
from runtrack.features.sensor import (
    Fix,
    ReplayLocationProvider,
    SensorAdapter,
    SensorOptions,
    load_fixes_from_gpx,
)
from runtrack.features.session import (
    InvalidConfiguration,
    Lap,
    SessionConfig,
    SessionEngine,
    SessionListener,
    UserProfile,
)
from runtrack.features.elevation import ElevationClient, ElevationRefiner


class ReplayClock:
    """Clock that follows the timestamps of replayed fixes."""

    def __init__(self, start_ms: int):
        self.now_ms = start_ms

    def advance_to(self, timestamp_ms: int) -> None:
        self.now_ms = max(self.now_ms, timestamp_ms)

    def __call__(self) -> int:
        return self.now_ms


class ConsoleSplitPrinter(SessionListener):
    """Prints each split as it completes."""

    def __init__(self, unit: DistanceUnit):
        self.unit = unit

    def on_split(self, lap: Lap) -> None:
        click.echo(
            f"  {self.unit.value} {lap.index:>3}  "
            f"{format_duration(lap.duration_s):>8}  "
            f"pace {format_pace(lap.avg_pace, self.unit)}  "
            f"{format_elevation(lap.elevation_gain_m)} / -{int(round(lap.elevation_loss_m))} m"
        )


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """RunTrack session tools."""
    logging.basicConfig(
        level=getattr(logging, (log_level or settings.log_level).upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@cli.command()
@click.argument("gpx_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--unit",
    default=settings.default_unit.value,
    type=click.Choice([u.value for u in DistanceUnit]),
    help="Split unit"
)
@click.option("--split-km", default=None, type=float, help="Override split distance in km")
@click.option("--weight", default=DEFAULT_WEIGHT_KG, type=float, help="Body mass in kg")
@click.option("--age", default=DEFAULT_AGE, type=int, help="Age in years")
@click.option(
    "--sex",
    default=Sex.MALE.value,
    type=click.Choice([s.value for s in Sex]),
)
@click.option("--max-speed", default=None, type=float, help="Speed ceiling in km/h")
@click.option("--min-movement", default=None, type=float, help="Watch movement filter in m")
@click.option("--interval", default=1.0, type=float, help="Seconds between points without time")
@click.option("--elevation", is_flag=True, help="Look up missing elevations online")
def replay(gpx_file, unit, split_km, weight, age, sex, max_speed, min_movement, interval, elevation):
    """
    Replay a GPX track as a live session.

    Fixes go through the sensor adapter's watch filters and the session
    engine exactly as they would during a run; the session clock follows
    the track's timestamps.
    """
    try:
        fixes = load_fixes_from_gpx(gpx_file.read_bytes(), default_interval_s=interval)
    except ValueError as e:
        raise click.ClickException(str(e))

    overrides = {"unit": DistanceUnit(unit), "split_distance_km": split_km}
    if max_speed is not None:
        overrides["max_speed_kmh"] = max_speed
    try:
        config = SessionConfig.from_settings(**overrides)
    except InvalidConfiguration as e:
        raise click.BadParameter(str(e))

    sensor_options = SensorOptions()
    if min_movement is not None:
        sensor_options.min_movement_m = min_movement

    clock = ReplayClock(fixes[0].timestamp_ms)
    provider = ReplayLocationProvider(fixes)
    adapter = SensorAdapter(provider, sensor_options)
    profile = UserProfile(weight_kg=weight, age=age, sex=Sex(sex))
    engine = SessionEngine(config, profile, clock=clock, sensor=adapter)
    engine.add_listener(ConsoleSplitPrinter(config.unit))

    refiner = ElevationRefiner(engine, ElevationClient()) if elevation else None

    def on_fix(fix: Fix) -> None:
        clock.advance_to(fix.timestamp_ms)
        engine.add_sample(fix)

    click.echo(f"Replaying {len(fixes)} fixes from {gpx_file.name}")
    engine.start()
    handle = adapter.start_watch(on_fix)
    provider.play()
    adapter.stop_watch(handle)
    engine.stop()

    if refiner is not None and refiner.pending:
        updated = asyncio.run(refiner.flush())
        click.echo(f"Elevation looked up for {updated} samples")

    stats = engine.get_stats()
    click.echo("")
    click.echo(f"Distance:   {format_distance(stats.distance_km, config.unit)}")
    click.echo(f"Duration:   {format_duration(stats.duration_s)}")
    click.echo(f"Avg pace:   {format_pace(stats.avg_pace, config.unit)} /{config.unit.value}")
    click.echo(f"Elevation:  {format_elevation(stats.elevation_gain_m)} / "
               f"-{int(round(stats.elevation_loss_m))} m")
    click.echo(f"Calories:   ~{int(round(stats.calories))} kcal (estimate)")
    click.echo(f"Samples:    {stats.sample_count} accepted, "
               f"{adapter.dropped_fixes} filtered, {engine.rejected_samples} rejected")


if __name__ == "__main__":
    cli()
