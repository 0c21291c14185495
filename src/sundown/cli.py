#!/usr/bin/env python3
"""Sundown CLI.

Track the working day against a daily limit from the terminal.

Usage:
    sundown config set --daily-limit 8h --reset-time 4:00 --notifications
    sundown status                     # Gate, today's record, time left
    sundown run                        # Tick once a second until Ctrl-C
    sundown run --idle-command xprintidle
    sundown log break 15               # Credit 15 break minutes to today
    sundown history                    # Per-day totals
    sundown reset-day                  # Start today's record over
"""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

import click
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .activity import ActivityKind
from .config import AppConfig, configure_logging, db_option, tz_option, verbose_option
from .day_record_store import SQLiteDayRecordStore
from .engine import TimeEngine
from .formatting import format_limit_label, format_minutes, format_reset_label
from .onboarding import OnboardingGateState, gate_message
from .settings import PersistedSettings, SQLiteSettingsStore
from .tracker import SessionTracker, TrackerEvent
from .worktime import display_text, is_over_limit

logger = logging.getLogger("sundown.cli")

console = Console()

TIME_COLON_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")
TIME_DIGITS_PATTERN = re.compile(r"^(?P<digits>\d{1,4})$")
DURATION_PATTERN = re.compile(r"^(?:(?P<hours>\d+)h)?\s*(?:(?P<minutes>\d+)m?)?$")

ACTIVITY_CHOICES = {
    "work": ActivityKind.WORK,
    "break": ActivityKind.BREAK_TIME,
    "idle": ActivityKind.IDLE,
}


# ---- Input parsing ----

def parse_reset_time(value: str) -> int:
    """Parse HH:MM, H:MM, HMM or HHMM (24h) into minutes from midnight."""
    value = value.strip()
    colon_match = TIME_COLON_PATTERN.match(value)
    if colon_match:
        return _validate_time(int(colon_match.group("hour")), int(colon_match.group("minute")))

    digits_match = TIME_DIGITS_PATTERN.match(value)
    if digits_match:
        digits = digits_match.group("digits")
        if len(digits) <= 2:
            return _validate_time(int(digits), 0)
        if len(digits) == 3:
            return _validate_time(int(digits[0]), int(digits[1:]))
        return _validate_time(int(digits[:2]), int(digits[2:]))

    raise click.BadParameter(
        "Unsupported time format. Use HH:MM, H:MM, HMM, or HHMM (24h).",
        param_hint="reset-time",
    )


def _validate_time(hour: int, minute: int) -> int:
    if not 0 <= hour <= 23:
        raise click.BadParameter("Hour must be between 0 and 23.", param_hint="reset-time")
    if not 0 <= minute <= 59:
        raise click.BadParameter("Minute must be between 0 and 59.", param_hint="reset-time")
    return hour * 60 + minute


def parse_limit_minutes(value: str) -> int:
    """Parse '480', '480m', '8h' or '7h30m' into minutes."""
    match = DURATION_PATTERN.match(value.strip().lower())
    if not match or not (match.group("hours") or match.group("minutes")):
        raise click.BadParameter(
            f"Invalid duration: {value}. Use minutes or a format like '8h', '7h30m'.",
            param_hint="daily-limit",
        )
    return int(match.group("hours") or 0) * 60 + int(match.group("minutes") or 0)


# ---- Host helpers ----

@dataclass
class CLIContext:
    config: AppConfig
    settings_store: SQLiteSettingsStore
    record_store: SQLiteDayRecordStore
    engine: TimeEngine

    def now(self) -> datetime:
        return current_time(self.config.tz)


def current_time(tz: tzinfo | None) -> datetime:
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def idle_seconds_from_command(command: str) -> Optional[int]:
    """Run an idle probe that prints idle milliseconds (e.g. ``xprintidle``)."""
    try:
        result = subprocess.run(shlex.split(command), capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Idle probe failed: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"Idle probe exited {result.returncode}: {result.stderr[:100]}")
        return None
    try:
        return int(result.stdout.strip()) // 1000
    except ValueError:
        logger.warning(f"Idle probe printed non-numeric output: {result.stdout[:40]!r}")
        return None


def _gate_text(state: OnboardingGateState) -> Text:
    style = "green" if state == OnboardingGateState.ALLOWED else "yellow"
    return Text(gate_message(state), style=style)


def _print_settings(settings: PersistedSettings, engine: TimeEngine) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    notifications = settings.notifications_enabled
    table.add_row("Daily limit", format_limit_label(settings.daily_limit_minutes))
    table.add_row("Day reset", format_reset_label(settings.day_reset_minutes_from_midnight))
    table.add_row("Notifications", "Unset" if notifications is None else ("On" if notifications else "Off"))
    table.add_row(
        "Idle threshold",
        f"{engine.idle_threshold_minutes(settings)}m"
        + ("" if settings.idle_threshold_minutes is not None else " (default)"),
    )
    table.add_row(
        "Reminder every",
        f"{engine.reminder_interval_minutes(settings)}m"
        + ("" if settings.over_limit_reminder_minutes is not None else " (default)"),
    )
    console.print(table)


# ---- Commands ----

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@db_option
@tz_option
@verbose_option
@click.pass_context
def cli(ctx, db_path, tz_name, verbose):
    """Sundown - track the working day against a daily limit."""
    config = AppConfig.from_env()
    if db_path is not None:
        config.db_path = db_path
    if tz_name is not None:
        config.tz_name = tz_name
    if verbose:
        config.verbose = True

    configure_logging(config.verbose)

    ctx.obj = CLIContext(
        config=config,
        settings_store=SQLiteSettingsStore(config.db_path),
        record_store=SQLiteDayRecordStore(config.db_path),
        engine=TimeEngine.for_timezone(config.tz),
    )


@cli.command()
@click.pass_obj
def status(obj: CLIContext):
    """Show the gate, today's record and time left."""
    settings = obj.settings_store.load()
    gate = obj.engine.gate_state(settings)

    console.print(_gate_text(gate))
    _print_settings(settings, obj.engine)

    if gate != OnboardingGateState.ALLOWED:
        return

    day_id = obj.engine.day_id(obj.now(), settings)
    record = obj.record_store.load(day_id)
    work_minutes = record.work_minutes if record else 0
    state = obj.engine.worktime_state(work_minutes * 60, settings)

    console.print()
    console.print(f"[bold]Day {day_id}[/bold]")
    style = "bold red" if is_over_limit(state) else "bold green"
    console.print(Text(display_text(state), style=style))

    if record is not None:
        totals = record.ritual_totals()
        console.print(
            f"Work {format_minutes(totals.work_minutes)}  "
            f"Break {format_minutes(totals.break_minutes)}  "
            f"Idle {format_minutes(totals.idle_minutes)}  "
            f"[dim]Total {format_minutes(totals.total_minutes)}[/dim]"
        )
        if record.over_minutes:
            console.print(f"[red]Over by {format_minutes(record.over_minutes)}[/red]")


@cli.group()
def config():
    """Show or change settings."""


@config.command("show")
@click.pass_obj
def config_show(obj: CLIContext):
    """Show current settings."""
    settings = obj.settings_store.load()
    _print_settings(settings, obj.engine)
    console.print(_gate_text(obj.engine.gate_state(settings)))


@config.command("set")
@click.option("--daily-limit", help="Daily limit, e.g. 480, 8h, 7h30m")
@click.option("--reset-time", help="Day reset time, e.g. 4:00 or 0400")
@click.option("--idle-threshold", type=int, help="Minutes without input before idle")
@click.option("--reminder", type=int, help="Minutes between over-limit reminders")
@click.option("--notifications/--no-notifications", default=None, help="Over-limit notifications")
@click.pass_obj
def config_set(obj: CLIContext, daily_limit, reset_time, idle_threshold, reminder, notifications):
    """Change one or more settings."""
    settings = obj.settings_store.load()

    if daily_limit is not None:
        settings = settings.with_daily_limit(parse_limit_minutes(daily_limit))
    if reset_time is not None:
        settings = settings.with_reset_time(parse_reset_time(reset_time))
    if idle_threshold is not None:
        settings = settings.updated(idle_threshold_minutes=idle_threshold)
    if reminder is not None:
        settings = settings.updated(over_limit_reminder_minutes=reminder)
    if notifications is not None:
        if notifications and settings.notifications_enabled is not True:
            obj.config.notification_service().request_authorization_if_needed()
        settings = settings.updated(notifications_enabled=notifications)

    obj.settings_store.save(settings)
    _print_settings(settings, obj.engine)
    console.print(_gate_text(obj.engine.gate_state(settings)))


@config.command("clear")
@click.confirmation_option(prompt="Clear all settings?")
@click.pass_obj
def config_clear(obj: CLIContext):
    """Unset every setting."""
    obj.settings_store.save(obj.settings_store.load().cleared())
    console.print("[yellow]Settings cleared.[/yellow]")


@cli.command()
@click.option("--limit", "max_rows", default=14, show_default=True, help="Most recent days to show")
@click.pass_obj
def history(obj: CLIContext, max_rows):
    """Show per-day totals."""
    records = obj.record_store.load_all()
    if not records:
        console.print("[yellow]No days recorded yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Day", style="dim")
    table.add_column("Work", justify="right")
    table.add_column("Break", justify="right")
    table.add_column("Idle", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Over", justify="right")

    for record in records[-max_rows:]:
        over = Text(format_minutes(record.over_minutes), style="red" if record.over_minutes else "dim")
        table.add_row(
            record.day_id,
            format_minutes(record.work_minutes),
            format_minutes(record.break_minutes),
            format_minutes(record.idle_minutes),
            format_minutes(record.limit_minutes),
            over,
        )

    console.print(table)


def _tracker(obj: CLIContext) -> SessionTracker:
    return SessionTracker(
        settings=obj.settings_store.load(),
        record_store=obj.record_store,
        notification_service=obj.config.notification_service(),
        now=obj.now(),
        engine=obj.engine,
    )


def _require_gate(settings: PersistedSettings, engine: TimeEngine) -> None:
    gate = engine.gate_state(settings)
    if gate != OnboardingGateState.ALLOWED:
        raise click.ClickException(gate_message(gate))


@cli.command()
@click.argument("activity", type=click.Choice(sorted(ACTIVITY_CHOICES)))
@click.argument("minutes", type=click.IntRange(min=0))
@click.pass_obj
def log(obj: CLIContext, activity, minutes):
    """Credit MINUTES of ACTIVITY to today's record."""
    tracker = _tracker(obj)
    _require_gate(tracker.settings, obj.engine)

    record = tracker.add_minutes(ACTIVITY_CHOICES[activity], minutes, obj.now())
    console.print(f"[green]{record.day_id}[/green]: +{minutes}m {activity}")


@cli.command("reset-day")
@click.confirmation_option(prompt="Start today's record over?")
@click.pass_obj
def reset_day(obj: CLIContext):
    """Replace today's record with an empty one."""
    tracker = _tracker(obj)
    _require_gate(tracker.settings, obj.engine)

    record = tracker.reset_today_record(obj.now())
    console.print(f"[yellow]{record.day_id} reset (limit {format_minutes(record.limit_minutes)})[/yellow]")


def run_tick(obj: CLIContext, tracker: SessionTracker, idle_command: Optional[str]) -> None:
    """One scheduler tick: reload settings, probe idle, advance the tracker."""
    tracker.apply_settings(obj.settings_store.load())
    inactivity = idle_seconds_from_command(idle_command) if idle_command else None
    # Without a working idle command nothing reports input, so the user counts as present
    result = tracker.tick(obj.now(), inactivity_seconds=inactivity if inactivity is not None else 0)

    if TrackerEvent.DAY_ROLLOVER in result.events:
        console.print(f"[cyan]New day after {result.rollover_day_id}[/cyan]")
    if TrackerEvent.OVER_LIMIT_CROSSED in result.events:
        console.print("[bold red]Daily limit reached[/bold red]")
    if TrackerEvent.NOTIFICATION_SENT in result.events:
        console.print(f"[red]Reminder sent: {display_text(result.worktime_state)}[/red]")


@cli.command()
@click.option(
    "--idle-command",
    help="Command printing idle milliseconds, e.g. xprintidle. Without it all running time counts as active",
)
@click.option("--interval", default=1, show_default=True, type=click.IntRange(min=1), help="Seconds between ticks")
@click.pass_obj
def run(obj: CLIContext, idle_command, interval):
    """Track the session until interrupted."""
    tracker = _tracker(obj)
    if not tracker.start(obj.now()):
        raise click.ClickException(gate_message(tracker.gate_state))

    snapshot = tracker.snapshot(obj.now())
    console.print(f"[green]Tracking {snapshot['day_id']}[/green]: {snapshot['worktime']}")

    scheduler = BlockingScheduler(timezone=obj.config.tz_name or None)
    scheduler.add_job(
        run_tick,
        trigger=IntervalTrigger(seconds=interval),
        args=[obj, tracker, idle_command],
        id="sundown-tick",
        max_instances=1,
        coalesce=True,
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        tracker.set_paused(True, obj.now())
        console.print("[dim]Stopped.[/dim]")


def main():
    cli()


if __name__ == "__main__":
    main()
