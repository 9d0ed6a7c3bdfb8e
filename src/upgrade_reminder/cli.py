"""Upgrade Reminder CLI."""

import json
import logging
import sys
from datetime import datetime

import click

from .adapters.config_transfer import TransferStatus, export_config, import_config
from .config import Config, load_config
from .core.engine import recurrence_state
from .core.recurrence import CustomPeriod, RecurrenceRule, RepeatMode
from .core.tasks import Task, filter_by_account
from .workflows import ReminderService, TaskNotFoundError, get_service

DATETIME = click.DateTime(formats=["%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S"])


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


def _service(ctx: click.Context) -> ReminderService:
    try:
        return get_service(_config(ctx))
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _task_json(task: Task, now: datetime) -> dict:
    data = task.to_dict()
    data["state"] = recurrence_state(task, now).value
    data["remaining"] = task.remaining_str(now)
    return data


def _status_marker(task: Task) -> str:
    if task.pending_delete:
        return "DEL"
    if task.awaiting_ack:
        return "ACK"
    if task.done:
        return "OK "
    if task.expired:
        return "END"
    return "   "


@click.group()
@click.version_option(package_name="upgrade-reminder")
@click.option(
    "--data-dir",
    envvar="REMINDER_DATA_DIR",
    default=None,
    help="Directory holding tasks.json and settings.json",
)
@click.pass_context
def main(ctx, data_dir: str | None):
    """Upgrade Reminder - track upgrade timers and get notified when they finish."""
    config = load_config()
    if data_dir:
        config.data_dir = data_dir
    ctx.obj = {"config": config}


@main.command()
@click.argument("name")
@click.option("--account", "-a", default="", help="Owning account (default: Default)")
@click.option("--start", "-s", type=DATETIME, default=None, help="Start time, defaults to now")
@click.option("--days", "-d", type=click.IntRange(min=0), default=0)
@click.option("--hours", "-h", type=click.IntRange(min=0), default=0)
@click.option("--minutes", "-m", type=click.IntRange(min=0), default=0)
@click.pass_context
def add(ctx, name: str, account: str, start, days: int, hours: int, minutes: int):
    """Add a timer."""
    service = _service(ctx)
    task = service.add_task(account, name, start, days=days, hours=hours, minutes=minutes)
    click.echo(f"Added {task.id[:8]} {task.account}/{task.name}, finishes {task.finish_str}")


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--account", "-a", default=None, help="Only this account")
@click.pass_context
def list_tasks(ctx, as_json: bool, account: str | None):
    """List timers, earliest finish first."""
    service = _service(ctx)
    now = service.clock.now()
    tasks = service.visible_tasks()
    if account:
        tasks = filter_by_account(tasks, account)

    if as_json:
        click.echo(json.dumps([_task_json(t, now) for t in tasks], indent=2, ensure_ascii=False))
        return

    if not tasks:
        click.echo("No timers.")
        return

    for task in tasks:
        repeat = f"  ({task.recurrence.describe()})" if task.recurrence else ""
        click.echo(
            f"[{_status_marker(task)}] {task.id[:8]}  {task.account:12} {task.name:20} "
            f"{task.finish_str}  {task.remaining_str(now):>12}{repeat}"
        )


@main.command()
@click.argument("task_id")
@click.option("--name", default=None)
@click.option("--account", "-a", default=None)
@click.option("--start", "-s", type=DATETIME, default=None)
@click.option("--days", "-d", type=click.IntRange(min=0), default=None)
@click.option("--hours", "-h", type=click.IntRange(min=0), default=None)
@click.option("--minutes", "-m", type=click.IntRange(min=0), default=None)
@click.pass_context
def edit(ctx, task_id: str, name, account, start, days, hours, minutes):
    """Edit a timer. Changing start or duration restarts its schedule."""
    service = _service(ctx)
    changes = {"name": name, "account": account, "days": days, "hours": hours, "minutes": minutes}
    if start is not None:
        changes["start"] = start
    try:
        task = service.edit_task(task_id, **changes)
    except TaskNotFoundError as e:
        _fail(str(e))
    click.echo(f"Updated {task.id[:8]}, finishes {task.finish_str}")


@main.command()
@click.argument("task_id")
@click.argument("mode", type=click.Choice([m.value for m in RepeatMode], case_sensitive=False))
@click.option("--years", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--months", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--days", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--hours", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--minutes", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--seconds", type=click.IntRange(min=0), default=0, help="Custom period")
@click.option("--until", "end_at", type=DATETIME, default=None, help="Stop repeating at this time")
@click.option("--remind-every", type=click.IntRange(min=0), default=0,
              help="Notify this many times ...")
@click.option("--skip", "skip_count", type=click.IntRange(min=0), default=0,
              help="... then skip this many times")
@click.option("--pause", is_flag=True, help="Pause after each reminder until acknowledged")
@click.option("--offset", type=int, default=0, help="Shift each next occurrence by N seconds")
@click.pass_context
def repeat(ctx, task_id, mode, years, months, days, hours, minutes, seconds,
           end_at, remind_every, skip_count, pause, offset):
    """Set how a timer repeats (mode 'none' stops repeating)."""
    service = _service(ctx)
    rule = RecurrenceRule.create(
        mode=mode,
        custom=CustomPeriod(years, months, days, hours, minutes, seconds),
        end_at=end_at,
        remind_every=remind_every,
        skip_count=skip_count,
        pause_until_ack=pause,
        offset_after_seconds=offset,
        now=service.clock.now(),
    )
    try:
        task = service.set_recurrence(task_id, rule)
    except TaskNotFoundError as e:
        _fail(str(e))
    label = task.recurrence.describe() if task.recurrence else "once"
    click.echo(f"{task.id[:8]} repeats: {label}")


@main.command()
@click.argument("task_id")
@click.pass_context
def done(ctx, task_id: str):
    """Toggle a timer's done mark (acknowledges a paused repeating timer)."""
    service = _service(ctx)
    try:
        task = service.toggle_done(task_id)
    except TaskNotFoundError as e:
        _fail(str(e))
    if task.done:
        click.echo(f"{task.id[:8]} marked done")
    else:
        click.echo(f"{task.id[:8]} active, finishes {task.finish_str}")


@main.command()
@click.argument("task_id")
@click.option("--keep-cadence", is_flag=True,
              help="Keep the already computed next time instead of restarting from now")
@click.pass_context
def ack(ctx, task_id: str, keep_cadence: bool):
    """Acknowledge a paused repeating timer."""
    service = _service(ctx)
    try:
        outcome = service.acknowledge(task_id, restart=not keep_cadence)
    except TaskNotFoundError as e:
        _fail(str(e))
    click.echo(f"{outcome.state.value}, next {outcome.new_due:%Y-%m-%d %H:%M:%S}")


@main.command()
@click.argument("task_id")
@click.pass_context
def delete(ctx, task_id: str):
    """Mark a timer for deletion, or undo a pending deletion."""
    service = _service(ctx)
    try:
        task = service.toggle_delete(task_id)
    except TaskNotFoundError as e:
        _fail(str(e))
    if task.pending_delete:
        grace = service.settings.pending_delete_grace_seconds
        click.echo(f"{task.id[:8]} will be deleted in {grace}s (run 'delete' again to undo)")
    else:
        click.echo(f"{task.id[:8]} restored")


@main.command()
@click.option("--force", is_flag=True, help="Remove pending deletes without waiting")
@click.pass_context
def purge(ctx, force: bool):
    """Remove timers whose delete or retention window has passed."""
    removed = _service(ctx).purge(force=force)
    click.echo(f"Removed {len(removed)} timer(s).")


@main.command("clear-done")
@click.pass_context
def clear_done(ctx):
    """Remove all done timers now."""
    removed = _service(ctx).delete_all_done()
    click.echo(f"Removed {removed} done timer(s).")


@main.group()
def settings():
    """Show or change notification settings."""
    pass


@settings.command("show")
@click.pass_context
def settings_show(ctx):
    """Print current settings as JSON."""
    click.echo(json.dumps(_service(ctx).settings.to_dict(), indent=2, ensure_ascii=False))


@settings.command("set")
@click.option("--advance", "advance_notify_seconds", type=click.IntRange(min=0), default=None,
              help="Seconds before finish for the early notification (0 = off)")
@click.option("--also-notify-at-due/--no-also-notify-at-due", default=None,
              help="Still notify at finish after an early notification")
@click.option("--auto-delete", "auto_delete_completed_seconds", type=click.IntRange(min=0),
              default=None, help="Remove done timers after N seconds (0 = never)")
@click.pass_context
def settings_set(ctx, advance_notify_seconds, also_notify_at_due, auto_delete_completed_seconds):
    """Change settings."""
    changes = {
        key: value
        for key, value in (
            ("advance_notify_seconds", advance_notify_seconds),
            ("also_notify_at_due", also_notify_at_due),
            ("auto_delete_completed_seconds", auto_delete_completed_seconds),
        )
        if value is not None
    }
    if not changes:
        click.echo("Nothing to change.")
        return
    updated = _service(ctx).update_settings(**changes)
    click.echo(json.dumps(updated.to_dict(), indent=2, ensure_ascii=False))


@main.command("export")
@click.option("--output", "-o", default=None, help="Zip path (default: <data dir>/config.zip)")
@click.pass_context
def export_cmd(ctx, output: str | None):
    """Export settings and timers to a zip."""
    result = export_config(_config(ctx).data_path, output)
    if result.status == TransferStatus.EMPTY:
        click.echo("Nothing to export.")
        return
    if not result.ok:
        _fail(f"export failed: {result.error}")
    click.echo(f"Exported to {result.path}")


@main.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_cmd(ctx, source: str):
    """Import a config zip, settings.json or tasks.json."""
    result = import_config(source, _config(ctx).data_path)
    match result.status:
        case TransferStatus.SUCCESS:
            click.echo(f"Imported {', '.join(result.imported)}")
        case TransferStatus.ZIP_NO_ENTRIES:
            _fail("zip contains neither settings.json nor tasks.json")
        case TransferStatus.INVALID_FILE_TYPE:
            _fail("expected a .zip, settings.json or tasks.json")
        case _:
            _fail(f"import failed: {result.error}")


@main.command()
@click.pass_context
def tick(ctx):
    """Run one notification check now."""
    interval = _service(ctx).tick()
    click.echo(f"Next check in {interval:.1f}s")


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def run(ctx, debug: bool):
    """Watch timers in the foreground and notify when they finish."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )

    from .scheduler import run_scheduler

    click.echo("Starting reminder...")
    click.echo("Press Ctrl+C to stop")
    try:
        run_scheduler(_config(ctx))
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
