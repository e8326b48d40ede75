"""Flask CLI commands (run from system cron as an alternative to the HTTP trigger)."""

import json
from datetime import datetime

import click
from flask import Flask

from rollcall.services.scheduler import open_due_events


def register_commands(app: Flask) -> None:

    @app.cli.command('open-attendance-events')
    @click.option('--now', 'now_text', default=None,
                  help='Evaluate as if it were this ISO-8601 instant (naive means UTC).')
    @click.option('--dry-run', is_flag=True, help="Don't send emails.")
    def open_attendance_events(now_text, dry_run):
        """Open attendance events for schedules that are due."""
        now = None
        if now_text:
            try:
                now = datetime.fromisoformat(now_text)
            except ValueError:
                raise click.BadParameter(f'Not an ISO-8601 datetime: {now_text}', param_hint='--now')

        summary = open_due_events(now=now, dry_run=True if dry_run else None)
        click.echo(json.dumps(summary, indent=2, default=str))
