"""Command-line interface for EventMapper."""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click

from eventmapper.auth import AuthSession
from eventmapper.categories import CATEGORIES
from eventmapper.config import BACKENDS, ConfigError, load_settings
from eventmapper.errors import Outcome
from eventmapper.geocode import NominatimResolver
from eventmapper.html_calendar import publish, render_calendar_html
from eventmapper.models import Location, parse_date
from eventmapper.renderer import render_day, render_event, render_month, render_stats, render_upcoming
from eventmapper.workspace import Workspace

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format=LOG_FORMAT, level=level)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_day(_ctx, _param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


def _parse_month(_ctx, _param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM, got {value!r}")


def _workspace(ctx: click.Context) -> Workspace:
    return ctx.obj["workspace"]


def _check(outcome: Outcome) -> None:
    """Print a returned failure and exit non-zero."""
    if not outcome.ok:
        click.echo(f"ERROR: {outcome.error}", err=True)
        sys.exit(1)


def _resolver(ctx: click.Context) -> NominatimResolver:
    settings = ctx.obj["settings"]
    return NominatimResolver(url=settings.geocoder_url, user_agent=settings.user_agent)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--data-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for the JSON event store (default: ./data).",
)
@click.option("--owner", default=None, help="Owner id whose events to use (default: $EVENTMAPPER_OWNER).")
@click.option("--backend", type=click.Choice(BACKENDS), default=None, help="Event store backend.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    data_dir: Path | None,
    owner: str | None,
    backend: str | None,
) -> None:
    """EventMapper - dated, located events on a calendar and a map."""
    _setup_logging(verbose)
    try:
        settings = load_settings().override(data_dir=data_dir, owner_id=owner, backend=backend)
        store = settings.make_store()
    except ConfigError as exc:
        raise click.UsageError(str(exc))
    if not settings.owner_id:
        raise click.UsageError("No owner given. Pass --owner or set EVENTMAPPER_OWNER.")

    auth = AuthSession()
    workspace = Workspace(store, auth)
    auth.sign_in(settings.owner_id)
    if workspace.last_error is not None:
        click.echo(f"ERROR: {workspace.last_error}", err=True)
        sys.exit(1)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["workspace"] = workspace
    ctx.call_on_close(store.close)


@cli.command()
@click.option("--title", required=True)
@click.option("--date", "day", required=True, callback=_parse_day, help="YYYY-MM-DD")
@click.option("--time", "time_", required=True, help="24-hour HH:MM")
@click.option("--place", required=True, help="Location name.")
@click.option("--address", required=True)
@click.option("--lat", type=float, default=None)
@click.option("--lng", type=float, default=None)
@click.option("--category", type=click.Choice(CATEGORIES), default="other", show_default=True)
@click.option("--description", default=None)
@click.option("--geocode", is_flag=True, help="Resolve --address into coordinates.")
@click.pass_context
def add(ctx, title, day, time_, place, address, lat, lng, category, description, geocode) -> None:
    """Create an event."""
    if (lat is None) != (lng is None):
        raise click.UsageError("--lat and --lng must be given together.")
    workspace = _workspace(ctx)
    draft = workspace.draft_for(day)
    draft.title = title
    draft.time = time_
    draft.category = category
    draft.description = description
    draft.location = Location(name=place, address=address, lat=draft.location.lat, lng=draft.location.lng)

    if geocode:
        resolver = _resolver(ctx)
        try:
            hit = resolver.resolve(address)
        finally:
            resolver.close()
        if hit is None:
            click.echo(f"Could not resolve {address!r}; keeping default coordinates.", err=True)
        else:
            draft = draft.with_coordinates(hit.lat, hit.lng, name=hit.short_name)
    if lat is not None and lng is not None:
        draft = draft.with_coordinates(lat, lng)

    outcome = workspace.add(draft)
    _check(outcome)
    click.echo(render_event(outcome.event))


@cli.command()
@click.argument("event_id")
@click.option("--title", default=None)
@click.option("--date", "day", default=None, callback=_parse_day, help="YYYY-MM-DD")
@click.option("--time", "time_", default=None, help="24-hour HH:MM")
@click.option("--place", default=None)
@click.option("--address", default=None)
@click.option("--lat", type=float, default=None)
@click.option("--lng", type=float, default=None)
@click.option("--category", type=click.Choice(CATEGORIES), default=None)
@click.option("--description", default=None)
@click.pass_context
def update(ctx, event_id, title, day, time_, place, address, lat, lng, category, description) -> None:
    """Change fields of an existing event."""
    patch = {
        "title": title,
        "date": day.isoformat() if day else None,
        "time": time_,
        "location_name": place,
        "location_address": address,
        "location_lat": lat,
        "location_lng": lng,
        "category": category,
        "description": description,
    }
    patch = {k: v for k, v in patch.items() if v is not None}
    if not patch:
        raise click.UsageError("Nothing to update.")

    outcome = _workspace(ctx).update(event_id, patch)
    _check(outcome)
    click.echo(render_event(outcome.event))


@cli.command()
@click.argument("event_id")
@click.pass_context
def remove(ctx, event_id) -> None:
    """Delete an event."""
    _check(_workspace(ctx).remove(event_id))
    click.echo(f"Removed {event_id}.")


@cli.command()
@click.argument("day", required=False, callback=_parse_day)
@click.pass_context
def day(ctx, day) -> None:
    """List the events of DAY (default: today), by time."""
    workspace = _workspace(ctx)
    workspace.select_date(day or workspace.today())
    click.echo(render_day(workspace.selection.selected_date, workspace.selected_day_events()))


@cli.command()
@click.argument("month", required=False, callback=_parse_month)
@click.option("--select", "event_id", default=None, help="Highlight this event's date.")
@click.pass_context
def month(ctx, month, event_id) -> None:
    """Draw the calendar grid for MONTH (YYYY-MM, default: this month)."""
    workspace = _workspace(ctx)
    if event_id:
        outcome = workspace.select_event_id(event_id)
        _check(outcome)
        workspace.go_to(outcome.event.date)
    if month:
        workspace.go_to(month)
    click.echo(
        render_month(
            workspace.anchor,
            workspace.calendar(),
            selected=workspace.selection.selected_date,
            today=workspace.today(),
        )
    )


@cli.command()
@click.option("--limit", type=int, default=5, show_default=True)
@click.pass_context
def upcoming(ctx, limit) -> None:
    """List events from today on."""
    click.echo(render_upcoming(_workspace(ctx).upcoming(limit=limit)))


@cli.command()
@click.pass_context
def stats(ctx) -> None:
    """Show total, this-month and upcoming counts."""
    click.echo(render_stats(_workspace(ctx).stats()))


@cli.command()
@click.argument("address")
@click.pass_context
def geocode(ctx, address) -> None:
    """Look up ADDRESS and print its coordinates."""
    resolver = _resolver(ctx)
    try:
        hit = resolver.resolve(address)
    finally:
        resolver.close()
    if hit is None:
        click.echo(f"No match for {address!r}.", err=True)
        sys.exit(1)
    click.echo(f"{hit.lat:.6f}, {hit.lng:.6f}  {hit.display_name}")


@cli.command("publish")
@click.option("--month", "month_", default=None, callback=_parse_month, help="YYYY-MM (default: this month).")
@click.option("--select", "event_id", default=None, help="Focus the map on this event.")
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory for calendar.html (default: ./output).",
)
@click.pass_context
def publish_cmd(ctx, month_, event_id, output_dir) -> None:
    """Write calendar.html with the month grid and the event map."""
    workspace = _workspace(ctx)
    if event_id:
        _check(workspace.select_event_id(event_id))
    if month_:
        workspace.go_to(month_)
    selection = workspace.selection.snapshot()
    html = render_calendar_html(
        workspace.anchor,
        workspace.calendar(),
        workspace.index.events,
        workspace.viewport(),
        selected_date=selection.selected_date,
        selected_event=selection.selected_event,
        today=workspace.today(),
    )
    path = publish(html, output_dir=output_dir)
    click.echo(f"Published: {path} ({len(workspace.index)} events)")
