"""Crave CLI: log cravings and look back over them."""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

import click
import httpx

from cravelog.config import DB_NAME, DEFAULT_MODEL, RATING_MAX, RATING_MIN, resolve_home
from cravelog.formatting import (
    description_counter, format_compact, format_detail, format_json,
)
from cravelog.errors import CravelogError
from cravelog.logging_config import configure_logging
from cravelog.models import Emotion, FilterCategory
from cravelog.providers import ChatCompletionClient, extract_completion_text
from cravelog.query import parse_filter, parse_sort
from cravelog.speech import FileTranscriptSpeechService
from cravelog.store import CravingStore, StoreRepository
from cravelog.viewmodels import CravingListViewModel, LogCravingScreen, LogCravingViewModel

_COUNTER_COLORS = {"ok": None, "warn": "yellow", "alert": "red"}


def _get_store(home: Path) -> CravingStore:
    """Get an initialized CravingStore for the data directory."""
    db_path = home / DB_NAME
    if not db_path.exists():
        click.echo(f"Error: cravelog not initialized in {home}", err=True)
        click.echo("Run 'crave init' first.", err=True)
        sys.exit(1)
    return CravingStore(db_path)


def _echo_alert(alert) -> None:
    click.echo(f"{alert.title}: {alert.message}", err=True)


@click.group()
@click.option("--home", "-d", default=None, help="Data directory (default: $CRAVELOG_HOME or ~/.cravelog)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, home, verbose):
    """Crave, a craving journal."""
    configure_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["home"] = resolve_home(home)


@cli.command()
@click.pass_context
def init(ctx):
    """Create the craving database."""
    home = ctx.obj["home"]
    db_path = home / DB_NAME

    if db_path.exists():
        click.echo(f"cravelog already initialized in {home}")
        return

    home.mkdir(parents=True, exist_ok=True)
    store = CravingStore(db_path)
    store.initialize()
    store.set_meta("initialized_at", datetime.now(timezone.utc).isoformat())
    store.close()

    click.echo(f"cravelog initialized in {home}")


@cli.command()
@click.option("--description", "-m", default="", help="What are you craving? When did it start? Where are you?")
@click.option("--intensity", "-i", default=None, type=click.FloatRange(RATING_MIN, RATING_MAX),
              help="Craving strength (1-10)")
@click.option("--resistance", "-r", default=None, type=click.FloatRange(RATING_MIN, RATING_MAX),
              help="Confidence to resist (1-10)")
@click.option("--emotion", "-e", "emotions", multiple=True,
              type=click.Choice([e.value for e in Emotion]), help="Emotion tag(s)")
@click.option("--dictate", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Append dictated text from a transcript file")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def log(ctx, description, intensity, resistance, emotions, dictate, fmt):
    """Log a craving."""
    store = _get_store(ctx.obj["home"])
    speech = FileTranscriptSpeechService(dictate) if dictate else None
    vm = LogCravingViewModel(StoreRepository(store), speech=speech)

    vm.craving_description = description
    if intensity is not None:
        vm.craving_strength = intensity
    if resistance is not None:
        vm.confidence_to_resist = resistance
    for emotion in emotions:
        vm.toggle_emotion(Emotion(emotion))

    async def run():
        if speech is not None:
            await vm.request_speech_authorization()
            vm.toggle_speech_recognition()
            if vm.alert_info:
                return None
        screen = LogCravingScreen(vm)
        return await screen.submit()

    try:
        saved = asyncio.run(run())
    finally:
        store.close()

    if saved is None:
        _echo_alert(vm.alert_info)
        sys.exit(1)

    label, level = description_counter(saved.description)
    click.echo(click.style(label, fg=_COUNTER_COLORS[level]), err=True)
    if fmt == "json":
        click.echo(format_json([saved]))
    else:
        click.echo(format_compact([saved]))


@cli.command("list")
@click.argument("search", required=False, default="")
@click.option("--filter", "-F", "category", default=FilterCategory.ALL.value,
              help="all, recent, high-intensity or high-resistance")
@click.option("--sort", "-s", "sort", default=None, help="date, intensity or resistance")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def list_cravings(ctx, search, category, sort, fmt):
    """List cravings, optionally searching and filtering."""
    try:
        selected_filter = parse_filter(category)
        sort_order = parse_sort(sort) if sort else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    store = _get_store(ctx.obj["home"])
    vm = CravingListViewModel(StoreRepository(store))
    vm.search_text = search
    vm.selected_filter = selected_filter
    vm.sort_order = sort_order

    try:
        asyncio.run(vm.fetch_cravings())
    finally:
        store.close()

    if vm.alert_info:
        _echo_alert(vm.alert_info)
        sys.exit(1)

    results = vm.filtered_cravings
    if fmt == "json":
        click.echo(format_json(results))
    else:
        click.echo(format_compact(results, empty_message=vm.empty_message))


@cli.command()
@click.argument("craving_id")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def show(ctx, craving_id, fmt):
    """Show one craving in detail."""
    store = _get_store(ctx.obj["home"])
    try:
        record = store.get(craving_id)
    finally:
        store.close()

    if record is None:
        click.echo(f"Error: Craving not found: {craving_id}", err=True)
        sys.exit(1)

    if fmt == "json":
        click.echo(format_json([record]))
    else:
        click.echo(format_detail(record))


@cli.command()
@click.argument("craving_id")
@click.pass_context
def archive(ctx, craving_id):
    """Archive a craving so it no longer shows in the list."""
    store = _get_store(ctx.obj["home"])
    vm = CravingListViewModel(StoreRepository(store))

    async def run():
        await vm.fetch_cravings()
        record = next((c for c in vm.cravings if c.id == craving_id), None)
        if record is None:
            return False
        await vm.archive_craving(record)
        return True

    try:
        found = asyncio.run(run())
    finally:
        store.close()

    if vm.alert_info:
        _echo_alert(vm.alert_info)
        sys.exit(1)
    if not found:
        click.echo(f"Error: Craving not found: {craving_id}", err=True)
        sys.exit(1)
    click.echo(f"Archived: {craving_id}")


@cli.command()
@click.pass_context
def status(ctx):
    """Show database status."""
    home = ctx.obj["home"]
    store = _get_store(home)
    try:
        total = store.count()
        archived = store.count(include_archived=True) - total
        last = store.last_activity()
        initialized = store.get_meta("initialized_at") or "unknown"
    finally:
        store.close()

    click.echo(f"Data dir:      {home}")
    click.echo(f"Cravings:      {total}")
    click.echo(f"Archived:      {archived}")
    click.echo(f"Last activity: {last or 'none'}")
    click.echo(f"Initialized:   {initialized}")


@cli.command()
@click.argument("prompt")
@click.option("--model", "-m", default=DEFAULT_MODEL, help=f"Model name (default: {DEFAULT_MODEL})")
@click.option("--raw", is_flag=True, help="Print the raw JSON response")
def ask(prompt, model, raw):
    """Send a prompt to the chat completion API."""
    client = ChatCompletionClient()
    try:
        body = client.fetch_completion(prompt, model=model)
        click.echo(body.decode("utf-8") if raw else extract_completion_text(body))
    except (CravelogError, httpx.HTTPError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        client.close()
