"""
Command line front-end for the event search client.

    nearnow search --city Lagos --category concerts
    nearnow popular --lat 40.71 --lon -74.00
    nearnow show <event_id>
    nearnow save <event_id>
    nearnow saved
    nearnow check-config
"""
import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Settings, validate_settings
from .errors import EventSearchError, NotFoundError
from .event_ids import describe_invalid_id, is_valid_provider_id
from .models import Event, EventFilters, PriceBand
from .saved import SavedEventStore
from .search import EventSearchClient

console = Console()


def format_date(value: str) -> str:
    """'2025-01-15T19:00:00Z' -> 'Jan 15, 2025'"""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return value or ""
    return parsed.strftime("%b %d, %Y")


def format_time(value: str) -> str:
    """'2025-01-15T19:00:00Z' -> '7:00 PM'"""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return ""
    return parsed.strftime("%I:%M %p").lstrip("0")


def _events_table(title: str, events: list[Event], saved_ids: set[str]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Event")
    table.add_column("When")
    table.add_column("Where")
    table.add_column("Category")
    table.add_column("Saved", justify="center")

    for event in events:
        where = ""
        if event.venue:
            where = event.venue.name
            if event.venue.city:
                where = f"{where}, {event.venue.city}"
        when = f"{format_date(event.start_date)} {format_time(event.start_date)}".strip()
        table.add_row(
            event.id,
            escape(event.name),
            when,
            escape(where),
            event.category or "",
            "*" if event.id in saved_ids else "",
        )
    return table


def _print_events(title: str, events: list[Event], store: SavedEventStore, as_json: bool = False) -> None:
    if as_json:
        console.print_json(json.dumps([e.to_outbound() for e in events]))
        return
    if not events:
        console.print("No events found. Try adjusting your filters or search terms.")
        return
    console.print(_events_table(title, events, set(store.ids())))


def _print_event_detail(event: Event, saved: bool) -> None:
    console.print(f"[bold]{escape(event.name)}[/bold]" + ("  [green](saved)[/green]" if saved else ""))
    console.print(f"ID: {event.id}")
    console.print(f"Starts: {format_date(event.start_date)} {format_time(event.start_date)} ({event.timezone})")
    console.print(f"Ends: {format_date(event.end_date)} {format_time(event.end_date)}")
    if event.category:
        console.print(f"Category: {event.category}")
    if event.venue:
        console.print(f"Venue: {event.venue.name}")
        console.print(f"Address: {event.venue.address}")
    console.print("Online event" if event.is_online else "In person")
    console.print(f"Tickets / info: {event.url}")
    if event.description:
        console.print()
        console.print(escape(event.description))


def _filters_from_args(args: argparse.Namespace) -> EventFilters:
    if (args.lat is None) != (args.lon is None):
        raise ValueError("--lat and --lon must be given together")

    price = None
    if args.min_price is not None or args.max_price is not None:
        price = PriceBand(min=args.min_price, max=args.max_price)

    return EventFilters(
        query=args.query or None,
        city=(args.city or "").strip() or None,
        latitude=args.lat,
        longitude=args.lon,
        radius=args.radius,
        start_date=args.start,
        end_date=args.end,
        category=args.category or None,
        price=price,
    )


async def _cmd_search(args, client: EventSearchClient, store: SavedEventStore) -> int:
    filters = _filters_from_args(args)
    events = await client.search_events(filters)
    _print_events(f"Events ({len(events)})", events, store, as_json=args.json)
    return 0


async def _cmd_popular(args, client: EventSearchClient, store: SavedEventStore) -> int:
    if (args.lat is None) != (args.lon is None):
        raise ValueError("--lat and --lon must be given together")
    events = await client.get_popular_events(args.city, args.lat, args.lon)
    _print_events("Popular events", events, store, as_json=args.json)
    return 0


async def _cmd_show(args, client: EventSearchClient, store: SavedEventStore) -> int:
    try:
        event = await client.get_event_by_id(args.event_id)
    except NotFoundError:
        event_id = args.event_id.strip()
        if not is_valid_provider_id(event_id):
            console.print(f"[yellow]{describe_invalid_id(event_id)}[/yellow]")
        raise
    if args.json:
        console.print_json(json.dumps(event.to_outbound()))
    else:
        _print_event_detail(event, store.is_saved(event.id))
    return 0


async def _cmd_saved(args, client: EventSearchClient, store: SavedEventStore) -> int:
    ids = store.ids()
    if not ids:
        console.print("No saved events yet. Use 'nearnow save <event_id>' to add one.")
        return 0

    for event_id in ids:
        if not is_valid_provider_id(event_id):
            console.print(f"[yellow]{describe_invalid_id(event_id)}[/yellow]")

    events = await client.get_events_by_ids(ids)
    missing = len(ids) - len(events)
    _print_events(f"Saved events ({len(events)})", events, store, as_json=args.json)
    if missing and not args.json:
        console.print(f"{missing} saved event(s) could not be loaded.")
    return 0


def _cmd_save(args, store: SavedEventStore) -> int:
    if store.save(args.event_id):
        console.print(f"Saved: {args.event_id.strip()} (saved: {len(store)})")
    else:
        console.print(f"Already saved: {args.event_id.strip()}")
    return 0


def _cmd_unsave(args, store: SavedEventStore) -> int:
    if store.remove(args.event_id):
        console.print(f"Removed: {args.event_id.strip()} (saved: {len(store)})")
    else:
        console.print(f"Not saved: {args.event_id.strip()}")
    return 0


def _cmd_clear_saved(args, store: SavedEventStore) -> int:
    store.clear()
    console.print("Cleared all saved events.")
    return 0


def _cmd_check_config(args, settings: Settings) -> int:
    status = validate_settings(settings)
    if status.ok:
        console.print(f"Configuration OK. Provider: {settings.api_base}")
        return 0
    for message in status.messages:
        console.print(f"[red]{message}[/red]")
    return 1


def _add_location_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--city", help="City or country name")
    parser.add_argument("--lat", type=float, help="Latitude")
    parser.add_argument("--lon", type=float, help="Longitude")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nearnow", description="Find events happening near you.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search events")
    p_search.add_argument("query", nargs="?", help="Keywords")
    _add_location_args(p_search)
    p_search.add_argument("--radius", type=float, help="Search radius in miles")
    p_search.add_argument("--start", help="Start date (ISO 8601)")
    p_search.add_argument("--end", help="End date (ISO 8601)")
    p_search.add_argument("--category", help="e.g. concerts, sports, community")
    p_search.add_argument("--min-price", type=float)
    p_search.add_argument("--max-price", type=float)
    p_search.add_argument("--json", action="store_true", help="Print events as JSON")

    p_popular = sub.add_parser("popular", help="Popular events nearby")
    _add_location_args(p_popular)
    p_popular.add_argument("--json", action="store_true")

    p_show = sub.add_parser("show", help="Show one event")
    p_show.add_argument("event_id")
    p_show.add_argument("--json", action="store_true")

    p_save = sub.add_parser("save", help="Save an event id")
    p_save.add_argument("event_id")

    p_unsave = sub.add_parser("unsave", help="Remove a saved event id")
    p_unsave.add_argument("event_id")

    p_saved = sub.add_parser("saved", help="List saved events")
    p_saved.add_argument("--json", action="store_true")

    sub.add_parser("clear-saved", help="Remove all saved events")
    sub.add_parser("check-config", help="Validate provider configuration")

    return parser


async def _run(args: argparse.Namespace, settings: Settings, store: SavedEventStore) -> int:
    async_commands = {
        "search": _cmd_search,
        "popular": _cmd_popular,
        "show": _cmd_show,
        "saved": _cmd_saved,
    }
    client = EventSearchClient(settings)
    return await async_commands[args.command](args, client, store)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
        level = logging.INFO if args.verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
        logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

        store = SavedEventStore(settings.saved_events_path)

        if args.command == "save":
            return _cmd_save(args, store)
        if args.command == "unsave":
            return _cmd_unsave(args, store)
        if args.command == "clear-saved":
            return _cmd_clear_saved(args, store)
        if args.command == "check-config":
            return _cmd_check_config(args, settings)
        return asyncio.run(_run(args, settings, store))
    except EventSearchError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        return 1
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1
