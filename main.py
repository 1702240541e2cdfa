"""CLI entry point for event discovery and match sessions."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from contextlib import closing
from pathlib import Path

from src.core.config import Settings
from src.core.db import init_db, upsert_event, upsert_profile
from src.core.errors import ContractViolation
from src.core.schemas import Candidate, Category, DateWindow, Decision, Item, SortKey
from src.discovery.pipeline import DiscoveryPipeline, export_results_json
from src.matching.queue import CandidateQueue, QueueState
from src.sources.sqlite import SQLiteDataSource

_DECISION_KEYS = {"a": Decision.ACCEPT, "r": Decision.REJECT}


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Event discovery and match queue",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- import-data subcommand ---
    import_parser = subparsers.add_parser(
        "import-data",
        help="Load events and profiles from JSON files into the database",
    )
    import_parser.add_argument("--events", help="JSON array of events")
    import_parser.add_argument("--profiles", help="JSON array of profiles")
    _add_common(import_parser)

    # --- discover subcommand ---
    discover_parser = subparsers.add_parser("discover", help="Search and filter events")
    discover_parser.add_argument("--query", "-q", default="", help="Free-text search")
    discover_parser.add_argument(
        "--category",
        choices=["any"] + [c.value for c in Category],
        help="Only events of this category",
    )
    discover_parser.add_argument("--price-min", help="Lowest price (inclusive)")
    discover_parser.add_argument("--price-max", help="Highest price (inclusive)")
    discover_parser.add_argument(
        "--date-window",
        choices=[w.value for w in DateWindow],
        help="Only events in this window from now",
    )
    discover_parser.add_argument(
        "--sort",
        choices=[s.value for s in SortKey] + ["relevance"],
        help="Result order (relevance keeps text match order)",
    )
    discover_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    _add_common(discover_parser)

    # --- match subcommand ---
    match_parser = subparsers.add_parser("match", help="Run an interactive match session")
    match_parser.add_argument("--user-id", help="Your profile id (overrides settings)")
    _add_common(match_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str) -> Settings:
    """Load settings, falling back to defaults when the file is absent."""
    if not Path(path).exists():
        logging.getLogger(__name__).debug("No config at %s - using defaults", path)
        return Settings()
    return Settings.from_yaml(path)


def _load_json_array(path: str) -> list[dict]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        msg = f"{path}: expected a JSON array"
        raise ValueError(msg)
    return data


def cmd_import_data(args: argparse.Namespace, settings: Settings) -> None:
    """Handle import-data subcommand."""
    with closing(init_db(settings.database.path)) as conn:
        if args.events:
            events = [Item.model_validate(e) for e in _load_json_array(args.events)]
            for item in events:
                upsert_event(conn, item)
            print(f"Imported {len(events)} events from {args.events}")
        if args.profiles:
            profiles = [Candidate.model_validate(p) for p in _load_json_array(args.profiles)]
            for candidate in profiles:
                upsert_profile(conn, candidate)
            print(f"Imported {len(profiles)} profiles from {args.profiles}")


async def cmd_discover(args: argparse.Namespace, settings: Settings) -> None:
    """Handle discover subcommand."""
    with closing(init_db(settings.database.path)) as conn:
        items = await SQLiteDataSource(conn).fetch_collection()

    state = settings.discovery.query_state(
        query=args.query,
        category=args.category,
        price_min=args.price_min,
        price_max=args.price_max,
        date_window=args.date_window,
        sort=args.sort,
    )
    results = DiscoveryPipeline.from_settings(settings).run(items, state)

    if args.export == "json":
        print(export_results_json(results))
        return

    print(f"{len(results)} of {len(items)} events")
    for item in results:
        print(f"  {item.date:%Y-%m-%d %H:%M}  {item.price:>9.2f}  "
              f"[{item.category.value}] {item.title} @ {item.venue_name}")


async def cmd_match(
    args: argparse.Namespace,
    settings: Settings,
    prompt: Callable[[str], str] = input,
) -> None:
    """Handle match subcommand."""
    user_id = args.user_id or settings.matching.user_id
    if not user_id:
        msg = "a user id is required (--user-id or matching.user_id)"
        raise ValueError(msg)

    with closing(init_db(settings.database.path)) as conn:
        source = SQLiteDataSource(conn)
        queue = CandidateQueue(source, self_id=user_id)
        await queue.start(carry_over=source.decided_ids(user_id))

        while queue.state is QueueState.LOADED and queue.current is not None:
            c = queue.current
            print(f"\n{c.display_name}" + (f" (@{c.username})" if c.username else ""))
            if c.bio:
                print(f"  {c.bio}")
            if c.interests:
                print(f"  Interests: {', '.join(sorted(c.interests))}")
            answer = prompt("[a]ccept / [r]eject / [q]uit: ").strip().lower()
            if answer == "q":
                break
            if answer not in _DECISION_KEYS:
                print("Please answer a, r or q.")
                continue
            await queue.decide(_DECISION_KEYS[answer])

    if queue.is_exhausted:
        print("That's everyone for now. Check back later!")
    print(f"Decisions this session: {queue.decided_count}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "import-data":
            cmd_import_data(args, settings)
        elif args.command == "discover":
            asyncio.run(cmd_discover(args, settings))
        else:
            asyncio.run(cmd_match(args, settings))
    except (FileNotFoundError, ValueError, ContractViolation) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
