#!/usr/bin/env python3
"""
CityReport - Command Line
Search addresses and submit reports or events against a backend.

    python -m cityreport search "10 rue de la Paix"
    python -m cityreport reverse 48.8698 2.3311
    python -m cityreport report --title ... --description ... --category danger --address "..."
    python -m cityreport event --title ... --description ... --date 2025-03-03T18:00 --here 48.86 2.33 --photo a.jpg
"""

import argparse
import asyncio
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from cityreport.core.config import settings
from cityreport.core.exceptions import CityReportError
from cityreport.core.geo_utils import Coordinate, format_coordinate
from cityreport.core.locale import FRENCH
from cityreport.core.logging import setup_logging
from cityreport.geocoding import AddressResolver, GeocodeClient, LocationSelectionState
from cityreport.submission import (
    SubmissionKind,
    SubmissionPipeline,
    SubmissionWizard,
    TokenIdentityProvider,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cityreport", description="Citizen report and event client")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search addresses")
    search.add_argument("query")

    reverse = sub.add_parser("reverse", help="Address at a coordinate")
    reverse.add_argument("latitude", type=float)
    reverse.add_argument("longitude", type=float)

    for name in ("report", "event"):
        cmd = sub.add_parser(name, help=f"Submit a new {name}")
        cmd.add_argument("--title", required=True)
        cmd.add_argument("--description", required=True)
        where = cmd.add_mutually_exclusive_group(required=True)
        where.add_argument("--address", help="Address text; the best suggestion is used")
        where.add_argument("--here", nargs=2, type=float, metavar=("LAT", "LNG"),
                           help="Current position")
        cmd.add_argument("--photo", action="append", default=[], help="Photo file (repeatable)")
        if name == "report":
            cmd.add_argument("--category", required=True)
        else:
            cmd.add_argument("--date", required=True, type=datetime.fromisoformat,
                             help="ISO date, e.g. 2025-03-03T18:00")

    return parser


def _print_phase(phase) -> None:
    if phase is not None:
        print(f"  {phase.label}...")


async def _search(resolver: AddressResolver, query: str) -> int:
    suggestions = await resolver.search(query)
    if resolver.error:
        print(f"ERROR: {resolver.error}")
        return 1
    for i, suggestion in enumerate(suggestions, 1):
        print(f"{i:2d}. {suggestion.formatted}  ({format_coordinate(suggestion.coordinate)})")
    return 0


async def _reverse(resolver: AddressResolver, latitude: float, longitude: float) -> int:
    try:
        suggestion = await resolver.reverse_geocode(Coordinate(latitude, longitude))
    except CityReportError as e:
        print(f"ERROR: {e.message}")
        return 1
    print(suggestion.formatted)
    return 0


async def _submit(resolver: AddressResolver, args: argparse.Namespace) -> int:
    kind = SubmissionKind.REPORT if args.command == "report" else SubmissionKind.EVENT
    pipeline = SubmissionPipeline(identity=TokenIdentityProvider())
    wizard = SubmissionWizard(kind, LocationSelectionState(resolver), pipeline)

    try:
        if kind == SubmissionKind.REPORT:
            wizard.set_category(args.category)
        else:
            wizard.set_date(args.date)
        wizard.set_title(args.title)
        wizard.set_description(args.description)
        for path in args.photo:
            wizard.add_photo(path)

        if args.here:
            wizard.use_current_location(Coordinate(*args.here))
        else:
            suggestions = await resolver.search(args.address)
            if not suggestions:
                print(f"ERROR: {resolver.error or 'Adresse introuvable'}")
                return 1
            wizard.select_suggestion(suggestions[0])

        snapshot = wizard.snapshot()
        pipeline.progress.phase.subscribe(_print_phase)
        print(f"Envoi : {snapshot.summary(FRENCH)}")
        result = await wizard.submit()
    except CityReportError as e:
        print(f"ERROR: {e.message}")
        return 1
    finally:
        await pipeline.aclose()

    if not result.success:
        print(f"ERROR: {result.error}")
        return 1
    print("Envoyé avec succès.")
    return 0


async def run(args: argparse.Namespace) -> int:
    async with GeocodeClient() as client:
        resolver = AddressResolver(client, debounce_seconds=0)
        if args.command == "search":
            return await _search(resolver, args.query)
        if args.command == "reverse":
            return await _reverse(resolver, args.latitude, args.longitude)
        return await _submit(resolver, args)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    setup_logging()
    args = build_parser().parse_args(argv)

    if not settings.geocoding_api_key:
        print("ERROR: GEOCODING_API_KEY not found in environment or .env file")
        return 1

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
