#!/usr/bin/env python3
"""CLI tool for managing stations, lines and sections.

Runs the same services as the HTTP API against the configured database,
which is handy for seeding a local environment.

Usage:
    # Register stations
    uv run python -m subway.cli create-station "Gangnam"

    # Create a line with its first section
    uv run python -m subway.cli create-line "Line 2" "bg-green-600" <up-id> <down-id> 10

    # Splice or extend a line
    uv run python -m subway.cli add-section <line-id> <up-id> <down-id> 4

    # Show a line's stations from head to tail
    uv run python -m subway.cli show-line <line-id>
"""

import argparse
import asyncio
import sys
import uuid
from collections.abc import Sequence

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.database import get_session_factory
from subway.domain.errors import SubwayError
from subway.schemas.subway import CreateLineRequest, CreateStationRequest, SectionRequest
from subway.services.line_service import LineDetail, LineService
from subway.services.station_service import StationService


def _print_line(line: LineDetail) -> None:
    print(f"   Line ID:  {line.id}")
    print(f"   Name:     {line.name}")
    print(f"   Color:    {line.color}")
    print(f"   Stations: {' -> '.join(station.name for station in line.stations)}")


async def cmd_create_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Register a new station.

    Args:
        args: Parsed command-line arguments
        session: Database session

    Returns:
        Exit code (0 for success, 1 for error)
    """
    station = await StationService(session).create_station(CreateStationRequest(name=args.name))
    print("✅ Created station successfully!")
    print(f"   Station ID: {station.id}")
    print(f"   Name:       {station.name}")
    return 0


async def cmd_list_stations(args: argparse.Namespace, session: AsyncSession) -> int:
    """List all stations."""
    stations = await StationService(session).list_stations()

    if not stations:
        print("No stations found")
        return 0

    print(f"Found {len(stations)} station(s):\n")
    print(f"{'Station ID':<38} Name")
    print("-" * 70)
    for station in stations:
        print(f"{station.id!s:<38} {station.name}")
    return 0


async def cmd_create_line(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Create a line with its first section.

    Args:
        args: Parsed command-line arguments
        session: Database session

    Returns:
        Exit code (0 for success, 1 for error)
    """
    request = CreateLineRequest(
        name=args.name,
        color=args.color,
        up_station_id=args.up_station_id,
        down_station_id=args.down_station_id,
        distance=args.distance,
    )
    line = await LineService(session).create_line(request)
    print("✅ Created line successfully!")
    _print_line(line)
    return 0


async def cmd_show_line(args: argparse.Namespace, session: AsyncSession) -> int:
    """Show a line with its stations in path order."""
    _print_line(await LineService(session).get_line(args.line_id))
    return 0


async def cmd_add_section(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Add a section to a line.

    Args:
        args: Parsed command-line arguments
        session: Database session

    Returns:
        Exit code (0 for success, 1 for error)
    """
    request = SectionRequest(
        up_station_id=args.up_station_id,
        down_station_id=args.down_station_id,
        distance=args.distance,
    )
    line = await LineService(session).add_section(args.line_id, request)
    print("✅ Added section successfully!")
    _print_line(line)
    return 0


async def cmd_remove_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """Remove a station from a line."""
    service = LineService(session)
    await service.remove_station(args.line_id, args.station_id)
    print("✅ Removed station from line successfully!")
    _print_line(await service.get_line(args.line_id))
    return 0


COMMAND_HANDLERS = {
    "create-station": cmd_create_station,
    "list-stations": cmd_list_stations,
    "create-line": cmd_create_line,
    "show-line": cmd_show_line,
    "add-section": cmd_add_section,
    "remove-station": cmd_remove_station,
}


async def run_command(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Dispatch to the command handler, turning domain errors into exit code 1.

    Args:
        args: Parsed command-line arguments
        session: Database session

    Returns:
        Exit code (0 for success, 1 for error)
    """
    handler = COMMAND_HANDLERS[args.command]
    try:
        return await handler(args, session)
    except SubwayError as e:
        print(f"❌ Error ({e.code}): {e.message}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        description="Subway line management CLI tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run python -m subway.cli create-station "Gangnam"
  uv run python -m subway.cli list-stations
  uv run python -m subway.cli create-line "Line 2" "bg-green-600" <up-id> <down-id> 10
  uv run python -m subway.cli add-section <line-id> <up-id> <down-id> 4
  uv run python -m subway.cli remove-station <line-id> <station-id>
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    create_station_parser = subparsers.add_parser("create-station", help="Register a new station")
    create_station_parser.add_argument("name", type=str, help="Unique station name")

    subparsers.add_parser("list-stations", help="List all stations")

    create_line_parser = subparsers.add_parser(
        "create-line",
        help="Create a line with its first section",
        description="A line always has at least one section, so it is created together with the first one.",
    )
    create_line_parser.add_argument("name", type=str, help="Unique line name")
    create_line_parser.add_argument("color", type=str, help="Unique line color")
    create_line_parser.add_argument("up_station_id", type=uuid.UUID, help="First station UUID")
    create_line_parser.add_argument("down_station_id", type=uuid.UUID, help="Second station UUID")
    create_line_parser.add_argument("distance", type=int, help="Distance between the two stations")

    show_line_parser = subparsers.add_parser("show-line", help="Show a line's stations in order")
    show_line_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")

    add_section_parser = subparsers.add_parser(
        "add-section",
        help="Add a section to a line",
        description="Extend the line at either end, or split an existing section with a shorter one.",
    )
    add_section_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")
    add_section_parser.add_argument("up_station_id", type=uuid.UUID, help="Up station UUID")
    add_section_parser.add_argument("down_station_id", type=uuid.UUID, help="Down station UUID")
    add_section_parser.add_argument("distance", type=int, help="Section distance")

    remove_station_parser = subparsers.add_parser(
        "remove-station",
        help="Remove a station from a line",
        description="Interior stations merge their two sections; the last section of a line cannot be removed.",
    )
    remove_station_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")
    remove_station_parser.add_argument("station_id", type=uuid.UUID, help="Station UUID")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI tool.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    async def run_with_session() -> int:
        async with get_session_factory()() as session:
            return await run_command(args, session)

    return asyncio.run(run_with_session())


if __name__ == "__main__":
    sys.exit(main())
