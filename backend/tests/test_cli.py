"""Tests for the subway CLI tool."""

import argparse
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from subway.cli import build_parser, main, run_command
from subway.models.subway import Station

from tests.helpers.subway_network import seed_line, seed_stations


class TestBuildParser:
    """Tests for argument parsing."""

    def test_parses_uuid_arguments(self) -> None:
        line_id = uuid.uuid4()
        up_id = uuid.uuid4()
        down_id = uuid.uuid4()

        args = build_parser().parse_args(["add-section", str(line_id), str(up_id), str(down_id), "4"])

        assert args.command == "add-section"
        assert args.line_id == line_id
        assert args.up_station_id == up_id
        assert args.down_station_id == down_id
        assert args.distance == 4

    def test_rejects_malformed_uuid(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["show-line", "not-a-uuid"])

    def test_main_without_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestRunCommand:
    """Tests for command handlers run against a database session."""

    @pytest.fixture
    async def stations(self, db_session: AsyncSession) -> dict[str, Station]:
        seeded = await seed_stations(db_session, "A", "B", "C")
        return {station.name: station for station in seeded}

    async def test_create_station(self, db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(command="create-station", name="Gangnam")

        assert await run_command(args, db_session) == 0

        output = capsys.readouterr().out
        assert "Created station successfully" in output
        assert "Gangnam" in output

    async def test_list_stations_empty(self, db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
        assert await run_command(argparse.Namespace(command="list-stations"), db_session) == 0

        assert "No stations found" in capsys.readouterr().out

    async def test_list_stations(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert await run_command(argparse.Namespace(command="list-stations"), db_session) == 0

        output = capsys.readouterr().out
        assert "Found 3 station(s)" in output
        assert str(stations["A"].id) in output

    async def test_create_line(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        args = argparse.Namespace(
            command="create-line",
            name="Line 2",
            color="bg-green-600",
            up_station_id=stations["A"].id,
            down_station_id=stations["B"].id,
            distance=10,
        )

        assert await run_command(args, db_session) == 0

        output = capsys.readouterr().out
        assert "Created line successfully" in output
        assert "A -> B" in output

    async def test_add_section_splits_line(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        line = await seed_line(db_session, [stations["A"], stations["B"]], [10])
        args = argparse.Namespace(
            command="add-section",
            line_id=line.id,
            up_station_id=stations["A"].id,
            down_station_id=stations["C"].id,
            distance=4,
        )

        assert await run_command(args, db_session) == 0

        assert "A -> C -> B" in capsys.readouterr().out

    async def test_remove_station(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        line = await seed_line(db_session, [stations["A"], stations["B"], stations["C"]], [4, 6])
        args = argparse.Namespace(command="remove-station", line_id=line.id, station_id=stations["B"].id)

        assert await run_command(args, db_session) == 0

        output = capsys.readouterr().out
        assert "Removed station from line successfully" in output
        assert "A -> C" in output

    async def test_show_line(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        line = await seed_line(db_session, [stations["A"], stations["B"]], [10])

        assert await run_command(argparse.Namespace(command="show-line", line_id=line.id), db_session) == 0

        output = capsys.readouterr().out
        assert str(line.id) in output
        assert "A -> B" in output

    async def test_domain_error_returns_one(self, db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(command="show-line", line_id=uuid.uuid4())

        assert await run_command(args, db_session) == 1

        assert "Error (not_found)" in capsys.readouterr().err

    async def test_last_section_removal_returns_one(
        self,
        db_session: AsyncSession,
        stations: dict[str, Station],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        line = await seed_line(db_session, [stations["A"], stations["B"]], [10])
        args = argparse.Namespace(command="remove-station", line_id=line.id, station_id=stations["A"].id)

        assert await run_command(args, db_session) == 1

        assert "Error (minimum_section_count)" in capsys.readouterr().err

    async def test_invalid_input_returns_one(self, db_session: AsyncSession, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(command="create-station", name="")

        assert await run_command(args, db_session) == 1

        assert "Invalid input" in capsys.readouterr().err
