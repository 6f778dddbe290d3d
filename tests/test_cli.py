"""
Tests for the CLI interface.
"""
import json
import os
import random
from datetime import datetime
from unittest.mock import patch

import pytest
import yaml
from rich.console import Console
from typer.testing import CliRunner

from flightdeck.airports.directory import InMemoryAirportDirectory
from flightdeck.cli.main import EXIT_CODE_FAIL, EXIT_CODE_PASS, app
from flightdeck.core.dispatcher import RoutingDispatcher
from flightdeck.core.ledger import UsageLedger
from flightdeck.session.coordinator import SessionCoordinator
from flightdeck.storage.models import SessionResult
from flightdeck.storage.repository import SessionResultRepository
from flightdeck.traffic.simulator import TrafficSimulator

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console():
    """Render tables at a fixed width so cells are never cropped."""
    with patch('flightdeck.cli.main.console', Console(width=200)):
        yield


class MemoryResultStore:
    """Collects session results in a list."""

    def __init__(self):
        self.results = []

    def record_result(self, result):
        self.results.append(result)


@pytest.fixture
def config_file(tmp_path):
    """A config file pointing the results database into a temp dir."""
    path = tmp_path / "flightdeck.yaml"
    path.write_text(yaml.dump({"runtime": {"database": str(tmp_path / "results.db")}}))
    return str(path)


@pytest.fixture
def mock_capabilities(all_capabilities):
    """Bind scripted capabilities instead of real provider clients."""
    with patch('flightdeck.cli.main.build_capabilities') as mock:
        mock.return_value = [c.bind() for c in all_capabilities.values()]
        yield mock


class TestCLI:
    """Test CLI commands."""

    def test_no_command(self):
        """Test the bare command prints a hint."""
        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_CODE_PASS
        assert "Use --help" in result.output

    def test_bad_config(self, tmp_path):
        """Test an invalid config file fails before any command runs."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"surprise": 1}))
        result = runner.invoke(app, ["--config", str(path), "capabilities"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Configuration error" in result.output

    def test_capabilities(self, mock_capabilities):
        """Test the catalog table."""
        result = runner.invoke(app, ["capabilities"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "claude-sonnet" in result.output
        assert "gemini-flash" in result.output
        assert "claude-3-5-sonnet-latest" in result.output

    def test_route(self, mock_capabilities):
        """Test the resolved chain is printed in order."""
        result = runner.invoke(app, ["route", "--category", "generate-reply", "--tier", "basic"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "1. claude-haiku" in result.output
        assert "2. gemini-flash" in result.output

    def test_route_with_preference(self, mock_capabilities):
        """Test a preferred capability leads the chain."""
        result = runner.invoke(app, ["route", "-k", "simple-chat", "-t", "free", "-p", "claude-sonnet"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "1. claude-sonnet" in result.output

    def test_route_invalid_options(self, mock_capabilities):
        """Test unknown categories and tiers fail."""
        result = runner.invoke(app, ["route", "--category", "poetry"])
        assert result.exit_code == EXIT_CODE_FAIL
        result = runner.invoke(app, ["route", "--tier", "gold"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_route_nothing_available(self, all_capabilities):
        """Test routing fails cleanly without credentials."""
        with patch('flightdeck.cli.main.build_capabilities') as mock:
            mock.return_value = [c.bind(available=False) for c in all_capabilities.values()]
            result = runner.invoke(app, ["route"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "No available capability" in result.output

    def test_traffic(self):
        """Test the offline simulator prints each step."""
        result = runner.invoke(app, ["traffic", "--airport", "kpao", "--ticks", "2", "--seed", "4"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "KPAO" in result.output
        assert "Step 0" in result.output
        assert "Step 2" in result.output

    def test_traffic_invalid_options(self):
        """Test unknown airports and states fail."""
        result = runner.invoke(app, ["traffic", "--airport", "ZZZZ"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Unknown airport" in result.output
        result = runner.invoke(app, ["traffic", "--observer", "cruising"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_init_and_history(self, config_file, tmp_path):
        """Test init creates the database and history lists results."""
        result = runner.invoke(app, ["--config", config_file, "init"])
        assert result.exit_code == EXIT_CODE_PASS
        assert os.path.exists(tmp_path / "results.db")

        result = runner.invoke(app, ["--config", config_file, "history"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "No practice sessions" in result.output

        SessionResultRepository(str(tmp_path / "results.db")).record_result(SessionResult(
            session_id="s1",
            scenario_title="Takeoff Clearance",
            airport="KSFO",
            started_at=datetime(2024, 5, 1, 9, 0),
            ended_at=datetime(2024, 5, 1, 9, 20),
            score=88.0,
            accuracy=100.0,
        ))
        result = runner.invoke(app, ["--config", config_file, "history"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "Takeoff Clearance" in result.output
        assert "KSFO" in result.output


class TestPractice:
    """Test the interactive practice loop."""

    def _coordinator(self, capabilities):
        self.store = MemoryResultStore()
        self.results = self.store.results
        return SessionCoordinator(
            dispatcher=RoutingDispatcher(capabilities, UsageLedger()),
            simulator=TrafficSimulator(rng=random.Random(5)),
            airports=InMemoryAirportDirectory(),
            results=self.store,
        )

    def test_list_scenarios(self):
        """Test the sample scenarios are listed."""
        result = runner.invoke(app, ["practice", "--list"])
        assert result.exit_code == EXIT_CODE_PASS
        assert "Ground Clearance - VFR" in result.output

    def test_unknown_scenario(self):
        """Test out-of-range scenario numbers fail."""
        result = runner.invoke(app, ["practice", "--scenario", "99"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_session_without_evaluation(self, scripted):
        """Test replies are printed and the session is recorded on /end."""
        haiku = scripted("claude-haiku", ["Skyhawk 123AB, taxi to runway 31 via Zulu"])
        coordinator = self._coordinator([haiku.bind()])

        with patch('flightdeck.cli.main.build_runtime', return_value=coordinator):
            result = runner.invoke(
                app, ["practice", "--no-evaluate"], input="Palo Alto ground, Skyhawk 123AB\n/end\n"
            )

        assert result.exit_code == EXIT_CODE_PASS
        assert "taxi to runway 31" in result.output
        assert "Session complete" in result.output
        assert "claude-haiku" in result.output
        assert len(self.results) == 1
        assert self.results[0].score == 0.0

    def test_session_with_evaluation(self, scripted):
        """Test evaluations drive the recorded score and accuracy."""
        haiku = scripted("claude-haiku", ["Roger"])
        sonnet = scripted("claude-sonnet", [
            json.dumps({"score": 90, "feedback": "Clear", "suggestions": []}),
            json.dumps({"score": 50, "feedback": "Missing position", "suggestions": ["Add position"]}),
        ])
        coordinator = self._coordinator([haiku.bind(), sonnet.bind()])

        with patch('flightdeck.cli.main.build_runtime', return_value=coordinator):
            result = runner.invoke(app, ["practice"], input="first call\nsecond call\n/end\n")

        assert result.exit_code == EXIT_CODE_PASS
        assert "Add position" in result.output
        assert (self.results[0].score, self.results[0].accuracy) == (70.0, 50.0)

    def test_dispatch_failure_shows_generic_message(self, scripted):
        """Test exhaustion prints the generic failure and keeps the session going."""
        haiku = scripted("claude-haiku", [ConnectionError("down")])
        coordinator = self._coordinator([haiku.bind()])

        with patch('flightdeck.cli.main.build_runtime', return_value=coordinator):
            result = runner.invoke(app, ["practice", "--no-evaluate"], input="hello\n/end\n")

        assert result.exit_code == EXIT_CODE_PASS
        assert "Unable to reach instructor/controller" in result.output
        assert "No capability usage recorded" in result.output
        assert len(self.results) == 1
