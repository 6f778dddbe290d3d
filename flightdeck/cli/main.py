"""
CLI interface for FlightDeck.

Provides command-line access to routing, the traffic simulator and
interactive practice sessions.
"""

import asyncio
import random
import sys
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from flightdeck.airports.directory import InMemoryAirportDirectory
from flightdeck.config.loader import RuntimeConfig, default_config, load_runtime_config
from flightdeck.core.dispatcher import RoutingDispatcher
from flightdeck.core.errors import (
    CapabilityUnavailable,
    DispatchExhausted,
    InvalidSessionReference,
    UnknownAirport,
)
from flightdeck.core.ledger import UsageLedger
from flightdeck.core.pricing import CAPABILITY_CATALOG
from flightdeck.core.routing import UserTier, WorkCategory
from flightdeck.logging import configure_logging
from flightdeck.runtime import build_runtime
from flightdeck.sdk.registry import build_capabilities
from flightdeck.session.coordinator import SessionCoordinator
from flightdeck.session.prompts import CommunicationEvaluation
from flightdeck.session.scenarios import SAMPLE_SCENARIOS, Difficulty
from flightdeck.storage.repository import SessionResultRepository, initialize_schema
from flightdeck.traffic.models import OperationalState
from flightdeck.traffic.simulator import TrafficSimulator

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

END_COMMAND = "/end"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML runtime configuration file"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)"
    ),
    json_logs: bool = typer.Option(
        True,
        "--json-logs/--plain-logs",
        help="Emit logs as JSON lines or plain text"
    ),
):
    """FlightDeck radio-communication practice CLI."""
    configure_logging(level=log_level, json_output=json_logs, force=True)

    try:
        ctx.obj = load_runtime_config(config_path) if config_path else default_config()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    if ctx.invoked_subcommand is None:
        console.print("FlightDeck - Use --help to see available commands")


def _config(ctx: typer.Context) -> RuntimeConfig:
    return ctx.obj or default_config()


def _parse_tier(value: Optional[str], config: RuntimeConfig) -> UserTier:
    if value is None:
        return config.settings.tier
    try:
        return UserTier(value.lower())
    except ValueError:
        console.print(f"[red]Unknown tier:[/] {value} (expected one of: {', '.join(t.value for t in UserTier)})")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def capabilities(ctx: typer.Context):
    """List the capability catalog and which entries have credentials."""
    bound = {c.name: c for c in build_capabilities(_config(ctx))}

    table = Table(title="Capabilities")
    table.add_column("Name", no_wrap=True)
    table.add_column("Provider")
    table.add_column("Model", no_wrap=True)
    table.add_column("Input $/1M", justify="right")
    table.add_column("Output $/1M", justify="right")
    table.add_column("Available")
    for descriptor in CAPABILITY_CATALOG.entries.values():
        available = bound[descriptor.name].available
        table.add_row(
            descriptor.name,
            descriptor.provider,
            descriptor.model,
            f"{descriptor.input_cost_per_million:.3f}",
            f"{descriptor.output_cost_per_million:.3f}",
            "[green]yes[/]" if available else "[dim]no[/]",
        )
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def route(
    ctx: typer.Context,
    category: str = typer.Option(
        WorkCategory.GENERATE_REPLY.value,
        "--category",
        "-k",
        help="Work category, e.g. generate-reply or evaluate-communication"
    ),
    tier: Optional[str] = typer.Option(
        None,
        "--tier",
        "-t",
        help="User tier (free, basic, premium)"
    ),
    prefer: Optional[str] = typer.Option(
        None,
        "--prefer",
        "-p",
        help="Preferred capability name"
    ),
):
    """Show the fallback chain a unit of work would be dispatched through."""
    config = _config(ctx)
    try:
        work_category = WorkCategory(category.lower())
    except ValueError:
        console.print(f"[red]Unknown category:[/] {category}")
        sys.exit(EXIT_CODE_FAIL)
    user_tier = _parse_tier(tier, config)

    dispatcher = RoutingDispatcher(build_capabilities(config), UsageLedger())
    try:
        chain = dispatcher.resolve(work_category, user_tier, prefer or config.settings.preferred_capability)
    except CapabilityUnavailable as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(
        f"\n[bold]Route for {work_category.value}[/bold] "
        f"({user_tier.value} tier, {work_category.profile.value} accuracy)"
    )
    for position, capability in enumerate(chain, start=1):
        console.print(f"{position}. {capability.name} [dim]({capability.descriptor.model})[/]")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def traffic(
    ctx: typer.Context,
    airport: str = typer.Option(
        "KPAO",
        "--airport",
        "-a",
        help="Airport code to simulate"
    ),
    difficulty: str = typer.Option(
        Difficulty.INTERMEDIATE.value,
        "--difficulty",
        "-d",
        help="Scenario difficulty controlling traffic density"
    ),
    ticks: int = typer.Option(
        3,
        "--ticks",
        "-n",
        min=0,
        help="Number of state-machine steps to run"
    ),
    observer: Optional[str] = typer.Option(
        None,
        "--observer",
        "-o",
        help="Observer state, e.g. holding-short or pattern-final"
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducible traffic"
    ),
):
    """Run the traffic simulator offline and print advisories per step."""
    directory = InMemoryAirportDirectory(_config(ctx).airports)
    try:
        facts = directory.lookup(airport)
        level = Difficulty(difficulty.lower())
        observer_state = OperationalState(observer.lower()) if observer else None
    except UnknownAirport as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)
    except ValueError as e:
        console.print(f"[red]Invalid option:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    simulator = TrafficSimulator(rng=random.Random(seed))
    session_id = "offline"
    seeded = simulator.seed(session_id, facts, density=level.traffic_density)
    console.print(
        f"\n[bold]{facts.code}[/bold] {facts.name}: "
        f"{len(seeded)} aircraft ({level.traffic_density.value})"
    )

    for tick in range(ticks + 1):
        if tick:
            simulator.advance(session_id)
        _print_advisories(tick, [item.description for item in simulator.relevant_advisories(session_id, observer_state)])
    simulator.stop(session_id)
    sys.exit(EXIT_CODE_PASS)


def _print_advisories(tick: int, advisories: List[str]):
    console.print(f"\n[bold]Step {tick}[/bold]")
    if not advisories:
        console.print("[dim]No relevant traffic.[/]")
    for advisory in advisories:
        console.print(f"- {advisory}")


@app.command()
def practice(
    ctx: typer.Context,
    scenario: int = typer.Option(
        1,
        "--scenario",
        "-s",
        min=1,
        help="Sample scenario number (see --list)"
    ),
    tier: Optional[str] = typer.Option(
        None,
        "--tier",
        "-t",
        help="User tier (free, basic, premium)"
    ),
    evaluate: bool = typer.Option(
        True,
        "--evaluate/--no-evaluate",
        help="Score every transmission with an instructor evaluation"
    ),
    list_scenarios: bool = typer.Option(
        False,
        "--list",
        help="List the sample scenarios and exit"
    ),
):
    """
    Practice radio calls against a simulated controller.

    Type each transmission at the prompt; type /end to finish the session.
    """
    if list_scenarios:
        for number, item in enumerate(SAMPLE_SCENARIOS, start=1):
            console.print(f"{number}. {item.title} [dim]({item.airport}, {item.difficulty.value})[/]")
        sys.exit(EXIT_CODE_PASS)

    if scenario > len(SAMPLE_SCENARIOS):
        console.print(f"[red]Unknown scenario:[/] {scenario} (1-{len(SAMPLE_SCENARIOS)})")
        sys.exit(EXIT_CODE_FAIL)

    config = _config(ctx)
    user_tier = _parse_tier(tier, config)
    try:
        coordinator = build_runtime(config)
    except CapabilityUnavailable as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    asyncio.run(_practice_loop(coordinator, SAMPLE_SCENARIOS[scenario - 1], user_tier, evaluate))
    sys.exit(EXIT_CODE_PASS)


async def _practice_loop(coordinator: SessionCoordinator, scenario, tier: UserTier, evaluate: bool):
    session_id = coordinator.start(scenario, tier=tier)
    console.print(f"\n[bold]{scenario.title}[/bold] at {scenario.airport}")
    console.print(scenario.situation)
    for advisory in coordinator.advisory_text(session_id):
        console.print(f"[dim]Traffic: {advisory}[/]")
    console.print(f"[dim]Type {END_COMMAND} to finish.[/]\n")

    evaluations: List[CommunicationEvaluation] = []
    while True:
        text = typer.prompt("Pilot").strip()
        if text == END_COMMAND:
            break
        if not text:
            continue

        try:
            result = await coordinator.handle_utterance(session_id, text)
        except (DispatchExhausted, CapabilityUnavailable):
            console.print(f"[red]{DispatchExhausted.user_message}[/]")
            continue
        except InvalidSessionReference as e:
            console.print(f"[red]Error:[/] {e}")
            return
        console.print(f"[bold cyan]ATC:[/] {result.text}")

        if evaluate:
            evaluation = await _evaluate(coordinator, session_id, text)
            if evaluation is not None:
                evaluations.append(evaluation)
        coordinator.advance_traffic(session_id)

    score = sum(e.score for e in evaluations) / len(evaluations) if evaluations else 0.0
    accuracy = 100.0 * sum(e.is_correct for e in evaluations) / len(evaluations) if evaluations else 0.0
    coordinator.end(session_id, score, accuracy)
    console.print(f"\n[bold]Session complete[/bold]: score {score:.0f}, accuracy {accuracy:.0f}%")
    _display_usage(coordinator)


async def _evaluate(coordinator: SessionCoordinator, session_id: str, text: str) -> Optional[CommunicationEvaluation]:
    try:
        evaluation = await coordinator.evaluate_utterance(session_id, text)
    except (DispatchExhausted, CapabilityUnavailable, ValueError) as e:
        console.print(f"[dim]Evaluation unavailable: {e}[/]")
        return None
    marker = "[green]✓[/]" if evaluation.is_correct else "[yellow]![/]"
    console.print(f"{marker} {evaluation.score}/100 {evaluation.feedback}")
    for suggestion in evaluation.suggestions:
        console.print(f"  - {suggestion}")
    return evaluation


def _display_usage(coordinator: SessionCoordinator):
    """Display per-capability usage and estimated cost."""
    report = coordinator.usage_report()
    if not report:
        console.print("\n[dim]No capability usage recorded.[/]")
        return

    table = Table(title="Usage")
    table.add_column("Capability", no_wrap=True)
    table.add_column("Requests", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Est. cost", justify="right")
    for descriptor, record in report.items():
        table.add_row(
            descriptor.name,
            str(record.total_requests),
            str(record.total_input_tokens),
            str(record.total_output_tokens),
            f"${record.estimated_cost:.6f}",
        )
    console.print(table)


@app.command()
def init(ctx: typer.Context):
    """Initialize the session results database."""
    database = _config(ctx).settings.database
    try:
        initialize_schema(database)
        console.print(f"[green]✓[/] Database initialized successfully ({database})")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def history(
    ctx: typer.Context,
    airport: Optional[str] = typer.Option(
        None,
        "--airport",
        "-a",
        help="Only show sessions at this airport"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-l",
        min=1,
        help="Maximum number of sessions to show"
    ),
):
    """List recorded practice session results, newest first."""
    try:
        results = SessionResultRepository(_config(ctx).settings.database).recent_results(airport, limit)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    if not results:
        console.print("\n[bold yellow]No practice sessions recorded yet[/]")
        console.print("Run `flightdeck practice` to start one.\n")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title="Practice history")
    table.add_column("Ended")
    table.add_column("Scenario")
    table.add_column("Airport")
    table.add_column("Score", justify="right")
    table.add_column("Accuracy", justify="right")
    for result in results:
        table.add_row(
            result.ended_at.strftime("%Y-%m-%d %H:%M"),
            result.scenario_title,
            result.airport,
            f"{result.score:.0f}",
            f"{result.accuracy:.0f}%",
        )
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
