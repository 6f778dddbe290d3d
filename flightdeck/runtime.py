"""
Runtime wiring.

Builds a ready-to-use SessionCoordinator from configuration. Every
collaborator can be overridden, which is how tests substitute fakes.
"""

import random
from typing import Iterable, Optional

from flightdeck.airports.directory import InMemoryAirportDirectory
from flightdeck.config.loader import RuntimeConfig, default_config
from flightdeck.core.dispatcher import Capability, RoutingDispatcher
from flightdeck.core.ledger import UsageLedger
from flightdeck.sdk.registry import build_capabilities
from flightdeck.session.coordinator import ResultStore, SessionCoordinator
from flightdeck.storage.repository import SessionResultRepository
from flightdeck.traffic.simulator import TrafficSimulator


def build_runtime(
    config: Optional[RuntimeConfig] = None,
    capabilities: Optional[Iterable[Capability]] = None,
    results: Optional[ResultStore] = None,
    rng: Optional[random.Random] = None,
) -> SessionCoordinator:
    """Wire capabilities, ledger, dispatcher, simulator, airports and result store.

    Args:
        config: Runtime configuration; built-in defaults when omitted
        capabilities: Pre-bound capabilities; bound from the environment when omitted
        results: Session result store; the configured SQLite database when omitted
        rng: Random source for traffic generation

    Raises:
        CapabilityUnavailable: If no capabilities could be bound at all
    """
    config = config or default_config()
    if capabilities is None:
        capabilities = build_capabilities(config)

    dispatcher = RoutingDispatcher(
        capabilities,
        UsageLedger(),
        timeout_seconds=config.settings.timeout_seconds,
    )
    return SessionCoordinator(
        dispatcher=dispatcher,
        simulator=TrafficSimulator(rng=rng),
        airports=InMemoryAirportDirectory(config.airports),
        results=results or SessionResultRepository(config.settings.database),
        tier=config.settings.tier,
        preferred_capability=config.settings.preferred_capability,
    )
