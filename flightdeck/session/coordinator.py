"""
Session coordinator.

Runs the lifecycle of practice sessions: seeds traffic for the scenario's
airport, enriches every dispatched request with traffic and airport facts,
and tears traffic down when the session ends.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from flightdeck.airports.directory import AirportDirectory
from flightdeck.airports.models import AirportFacts
from flightdeck.core.dispatcher import GenerationResult, RoutingDispatcher
from flightdeck.core.errors import InvalidSessionReference, UnknownAirport
from flightdeck.core.ledger import UsageRecord
from flightdeck.core.pricing import CapabilityDescriptor
from flightdeck.core.routing import UserTier, WorkCategory, default_params
from flightdeck.logging import get_logger
from flightdeck.storage.models import SessionResult
from flightdeck.traffic.models import AdvisoryItem, OperationalState, SimulatedAircraft
from flightdeck.traffic.simulator import TrafficSimulator

from .prompts import (
    CommunicationEvaluation,
    build_controller_prompt,
    build_evaluation_prompt,
    parse_evaluation,
)
from .scenarios import Scenario

logger = get_logger(__name__)


class ResultStore(Protocol):
    """Receives the final score and accuracy of each session."""

    def record_result(self, result: SessionResult) -> None:
        ...


@dataclass
class PracticeSession:
    """One running or finished practice session."""
    session_id: str
    scenario: Scenario
    tier: UserTier
    started_at: datetime
    airport: Optional[AirportFacts] = None
    preferred_capability: Optional[str] = None
    ended_at: Optional[datetime] = None
    aircraft_ids: List[int] = field(default_factory=list)

    @property
    def airport_code(self) -> str:
        return self.scenario.airport

    @property
    def active(self) -> bool:
        return self.ended_at is None


class SessionCoordinator:
    """Orchestrates practice sessions over a dispatcher and traffic simulator.

    Only one session is active at a time; starting another ends the current
    one first.
    """

    def __init__(
        self,
        dispatcher: RoutingDispatcher,
        simulator: TrafficSimulator,
        airports: AirportDirectory,
        results: ResultStore,
        tier: UserTier = UserTier.BASIC,
        preferred_capability: Optional[str] = None,
    ):
        self.dispatcher = dispatcher
        self.simulator = simulator
        self.airports = airports
        self.results = results
        self.tier = tier
        self.preferred_capability = preferred_capability
        self._sessions: Dict[str, PracticeSession] = {}
        self._active_session_id: Optional[str] = None

    @property
    def active_session_id(self) -> Optional[str]:
        return self._active_session_id

    def start(
        self,
        scenario: Scenario,
        tier: Optional[UserTier] = None,
        preferred_capability: Optional[str] = None,
    ) -> str:
        """Start a session for a scenario and seed its traffic.

        Always succeeds; an unknown airport only drops the traffic and
        runway context. If the previous session's result cannot be stored,
        that session stays open so ``end`` can be retried on it.

        Returns:
            The new session id
        """
        previous = self._active_session_id
        if previous is not None:
            try:
                self.end(previous, 0.0, 0.0)
            except Exception:
                logger.exception("implicit_end_failed", session_id=previous)
                self._active_session_id = None

        session = PracticeSession(
            session_id=uuid.uuid4().hex,
            scenario=scenario,
            tier=tier or self.tier,
            started_at=datetime.now(),
            preferred_capability=preferred_capability or self.preferred_capability,
        )
        try:
            session.airport = self.airports.lookup(scenario.airport)
        except UnknownAirport:
            logger.warning("airport_unknown", session_id=session.session_id, airport=scenario.airport)

        if session.airport is not None:
            seeded = self.simulator.seed(
                session.session_id,
                session.airport,
                density=scenario.difficulty.traffic_density,
            )
            session.aircraft_ids.extend(a.aircraft_id for a in seeded)

        self._sessions[session.session_id] = session
        self._active_session_id = session.session_id
        logger.info(
            "session_started",
            session_id=session.session_id,
            scenario=scenario.title,
            airport=scenario.airport,
            difficulty=scenario.difficulty.value,
            tier=session.tier.value,
        )
        return session.session_id

    def get_session(self, session_id: str) -> PracticeSession:
        """Look up a running session.

        Raises:
            InvalidSessionReference: If the session was never started or has ended
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise InvalidSessionReference(session_id)
        if not session.active:
            raise InvalidSessionReference(session_id, "session has ended")
        return session

    def advisories(
        self,
        session_id: str,
        observer_state: Optional[OperationalState] = None,
    ) -> List[AdvisoryItem]:
        self.get_session(session_id)
        return self.simulator.relevant_advisories(session_id, observer_state)

    def advisory_text(
        self,
        session_id: str,
        observer_state: Optional[OperationalState] = None,
    ) -> List[str]:
        return [item.description for item in self.advisories(session_id, observer_state)]

    async def handle_utterance(
        self,
        session_id: str,
        text: str,
        observer_state: Optional[OperationalState] = None,
    ) -> GenerationResult:
        """Get the controller's reply to a pilot transmission.

        Dispatch errors propagate unchanged; the session may end while the
        call is in flight, in which case the result is still returned.

        Raises:
            InvalidSessionReference: If the session is unknown or has ended
            DispatchExhausted: If every capability failed
        """
        session = self.get_session(session_id)
        advisories = []
        if session.airport is not None:
            advisories = self.advisory_text(session_id, observer_state)
        prompt = build_controller_prompt(session.scenario, text, session.airport, advisories)

        return await self.dispatcher.dispatch(
            WorkCategory.GENERATE_REPLY,
            session.tier,
            prompt,
            params=default_params(WorkCategory.GENERATE_REPLY),
            preferred=session.preferred_capability,
        )

    async def evaluate_utterance(
        self,
        session_id: str,
        text: str,
        expected_phrasings: Sequence[str] = (),
    ) -> CommunicationEvaluation:
        """Score a pilot transmission with an evaluation-grade capability.

        Raises:
            InvalidSessionReference: If the session is unknown or has ended
            DispatchExhausted: If every capability failed
            ValueError: If the evaluation reply cannot be parsed
        """
        session = self.get_session(session_id)
        prompt = build_evaluation_prompt(session.scenario, text, expected_phrasings)
        result = await self.dispatcher.dispatch(
            WorkCategory.EVALUATE_COMMUNICATION,
            session.tier,
            prompt,
            params=default_params(WorkCategory.EVALUATE_COMMUNICATION),
            preferred=session.preferred_capability,
        )
        return parse_evaluation(result.text)

    def add_traffic(
        self,
        session_id: str,
        count: int = 1,
        state: Optional[OperationalState] = None,
    ) -> List[SimulatedAircraft]:
        """Raise traffic density mid-session. No-op when the airport is unknown."""
        session = self.get_session(session_id)
        if session.airport is None:
            return []
        added = self.simulator.add(session_id, session.airport, count, state=state)
        session.aircraft_ids.extend(a.aircraft_id for a in added)
        return added

    def advance_traffic(self, session_id: str) -> int:
        self.get_session(session_id)
        return self.simulator.advance(session_id)

    def end(self, session_id: str, score: float, accuracy: float) -> SessionResult:
        """End a session, record its result and stop its traffic.

        The result is recorded before the session changes state, so a store
        failure leaves the session active and ``end`` can be retried. Safe
        while a ``handle_utterance`` call for the session is in flight.

        Raises:
            InvalidSessionReference: If the session is unknown or already ended
            ValueError: If accuracy is outside 0-100
        """
        if not 0.0 <= accuracy <= 100.0:
            raise ValueError("accuracy must be between 0 and 100")
        session = self.get_session(session_id)
        result = SessionResult(
            session_id=session_id,
            scenario_title=session.scenario.title,
            airport=session.airport_code,
            started_at=session.started_at,
            ended_at=datetime.now(),
            score=score,
            accuracy=accuracy,
        )
        self.results.record_result(result)

        session.ended_at = result.ended_at
        if self._active_session_id == session_id:
            self._active_session_id = None
        self.simulator.stop(session_id)
        logger.info("session_ended", session_id=session_id, score=score, accuracy=accuracy)
        return result

    def usage_report(self) -> Dict[CapabilityDescriptor, UsageRecord]:
        return self.dispatcher.ledger.snapshot()
