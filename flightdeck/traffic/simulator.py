"""
Traffic state machine.

Seeds simulated aircraft for a practice session and moves each one along
its operational-state graph on every ``advance``. Aircraft are deactivated,
never deleted, while their session is running, so late references from
in-flight advisory generation still resolve.
"""

import itertools
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from flightdeck.airports.models import AirportFacts, AirspaceClass
from flightdeck.logging import get_logger

from .generator import describe, generate_traffic_for_airport, kinematics_for
from .models import (
    STARTING_STATES,
    AdvisoryItem,
    OperationalState,
    SimulatedAircraft,
    TrafficDensity,
    TrafficEvent,
    TrafficEventType,
)
from .relevance import AFFECTS_OBSERVER, filter_advisories

logger = get_logger(__name__)

EVENT_TYPES: Dict[OperationalState, TrafficEventType] = {
    OperationalState.HOLDING_SHORT: TrafficEventType.AIRCRAFT_HOLDING_SHORT,
    OperationalState.DEPARTING: TrafficEventType.AIRCRAFT_CALLED_READY,
    OperationalState.PATTERN_FINAL: TrafficEventType.AIRCRAFT_ON_FINAL,
    OperationalState.LANDED_ROLLOUT: TrafficEventType.AIRCRAFT_LANDED,
    OperationalState.TAXIING: TrafficEventType.AIRCRAFT_TAXIING,
}

CONFLICT_PROBABILITY = 0.2


def realistic_density(airport: AirportFacts) -> TrafficDensity:
    """Traffic density matching an airport's real-world character."""
    if not airport.tower_controlled:
        return TrafficDensity.LIGHT
    if airport.airspace_class == AirspaceClass.B:
        return TrafficDensity.VERY_BUSY
    if airport.airspace_class == AirspaceClass.C:
        return TrafficDensity.BUSY
    if airport.airspace_class == AirspaceClass.D:
        return TrafficDensity.MODERATE
    return TrafficDensity.LIGHT


class TrafficSimulator:
    """Owns the simulated aircraft of every practice session.

    Each session's aircraft are only mutated through calls for that
    session. Readers iterate over copies, so a concurrent ``stop`` simply
    removes aircraft from later results.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._ids = itertools.count(1)
        self._traffic: Dict[str, List[SimulatedAircraft]] = {}
        self._airports: Dict[str, AirportFacts] = {}
        self._stopped: Set[str] = set()

    def seed(
        self,
        session_id: str,
        airport: AirportFacts,
        density: Optional[TrafficDensity] = None,
        count: Optional[int] = None,
    ) -> List[SimulatedAircraft]:
        """Create the initial traffic for a session.

        Args:
            session_id: Owning session
            airport: Airport the session operates at
            density: Traffic density; defaults to the airport's realistic density
            count: Exact number of aircraft; defaults to a draw from the density's range

        Returns:
            The seeded aircraft
        """
        density = density or realistic_density(airport)
        if count is None:
            low, high = density.count_range
            count = self._rng.randint(low, high)

        self._airports[session_id] = airport
        self._stopped.discard(session_id)
        traffic = self._generate(session_id, airport, count, STARTING_STATES)
        logger.info(
            "traffic_seeded",
            session_id=session_id,
            airport=airport.code,
            density=density.value,
            count=len(traffic),
        )
        return traffic

    def add(
        self,
        session_id: str,
        airport: AirportFacts,
        count: int = 1,
        state: Optional[OperationalState] = None,
    ) -> List[SimulatedAircraft]:
        """Add traffic mid-session, optionally forcing the starting state."""
        self._airports.setdefault(session_id, airport)
        states = (state,) if state is not None else STARTING_STATES
        traffic = self._generate(session_id, airport, count, states)
        logger.info("traffic_added", session_id=session_id, count=len(traffic))
        return traffic

    def _generate(self, session_id, airport, count, states) -> List[SimulatedAircraft]:
        traffic = generate_traffic_for_airport(
            airport,
            session_id,
            count=count,
            rng=self._rng,
            next_id=lambda: next(self._ids),
            starting_states=states,
        )
        self._traffic.setdefault(session_id, []).extend(traffic)
        return traffic

    def advance(self, session_id: str) -> int:
        """Move every active aircraft of a session to its next state.

        Aircraft in a terminal state are deactivated instead.

        Returns:
            Number of aircraft that changed (transitioned or deactivated)
        """
        now = datetime.now()
        changed = 0
        for aircraft in self.active_traffic(session_id):
            successor = aircraft.state.successor
            if successor is None:
                aircraft.active = False
            else:
                aircraft.state = successor
                airport = self._airports.get(session_id)
                elevation = airport.elevation if airport else 0
                aircraft.altitude, aircraft.speed = kinematics_for(
                    self._rng, successor, aircraft.category, elevation
                )
            aircraft.last_update = now
            changed += 1
        if changed:
            logger.debug("traffic_advanced", session_id=session_id, changed=changed)
        return changed

    def stop(self, session_id: str) -> int:
        """Deactivate all traffic of a session. Safe to call repeatedly.

        Returns:
            Number of aircraft deactivated by this call
        """
        now = datetime.now()
        deactivated = 0
        for aircraft in list(self._traffic.get(session_id, ())):
            if aircraft.active:
                aircraft.active = False
                aircraft.last_update = now
                deactivated += 1
        self._stopped.add(session_id)
        logger.info("traffic_stopped", session_id=session_id, deactivated=deactivated)
        return deactivated

    def active_traffic(self, session_id: str) -> List[SimulatedAircraft]:
        return [a for a in list(self._traffic.get(session_id, ())) if a.active]

    def all_traffic(self, session_id: str) -> List[SimulatedAircraft]:
        """Every aircraft a session ever had, active or not."""
        return list(self._traffic.get(session_id, ()))

    def get_aircraft(self, aircraft_id: int) -> Optional[SimulatedAircraft]:
        for traffic in list(self._traffic.values()):
            for aircraft in list(traffic):
                if aircraft.aircraft_id == aircraft_id:
                    return aircraft
        return None

    def primary_runway(self, session_id: str) -> Optional[str]:
        """First runway end of the session's airport, used in advisory phrasing."""
        airport = self._airports.get(session_id)
        if airport is None or not airport.runways:
            return None
        return airport.runways[0].ends[-1]

    def relevant_advisories(
        self,
        session_id: str,
        observer_state: Optional[OperationalState] = None,
    ) -> List[AdvisoryItem]:
        """Advisories about traffic relevant to an observer in a given state."""
        return filter_advisories(
            self.active_traffic(session_id),
            observer_state,
            runway=self.primary_runway(session_id),
        )

    def traffic_events(self, session_id: str, include_conflicts: bool = False) -> List[TrafficEvent]:
        """Notable events for the session's current traffic.

        With ``include_conflicts`` an occasional educational conflict event
        is added for a random active aircraft.
        """
        now = datetime.now()
        runway = self.primary_runway(session_id)
        active = self.active_traffic(session_id)
        events = []
        for aircraft in active:
            event_type = EVENT_TYPES.get(aircraft.state)
            if event_type is None:
                continue
            events.append(TrafficEvent(
                timestamp=now,
                aircraft=aircraft,
                event_type=event_type,
                description=describe(aircraft, runway),
                affects_observer=aircraft.state in AFFECTS_OBSERVER,
            ))

        if include_conflicts and active and self._rng.random() < CONFLICT_PROBABILITY:
            aircraft = self._rng.choice(active)
            events.append(TrafficEvent(
                timestamp=now,
                aircraft=aircraft,
                event_type=TrafficEventType.CONFLICT_POTENTIAL,
                description=f"Traffic conflict potential: {aircraft.callsign} also requesting runway access",
                affects_observer=True,
            ))
        return events

    def purge_inactive(self, older_than: timedelta = timedelta(hours=24)) -> int:
        """Drop inactive aircraft of stopped sessions last updated before the cutoff.

        Running sessions are never purged.

        Returns:
            Number of aircraft removed
        """
        cutoff = datetime.now() - older_than
        removed = 0
        for session_id in list(self._stopped):
            traffic = self._traffic.get(session_id, [])
            keep = [a for a in traffic if a.active or a.last_update >= cutoff]
            removed += len(traffic) - len(keep)
            if keep:
                self._traffic[session_id] = keep
            else:
                self._traffic.pop(session_id, None)
                self._airports.pop(session_id, None)
                self._stopped.discard(session_id)
        return removed
