"""
Relevance filtering for traffic advisories.

Decides which traffic matters to an observer in a given operational state.
Unknown observer states fall back to "everything except ramp traffic".
"""

from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional

from .generator import describe
from .models import AdvisoryItem, OperationalState, SimulatedAircraft

S = OperationalState

RELEVANT_STATES: Dict[OperationalState, FrozenSet[OperationalState]] = {
    # Waiting to take off: runway and short-final traffic
    S.HOLDING_SHORT: frozenset({S.RUNWAY_ACTIVE, S.PATTERN_FINAL, S.DEPARTING, S.LANDED_ROLLOUT}),
    # On final: the rest of the pattern and anything still on the runway
    S.PATTERN_FINAL: frozenset({S.PATTERN_DOWNWIND, S.PATTERN_BASE, S.PATTERN_FINAL, S.RUNWAY_ACTIVE, S.DEPARTING}),
    # Taxiing: other taxiing aircraft and runway crossings
    S.TAXIING: frozenset({S.TAXIING, S.RUNWAY_ACTIVE}),
}

DEFAULT_RELEVANT_STATES: FrozenSet[OperationalState] = frozenset(s for s in S if s != S.AT_RAMP)

# Traffic in these states can hold up a pilot's next clearance
AFFECTS_OBSERVER: FrozenSet[OperationalState] = frozenset({
    S.HOLDING_SHORT, S.RUNWAY_ACTIVE, S.PATTERN_FINAL, S.DEPARTING,
})


def relevant_states(observer_state: Optional[OperationalState]) -> FrozenSet[OperationalState]:
    """States relevant to an observer; permissive default for uncovered states."""
    if observer_state is None:
        return DEFAULT_RELEVANT_STATES
    return RELEVANT_STATES.get(observer_state, DEFAULT_RELEVANT_STATES)


def is_relevant(observer_state: Optional[OperationalState], traffic_state: OperationalState) -> bool:
    return traffic_state in relevant_states(observer_state)


def filter_advisories(
    traffic: Iterable[SimulatedAircraft],
    observer_state: Optional[OperationalState],
    runway: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[AdvisoryItem]:
    """Advisories for active traffic relevant to the observer, ordered by aircraft id."""
    now = now or datetime.now()
    wanted = relevant_states(observer_state)
    selected = sorted(
        (a for a in traffic if a.active and a.state in wanted),
        key=lambda a: a.aircraft_id,
    )
    return [
        AdvisoryItem(
            timestamp=now,
            aircraft=aircraft,
            description=describe(aircraft, runway),
            affects_observer=aircraft.state in AFFECTS_OBSERVER,
        )
        for aircraft in selected
    ]
