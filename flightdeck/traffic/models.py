"""
Data models for simulated traffic.

Defines operational states and their forward-progression graph, the
simulated aircraft entity, and the derived advisory/event items.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class OperationalState(Enum):
    """Discrete phase of an airport operation."""
    AT_RAMP = "at-ramp"
    TAXIING = "taxiing"
    HOLDING_SHORT = "holding-short"
    RUNWAY_ACTIVE = "runway-active"
    DEPARTING = "departing"
    APPROACHING = "approaching"
    PATTERN_DOWNWIND = "pattern-downwind"
    PATTERN_BASE = "pattern-base"
    PATTERN_FINAL = "pattern-final"
    LANDED_ROLLOUT = "landed-rollout"
    OVERFLYING = "overflying"

    @property
    def successor(self) -> Optional["OperationalState"]:
        """Natural next state, or None when the state is terminal."""
        return STATE_GRAPH[self]

    @property
    def is_terminal(self) -> bool:
        return STATE_GRAPH[self] is None

    @property
    def on_ground(self) -> bool:
        return self in GROUND_STATES


# Each state has at most one successor; None marks the end of an operation
STATE_GRAPH: Dict[OperationalState, Optional[OperationalState]] = {
    OperationalState.AT_RAMP: OperationalState.TAXIING,
    OperationalState.TAXIING: OperationalState.HOLDING_SHORT,
    OperationalState.HOLDING_SHORT: OperationalState.RUNWAY_ACTIVE,
    OperationalState.RUNWAY_ACTIVE: OperationalState.DEPARTING,
    OperationalState.DEPARTING: None,
    OperationalState.APPROACHING: OperationalState.PATTERN_DOWNWIND,
    OperationalState.PATTERN_DOWNWIND: OperationalState.PATTERN_BASE,
    OperationalState.PATTERN_BASE: OperationalState.PATTERN_FINAL,
    OperationalState.PATTERN_FINAL: OperationalState.LANDED_ROLLOUT,
    OperationalState.LANDED_ROLLOUT: None,
    OperationalState.OVERFLYING: None,
}

GROUND_STATES = frozenset({
    OperationalState.AT_RAMP,
    OperationalState.TAXIING,
    OperationalState.HOLDING_SHORT,
    OperationalState.RUNWAY_ACTIVE,
    OperationalState.LANDED_ROLLOUT,
})

STARTING_STATES: Tuple[OperationalState, ...] = tuple(
    state for state in OperationalState if not state.is_terminal
)


class TrafficIntent(Enum):
    TAXI_TO_RUNWAY = "taxi-to-runway"
    AWAITING_TAKEOFF_CLEARANCE = "awaiting-takeoff-clearance"
    DEPARTING_PATTERN = "departing-pattern"
    DEPARTING_DIRECT = "departing-direct"
    INBOUND_LANDING = "inbound-landing"
    INBOUND_TOUCH_AND_GO = "inbound-touch-and-go"
    TOUCH_AND_GO_PATTERN = "touch-and-go-pattern"
    CROSSING_AIRPORT = "crossing-airport"
    GROUND_OPS_ONLY = "ground-ops-only"


class FlightRules(Enum):
    VFR = "VFR"
    IFR = "IFR"
    SVFR = "SVFR"


class TrafficDensity(Enum):
    """Traffic level for a session, with the initial aircraft count range."""
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    BUSY = "busy"
    VERY_BUSY = "very-busy"

    @classmethod
    def parse(cls, value: str) -> "TrafficDensity":
        """Parse a density name; "congested" is an older name for very-busy."""
        normalized = value.strip().lower().replace("_", "-")
        if normalized == "congested":
            return cls.VERY_BUSY
        return cls(normalized)

    @property
    def count_range(self) -> Tuple[int, int]:
        """Inclusive (min, max) initial aircraft count."""
        return DENSITY_COUNTS[self]


DENSITY_COUNTS: Dict[TrafficDensity, Tuple[int, int]] = {
    TrafficDensity.NONE: (0, 0),
    TrafficDensity.LIGHT: (1, 3),
    TrafficDensity.MODERATE: (3, 6),
    TrafficDensity.BUSY: (6, 11),
    TrafficDensity.VERY_BUSY: (10, 19),
}


class AircraftCategory(Enum):
    SINGLE = "single"
    MULTI = "multi"
    JET = "jet"
    HELICOPTER = "helicopter"


@dataclass(frozen=True)
class AircraftMix:
    """Percentage share of each aircraft category."""
    single_engine: int = 70
    multi_engine: int = 15
    jet: int = 10
    helicopter: int = 5

    def __post_init__(self):
        shares = (self.single_engine, self.multi_engine, self.jet, self.helicopter)
        if any(share < 0 for share in shares):
            raise ValueError("Aircraft mix percentages cannot be negative")
        if sum(shares) != 100:
            raise ValueError("Aircraft mix percentages must sum to 100")

    def select(self, roll: int) -> AircraftCategory:
        """Map a roll in [0, 100) to a category."""
        if roll < self.single_engine:
            return AircraftCategory.SINGLE
        if roll < self.single_engine + self.multi_engine:
            return AircraftCategory.MULTI
        if roll < self.single_engine + self.multi_engine + self.jet:
            return AircraftCategory.JET
        return AircraftCategory.HELICOPTER


@dataclass
class SimulatedAircraft:
    """One simulated aircraft, mutated in place as it progresses."""
    aircraft_id: int
    session_id: str
    callsign: str
    aircraft_type: str
    category: AircraftCategory
    airport_code: str
    state: OperationalState
    intent: TrafficIntent
    altitude: int  # feet MSL
    speed: int  # knots
    heading: int  # magnetic degrees
    flight_rules: FlightRules = FlightRules.VFR
    created_at: datetime = field(default_factory=datetime.now)
    last_update: datetime = field(default_factory=datetime.now)
    active: bool = True


@dataclass(frozen=True)
class AdvisoryItem:
    """Advisory about one aircraft, derived on demand."""
    timestamp: datetime
    aircraft: SimulatedAircraft
    description: str
    affects_observer: bool = False


class TrafficEventType(Enum):
    AIRCRAFT_CALLED_READY = "called-ready"
    AIRCRAFT_HOLDING_SHORT = "holding-short"
    AIRCRAFT_ON_FINAL = "on-final"
    AIRCRAFT_LANDED = "landed"
    AIRCRAFT_TAXIING = "taxiing"
    CONFLICT_POTENTIAL = "conflict-potential"


@dataclass(frozen=True)
class TrafficEvent:
    """Notable traffic happening for scenario realism."""
    timestamp: datetime
    aircraft: SimulatedAircraft
    event_type: TrafficEventType
    description: str
    affects_observer: bool = False
