"""
Traffic generation and advisory phrasing.

Builds plausible aircraft for an airport and renders their current state as
short CTAF/tower style announcements.
"""

import random
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from flightdeck.airports.models import AirportFacts, AirspaceClass

from .models import (
    STARTING_STATES,
    AircraftCategory,
    AircraftMix,
    FlightRules,
    OperationalState,
    SimulatedAircraft,
    TrafficIntent,
)

AIRCRAFT_TYPES: Dict[AircraftCategory, Tuple[str, ...]] = {
    AircraftCategory.SINGLE: (
        "Skyhawk", "Warrior", "Cherokee", "Archer", "Arrow",
        "Skylane", "Bonanza", "Mooney", "Cirrus", "Diamond",
    ),
    AircraftCategory.MULTI: ("Baron", "Seminole", "Seneca", "Duchess", "Twin Comanche"),
    AircraftCategory.JET: ("Citation", "Learjet", "Gulfstream", "Challenger", "Phenom"),
    AircraftCategory.HELICOPTER: ("Robinson", "Schweizer", "Bell"),
}

# Busier airspace sees a larger share of faster, more complex aircraft
AIRSPACE_MIX: Dict[Optional[AirspaceClass], AircraftMix] = {
    AirspaceClass.B: AircraftMix(40, 20, 35, 5),
    AirspaceClass.C: AircraftMix(60, 20, 15, 5),
    AirspaceClass.D: AircraftMix(75, 15, 5, 5),
}
DEFAULT_MIX = AircraftMix(85, 10, 0, 5)

SPEED_RANGES: Dict[AircraftCategory, Tuple[int, int]] = {
    AircraftCategory.SINGLE: (60, 140),
    AircraftCategory.MULTI: (100, 180),
    AircraftCategory.JET: (140, 250),
    AircraftCategory.HELICOPTER: (40, 110),
}

STATE_INTENTS: Dict[OperationalState, Tuple[TrafficIntent, ...]] = {
    OperationalState.AT_RAMP: (TrafficIntent.TAXI_TO_RUNWAY, TrafficIntent.GROUND_OPS_ONLY),
    OperationalState.TAXIING: (TrafficIntent.TAXI_TO_RUNWAY,),
    OperationalState.HOLDING_SHORT: (TrafficIntent.AWAITING_TAKEOFF_CLEARANCE,),
    OperationalState.RUNWAY_ACTIVE: (TrafficIntent.DEPARTING_PATTERN, TrafficIntent.DEPARTING_DIRECT),
    OperationalState.DEPARTING: (TrafficIntent.DEPARTING_PATTERN, TrafficIntent.DEPARTING_DIRECT),
    OperationalState.APPROACHING: (TrafficIntent.INBOUND_LANDING, TrafficIntent.INBOUND_TOUCH_AND_GO),
    OperationalState.PATTERN_DOWNWIND: (TrafficIntent.INBOUND_LANDING, TrafficIntent.TOUCH_AND_GO_PATTERN),
    OperationalState.PATTERN_BASE: (TrafficIntent.INBOUND_LANDING, TrafficIntent.TOUCH_AND_GO_PATTERN),
    OperationalState.PATTERN_FINAL: (TrafficIntent.INBOUND_LANDING, TrafficIntent.TOUCH_AND_GO_PATTERN),
    OperationalState.LANDED_ROLLOUT: (TrafficIntent.INBOUND_LANDING,),
    OperationalState.OVERFLYING: (TrafficIntent.CROSSING_AIRPORT,),
}


def aircraft_mix_for(airport: AirportFacts) -> AircraftMix:
    return AIRSPACE_MIX.get(airport.airspace_class, DEFAULT_MIX)


def generate_callsign(rng: random.Random, category: AircraftCategory) -> Tuple[str, str]:
    """Generate a (registration, type) pair such as ("N12345", "Skyhawk")."""
    aircraft_type = rng.choice(AIRCRAFT_TYPES[category])
    prefix = rng.choice(("N", "N1", "N2", "N3", "N4", "N5", "N6", "N7", "N8", "N9"))
    number = rng.randint(100, 9998)
    suffix = ""
    if category == AircraftCategory.JET and rng.random() < 0.5:
        suffix = rng.choice("ABCDEFGHIJKLMNOPQRSTUVWXYZ") + rng.choice("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
    return f"{prefix}{number}{suffix}", aircraft_type


def kinematics_for(
    rng: random.Random,
    state: OperationalState,
    category: AircraftCategory,
    elevation: int,
) -> Tuple[int, int]:
    """Plausible (altitude MSL, speed) for an aircraft in a state."""
    low, high = SPEED_RANGES[category]
    if state == OperationalState.AT_RAMP or state == OperationalState.HOLDING_SHORT:
        return elevation, 0
    if state == OperationalState.TAXIING:
        return elevation, rng.randint(5, 20)
    if state in (OperationalState.RUNWAY_ACTIVE, OperationalState.LANDED_ROLLOUT):
        return elevation, rng.randint(20, max(21, low))
    pattern_height = 500 if category == AircraftCategory.HELICOPTER else 1000
    if state in (OperationalState.PATTERN_DOWNWIND, OperationalState.PATTERN_BASE):
        return elevation + pattern_height, rng.randint(low, max(low, (low + high) // 2))
    if state == OperationalState.PATTERN_FINAL:
        return elevation + rng.randint(200, pattern_height), low
    if state == OperationalState.DEPARTING:
        return elevation + rng.randint(500, 1500), rng.randint(low, high)
    if state == OperationalState.APPROACHING:
        return elevation + rng.randint(1500, 3000), rng.randint(low, high)
    return elevation + rng.randint(2500, 5500), rng.randint(low, high)


def generate_traffic_for_airport(
    airport: AirportFacts,
    session_id: str,
    count: int,
    rng: random.Random,
    next_id,
    starting_states: Sequence[OperationalState] = STARTING_STATES,
    now: Optional[datetime] = None,
) -> List[SimulatedAircraft]:
    """Create ``count`` aircraft for an airport.

    Args:
        airport: Airport the traffic operates at
        session_id: Owning session
        count: Number of aircraft to create
        rng: Random source
        next_id: Callable returning the next aircraft id
        starting_states: States to draw initial states from
        now: Creation timestamp (defaults to now)

    Returns:
        New active aircraft

    Raises:
        ValueError: If count is negative or no starting states are given
    """
    if count < 0:
        raise ValueError("count cannot be negative")
    if not starting_states:
        raise ValueError("starting_states cannot be empty")

    now = now or datetime.now()
    mix = aircraft_mix_for(airport)
    traffic = []
    for _ in range(count):
        category = mix.select(rng.randrange(100))
        callsign, aircraft_type = generate_callsign(rng, category)
        state = rng.choice(list(starting_states))
        altitude, speed = kinematics_for(rng, state, category, airport.elevation)
        if category == AircraftCategory.JET:
            flight_rules = FlightRules.IFR
        else:
            flight_rules = FlightRules.IFR if rng.random() > 0.8 else FlightRules.VFR

        traffic.append(SimulatedAircraft(
            aircraft_id=next_id(),
            session_id=session_id,
            callsign=callsign,
            aircraft_type=aircraft_type,
            category=category,
            airport_code=airport.code,
            state=state,
            intent=rng.choice(STATE_INTENTS[state]),
            altitude=altitude,
            speed=speed,
            heading=rng.randrange(360),
            flight_rules=flight_rules,
            created_at=now,
            last_update=now,
        ))
    return traffic


def describe(aircraft: SimulatedAircraft, runway: Optional[str] = None) -> str:
    """Render an aircraft's current state as a short advisory.

    Distances are derived from the aircraft's speed, so the text is stable
    for a given aircraft and state.
    """
    callsign = aircraft.callsign
    ident = f"{aircraft.callsign} {aircraft.aircraft_type}"
    on_runway = f" runway {runway}" if runway else ""
    state = aircraft.state

    if state == OperationalState.AT_RAMP:
        return f"{ident}, on the ramp"
    if state == OperationalState.TAXIING:
        return f"{callsign} taxiing to{on_runway or ' runway'}"
    if state == OperationalState.HOLDING_SHORT:
        return f"{callsign} holding short{on_runway}"
    if state == OperationalState.RUNWAY_ACTIVE:
        return f"{ident}, on runway {runway}" if runway else f"{ident}, on the runway"
    if state == OperationalState.DEPARTING:
        return f"{callsign} departing"
    if state == OperationalState.APPROACHING:
        return f"{ident}, {5 + aircraft.speed % 10} miles out"
    if state == OperationalState.PATTERN_DOWNWIND:
        return f"{ident}, downwind"
    if state == OperationalState.PATTERN_BASE:
        return f"{ident}, turning base"
    if state == OperationalState.PATTERN_FINAL:
        return f"{ident}, {1 + aircraft.speed % 4}-mile final"
    if state == OperationalState.LANDED_ROLLOUT:
        return f"{callsign} on rollout, clearing{on_runway or ' the runway'}"
    return f"{ident}, overflying the field"
