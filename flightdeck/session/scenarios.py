"""
Practice scenarios.

A scenario is supplied by the caller when a session starts; a small sample
catalog ships for the CLI.
"""

from dataclasses import dataclass
from enum import Enum

from flightdeck.traffic.models import TrafficDensity


class Difficulty(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def traffic_density(self) -> TrafficDensity:
        return DIFFICULTY_DENSITY[self]


DIFFICULTY_DENSITY = {
    Difficulty.BEGINNER: TrafficDensity.LIGHT,
    Difficulty.INTERMEDIATE: TrafficDensity.MODERATE,
    Difficulty.ADVANCED: TrafficDensity.BUSY,
    Difficulty.EXPERT: TrafficDensity.VERY_BUSY,
}


class ScenarioType(Enum):
    GROUND_CLEARANCE = "ground-clearance"
    TAXI_INSTRUCTIONS = "taxi-instructions"
    TAKEOFF_CLEARANCE = "takeoff-clearance"
    IN_FLIGHT_COMMUNICATION = "in-flight-communication"
    LANDING_CLEARANCE = "landing-clearance"
    EMERGENCY_COMMUNICATION = "emergency-communication"
    FREQUENCY_CHANGE = "frequency-change"
    WEATHER_BRIEFING = "weather-briefing"


@dataclass(frozen=True)
class Scenario:
    """One radio-communication practice scenario."""
    title: str
    difficulty: Difficulty
    airport: str
    situation: str
    scenario_type: ScenarioType = ScenarioType.GROUND_CLEARANCE
    description: str = ""


SAMPLE_SCENARIOS = (
    Scenario(
        title="Ground Clearance - VFR",
        description="Request taxi clearance for VFR departure",
        scenario_type=ScenarioType.GROUND_CLEARANCE,
        difficulty=Difficulty.BEGINNER,
        airport="KPAO",
        situation="Clear day, VFR conditions at Palo Alto Airport. You're ready to taxi.",
    ),
    Scenario(
        title="Takeoff Clearance",
        description="Request and receive takeoff clearance",
        scenario_type=ScenarioType.TAKEOFF_CLEARANCE,
        difficulty=Difficulty.BEGINNER,
        airport="KSFO",
        situation="At runway hold short line, ready for departure.",
    ),
    Scenario(
        title="In-Flight Position Report",
        description="Make position report to ATC during flight",
        scenario_type=ScenarioType.IN_FLIGHT_COMMUNICATION,
        difficulty=Difficulty.INTERMEDIATE,
        airport="KOAK",
        situation="Cruising at 4,500 feet, approaching your destination.",
    ),
    Scenario(
        title="Landing Clearance - Pattern",
        description="Request landing clearance in the traffic pattern",
        scenario_type=ScenarioType.LANDING_CLEARANCE,
        difficulty=Difficulty.INTERMEDIATE,
        airport="KPAO",
        situation="On downwind leg, ready to turn base.",
    ),
    Scenario(
        title="Emergency Declaration",
        description="Declare an emergency and communicate with ATC",
        scenario_type=ScenarioType.EMERGENCY_COMMUNICATION,
        difficulty=Difficulty.ADVANCED,
        airport="KSFO",
        situation="Engine trouble at 3,000 feet, need to declare emergency.",
    ),
)
