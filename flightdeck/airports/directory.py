"""
Airport directory lookups.

The runtime only needs ``lookup(code)``; anything that implements it can
stand in for the in-memory directory below.
"""

from typing import Dict, Iterable, List, Optional, Protocol

from flightdeck.core.errors import UnknownAirport

from .models import AirportFacts, AirspaceClass, Frequency, Runway


class AirportDirectory(Protocol):
    """Source of airport facts."""

    def lookup(self, code: str) -> AirportFacts:
        """Return facts for a code or raise UnknownAirport."""
        ...


class InMemoryAirportDirectory:
    """Airport directory backed by a dict, keyed by upper-case code."""

    def __init__(self, airports: Optional[Iterable[AirportFacts]] = None):
        self._airports: Dict[str, AirportFacts] = {}
        for airport in airports if airports is not None else SAMPLE_AIRPORTS:
            self.add(airport)

    def add(self, airport: AirportFacts) -> None:
        self._airports[airport.code.upper()] = airport

    def lookup(self, code: str) -> AirportFacts:
        """Get facts for an airport.

        Raises:
            UnknownAirport: If the code is not in the directory
        """
        airport = self._airports.get((code or "").upper())
        if airport is None:
            raise UnknownAirport(code)
        return airport

    def codes(self) -> List[str]:
        return sorted(self._airports)


SAMPLE_AIRPORTS = (
    AirportFacts(
        code="KPAO",
        name="Palo Alto",
        elevation=4,
        airspace_class=AirspaceClass.D,
        tower_controlled=True,
        runways=(Runway("13/31", (130, 310)),),
        frequencies=(
            Frequency("tower", "Palo Alto Tower", 118.6),
            Frequency("ground", "Palo Alto Ground", 125.0),
            Frequency("atis", "Palo Alto ATIS", 135.275),
        ),
    ),
    AirportFacts(
        code="KSFO",
        name="San Francisco International",
        elevation=13,
        airspace_class=AirspaceClass.B,
        tower_controlled=True,
        runways=(
            Runway("10L/28R", (100, 280)),
            Runway("10R/28L", (100, 280)),
            Runway("01L/19R", (10, 190)),
            Runway("01R/19L", (10, 190)),
        ),
        frequencies=(
            Frequency("tower", "San Francisco Tower", 120.5),
            Frequency("ground", "San Francisco Ground", 121.8),
            Frequency("clearance", "San Francisco Clearance", 118.2),
            Frequency("atis", "San Francisco ATIS", 118.85),
        ),
    ),
    AirportFacts(
        code="KOAK",
        name="Oakland International",
        elevation=9,
        airspace_class=AirspaceClass.C,
        tower_controlled=True,
        runways=(Runway("12/30", (120, 300)), Runway("10R/28L", (100, 280))),
        frequencies=(
            Frequency("tower", "Oakland Tower", 118.3),
            Frequency("ground", "Oakland Ground", 121.75),
        ),
    ),
    AirportFacts(
        code="KHAF",
        name="Half Moon Bay",
        elevation=66,
        airspace_class=AirspaceClass.G,
        tower_controlled=False,
        runways=(Runway("12/30", (120, 300)),),
        frequencies=(Frequency("ctaf", "Half Moon Bay CTAF", 122.975),),
    ),
)
