"""
Data models for airport facts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class AirspaceClass(Enum):
    """Controlled-airspace class surrounding an airport."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    G = "G"


@dataclass(frozen=True)
class Runway:
    """One runway, e.g. identifier "13/31" with end headings (130, 310)."""
    identifier: str
    headings: Tuple[int, ...] = ()

    def __post_init__(self):
        for heading in self.headings:
            if not 0 <= heading <= 360:
                raise ValueError(f"Runway {self.identifier} heading out of range: {heading}")

    @property
    def ends(self) -> Tuple[str, ...]:
        return tuple(self.identifier.split("/"))


@dataclass(frozen=True)
class Frequency:
    """Communication frequency; type is e.g. "tower", "ground", "ctaf"."""
    type: str
    description: str
    mhz: float


@dataclass(frozen=True)
class AirportFacts:
    """Static facts about an airport as supplied by the airport directory."""
    code: str
    name: str
    elevation: int = 0  # feet MSL
    airspace_class: Optional[AirspaceClass] = None
    tower_controlled: bool = False
    runways: Tuple[Runway, ...] = field(default_factory=tuple)
    frequencies: Tuple[Frequency, ...] = field(default_factory=tuple)

    def summary(self) -> str:
        """Runway and frequency facts as short prompt lines."""
        lines = [f"Airport: {self.code} ({self.name}), elevation {self.elevation} ft"]
        if self.airspace_class is not None:
            control = "tower-controlled" if self.tower_controlled else "non-towered"
            lines.append(f"Airspace: Class {self.airspace_class.value}, {control}")
        if self.runways:
            lines.append("Runways: " + ", ".join(r.identifier for r in self.runways))
        for frequency in self.frequencies:
            lines.append(f"{frequency.description} ({frequency.type}): {frequency.mhz:.3f}")
        return "\n".join(lines)
