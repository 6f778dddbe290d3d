"""
Routing policy for generation work.

Maps (user tier, work category) to a priority-ordered list of capability
names. The table is fixed at import time; nothing here is heuristic.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class AccuracyProfile(Enum):
    """Accuracy/latency profile a work category requires."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WorkCategory(Enum):
    """Kind of generation task being dispatched."""
    EVALUATE_COMMUNICATION = "evaluate-communication"
    FLIGHT_PLANNING_ADVICE = "flight-planning-advice"
    COMPLEX_CHECKLIST_QUESTION = "complex-checklist-question"
    PERFORMANCE_REPORT = "performance-report"
    GENERATE_REPLY = "generate-reply"
    CHECKLIST_GUIDANCE = "checklist-guidance"
    WEATHER_INTERPRETATION = "weather-interpretation"
    SIMPLE_CHAT = "simple-chat"
    CHECKLIST_LOOKUP = "checklist-lookup"
    QUICK_QUESTION = "quick-question"

    @property
    def profile(self) -> AccuracyProfile:
        return CATEGORY_PROFILES[self]


class UserTier(Enum):
    """Subscription level controlling which capabilities are preferred."""
    FREE = "free"
    BASIC = "basic"
    PREMIUM = "premium"


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters passed through to a capability."""
    temperature: float = 0.7
    max_output_tokens: int = 2048

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0 and 2")
        if self.max_output_tokens <= 0:
            raise ValueError("max_output_tokens must be > 0")


CATEGORY_PROFILES: Dict[WorkCategory, AccuracyProfile] = {
    WorkCategory.EVALUATE_COMMUNICATION: AccuracyProfile.HIGH,
    WorkCategory.FLIGHT_PLANNING_ADVICE: AccuracyProfile.HIGH,
    WorkCategory.COMPLEX_CHECKLIST_QUESTION: AccuracyProfile.HIGH,
    WorkCategory.PERFORMANCE_REPORT: AccuracyProfile.HIGH,
    WorkCategory.GENERATE_REPLY: AccuracyProfile.MEDIUM,
    WorkCategory.CHECKLIST_GUIDANCE: AccuracyProfile.MEDIUM,
    WorkCategory.WEATHER_INTERPRETATION: AccuracyProfile.MEDIUM,
    WorkCategory.SIMPLE_CHAT: AccuracyProfile.LOW,
    WorkCategory.CHECKLIST_LOOKUP: AccuracyProfile.LOW,
    WorkCategory.QUICK_QUESTION: AccuracyProfile.LOW,
}

DEFAULT_PARAMS: Dict[WorkCategory, GenerationParams] = {
    WorkCategory.GENERATE_REPLY: GenerationParams(temperature=0.8, max_output_tokens=1024),
    WorkCategory.EVALUATE_COMMUNICATION: GenerationParams(temperature=0.3, max_output_tokens=1024),
    WorkCategory.CHECKLIST_GUIDANCE: GenerationParams(temperature=0.5, max_output_tokens=512),
    WorkCategory.COMPLEX_CHECKLIST_QUESTION: GenerationParams(temperature=0.5, max_output_tokens=512),
    WorkCategory.FLIGHT_PLANNING_ADVICE: GenerationParams(temperature=0.6, max_output_tokens=2048),
}


def default_params(category: WorkCategory) -> GenerationParams:
    """Generation parameters a category uses unless the caller overrides them."""
    return DEFAULT_PARAMS.get(category, GenerationParams())


# Chains cross providers so a single missing credential never empties a list
ACCURACY_CHAINS: Dict[AccuracyProfile, Tuple[str, ...]] = {
    AccuracyProfile.HIGH: ("claude-sonnet", "gemini-pro", "claude-haiku", "gpt-4o-mini", "gemini-flash"),
    AccuracyProfile.MEDIUM: ("claude-haiku", "gemini-flash", "gpt-4o-mini", "claude-sonnet", "gemini-pro"),
    AccuracyProfile.LOW: ("gemini-flash", "claude-haiku", "gpt-4o-mini"),
}

# Free tier stays on the cheapest capabilities for every category
FREE_CHAIN: Tuple[str, ...] = ("gemini-flash", "claude-haiku", "gpt-4o-mini")

# Premium moves every category one step up the accuracy scale
PREMIUM_PROMOTION: Dict[AccuracyProfile, AccuracyProfile] = {
    AccuracyProfile.HIGH: AccuracyProfile.HIGH,
    AccuracyProfile.MEDIUM: AccuracyProfile.HIGH,
    AccuracyProfile.LOW: AccuracyProfile.MEDIUM,
}


def _build_policy_table() -> Dict[Tuple[UserTier, WorkCategory], Tuple[str, ...]]:
    table: Dict[Tuple[UserTier, WorkCategory], Tuple[str, ...]] = {}
    for category in WorkCategory:
        table[(UserTier.FREE, category)] = FREE_CHAIN
        table[(UserTier.BASIC, category)] = ACCURACY_CHAINS[category.profile]
        table[(UserTier.PREMIUM, category)] = ACCURACY_CHAINS[PREMIUM_PROMOTION[category.profile]]
    return table


POLICY_TABLE: Dict[Tuple[UserTier, WorkCategory], Tuple[str, ...]] = _build_policy_table()


def policy_chain(tier: UserTier, category: WorkCategory) -> List[str]:
    """Priority-ordered capability names for a tier and category."""
    return list(POLICY_TABLE[(tier, category)])
