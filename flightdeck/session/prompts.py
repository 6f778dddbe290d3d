"""
Prompt composition and evaluation parsing.

Builds the enriched controller context for a session and turns an
evaluation reply into a structured result.
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from flightdeck.airports.models import AirportFacts
from flightdeck.core.dispatcher import Prompt

from .scenarios import Scenario

PASSING_SCORE = 70

EVALUATION_SYSTEM_PROMPT = """\
You are an expert flight instructor evaluating student pilot radio communications.
Evaluate the pilot's message for:
1. Proper phraseology and format
2. Inclusion of required information
3. Clarity and professionalism
4. Safety considerations

Reply with a single JSON object and nothing else, with keys:
- score (integer 0-100)
- feedback (string explaining what was good and what needs improvement)
- suggestions (list of specific improvements)"""


@dataclass(frozen=True)
class CommunicationEvaluation:
    """Instructor assessment of one pilot transmission."""
    score: int
    feedback: str
    suggestions: List[str] = field(default_factory=list)

    @property
    def is_correct(self) -> bool:
        return self.score >= PASSING_SCORE


def build_controller_prompt(
    scenario: Scenario,
    pilot_message: str,
    airport: Optional[AirportFacts] = None,
    advisories: Sequence[str] = (),
) -> Prompt:
    """Controller prompt enriched with airport facts and current traffic."""
    lines = [
        f"You are an air traffic controller at {scenario.airport}.",
        f"Scenario: {scenario.scenario_type.value}",
        f"Current conditions: {scenario.situation}",
    ]
    if airport is not None:
        lines += ["", airport.summary()]
    if advisories:
        lines += ["", "Current traffic:"]
        lines += [f"- {advisory}" for advisory in advisories]
    lines += [
        "",
        "Respond using proper ATC phraseology and procedures.",
        "Be realistic but educational. If the pilot makes errors, respond appropriately.",
        "Keep responses concise and professional.",
    ]
    if advisories:
        lines.append("Issue traffic advisories when the traffic above affects the pilot.")
    return Prompt(system="\n".join(lines), user=pilot_message)


def build_evaluation_prompt(
    scenario: Scenario,
    pilot_message: str,
    expected_phrasings: Sequence[str] = (),
) -> Prompt:
    user = [f"Scenario: {scenario.scenario_type.value} at {scenario.airport}"]
    if expected_phrasings:
        user.append("Expected phraseology examples: " + " OR ".join(expected_phrasings))
    user += ["", f'Pilot\'s communication: "{pilot_message}"', "", "Evaluate this communication."]
    return Prompt(system=EVALUATION_SYSTEM_PROMPT, user="\n".join(user))


def parse_evaluation(text: str) -> CommunicationEvaluation:
    """Parse an evaluation reply.

    Tolerates prose or code fences around the JSON object.

    Raises:
        ValueError: If no valid evaluation object is present
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ValueError("Evaluation reply contains no JSON object")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"Evaluation reply is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("Evaluation reply must be a JSON object")

    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError("'score' must be a number")
    if not 0 <= score <= 100:
        raise ValueError("'score' must be between 0 and 100")

    feedback = data.get("feedback", "")
    if not isinstance(feedback, str):
        raise ValueError("'feedback' must be a string")

    suggestions = data.get("suggestions", [])
    if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
        raise ValueError("'suggestions' must be a list of strings")

    return CommunicationEvaluation(score=int(round(score)), feedback=feedback, suggestions=suggestions)
