"""
Unit tests for prompt composition and evaluation parsing.
"""

import pytest

from flightdeck.airports.directory import InMemoryAirportDirectory
from flightdeck.session.prompts import (
    EVALUATION_SYSTEM_PROMPT,
    build_controller_prompt,
    build_evaluation_prompt,
    parse_evaluation,
)
from flightdeck.session.scenarios import SAMPLE_SCENARIOS, Difficulty

SCENARIO = SAMPLE_SCENARIOS[0]


class TestControllerPrompt:
    """Test controller prompt enrichment."""

    def test_minimal_prompt(self):
        """Test a prompt without airport or traffic facts."""
        prompt = build_controller_prompt(SCENARIO, "Palo Alto ground, Skyhawk 123AB, ready to taxi")

        assert prompt.user == "Palo Alto ground, Skyhawk 123AB, ready to taxi"
        assert "air traffic controller at KPAO" in prompt.system
        assert SCENARIO.situation in prompt.system
        assert "Current traffic:" not in prompt.system

    def test_enriched_prompt(self):
        """Test airport facts and advisories are included in order."""
        airport = InMemoryAirportDirectory().lookup("KPAO")
        prompt = build_controller_prompt(
            SCENARIO, "hello", airport, ["N1 Skyhawk, turning base", "N2 holding short runway 31"]
        )

        assert "Airport: KPAO (Palo Alto), elevation 4 ft" in prompt.system
        assert "Airspace: Class D, tower-controlled" in prompt.system
        assert "Runways: 13/31" in prompt.system
        assert prompt.system.index("- N1 Skyhawk") < prompt.system.index("- N2 holding short")


class TestEvaluationPrompt:
    """Test evaluation prompt composition."""

    def test_expected_phrasings(self):
        """Test expected phrasings are offered as alternatives."""
        prompt = build_evaluation_prompt(SCENARIO, "ready to taxi", ["one", "two"])
        assert prompt.system == EVALUATION_SYSTEM_PROMPT
        assert "Expected phraseology examples: one OR two" in prompt.user
        assert 'Pilot\'s communication: "ready to taxi"' in prompt.user

    def test_difficulty_density(self):
        """Test difficulty maps onto traffic density."""
        assert Difficulty.BEGINNER.traffic_density.value == "light"
        assert Difficulty.EXPERT.traffic_density.value == "very-busy"


class TestParseEvaluation:
    """Test evaluation reply parsing."""

    def test_plain_json(self):
        """Test a bare JSON object."""
        evaluation = parse_evaluation('{"score": 65, "feedback": "Missing callsign", "suggestions": []}')
        assert evaluation.score == 65
        assert not evaluation.is_correct

    def test_fenced_json(self):
        """Test JSON wrapped in prose and a code fence."""
        text = 'Here you go:\n```json\n{"score": 90.4, "feedback": "Great", "suggestions": ["Slow down"]}\n```'
        evaluation = parse_evaluation(text)
        assert evaluation.score == 90
        assert evaluation.is_correct
        assert evaluation.suggestions == ["Slow down"]

    def test_defaults_for_optional_fields(self):
        """Test feedback and suggestions are optional."""
        evaluation = parse_evaluation('{"score": 70}')
        assert evaluation.feedback == ""
        assert evaluation.suggestions == []
        assert evaluation.is_correct

    @pytest.mark.parametrize("text,match", [
        ("no json here", "no JSON"),
        ("{not json}", "not valid JSON"),
        ('{"feedback": "x"}', "'score' must be a number"),
        ('{"score": true}', "'score' must be a number"),
        ('{"score": 140}', "between 0 and 100"),
        ('{"score": 50, "feedback": 3}', "'feedback' must be a string"),
        ('{"score": 50, "suggestions": "more"}', "'suggestions' must be a list"),
    ])
    def test_invalid_replies(self, text, match):
        """Test malformed replies raise ValueError."""
        with pytest.raises(ValueError, match=match):
            parse_evaluation(text)
