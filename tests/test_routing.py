"""
Unit tests for the routing policy table and chain resolution.
"""

import pytest

from flightdeck.core.dispatcher import RoutingDispatcher
from flightdeck.core.errors import CapabilityUnavailable
from flightdeck.core.ledger import UsageLedger
from flightdeck.core.pricing import CAPABILITY_CATALOG
from flightdeck.core.routing import (
    AccuracyProfile,
    GenerationParams,
    UserTier,
    WorkCategory,
    default_params,
    policy_chain,
)


class TestPolicyTable:
    """Test the fixed tier/category policy."""

    def test_every_pair_has_a_chain(self):
        """Test every tier/category pair maps to a non-empty list of known capabilities."""
        for tier in UserTier:
            for category in WorkCategory:
                chain = policy_chain(tier, category)
                assert chain, (tier, category)
                assert all(name in CAPABILITY_CATALOG for name in chain)
                assert len(chain) == len(set(chain))

    def test_free_tier_prefers_cheapest(self):
        """Test free tier starts with the cheapest capability for every category."""
        for category in WorkCategory:
            assert policy_chain(UserTier.FREE, category)[0] == "gemini-flash"

    def test_basic_evaluation_prefers_accuracy(self):
        """Test high-accuracy work starts with the strongest capability."""
        assert WorkCategory.EVALUATE_COMMUNICATION.profile == AccuracyProfile.HIGH
        assert policy_chain(UserTier.BASIC, WorkCategory.EVALUATE_COMMUNICATION)[0] == "claude-sonnet"

    def test_premium_promotes_medium_work(self):
        """Test premium moves medium-accuracy work to the high-accuracy chain."""
        assert policy_chain(UserTier.BASIC, WorkCategory.GENERATE_REPLY)[0] == "claude-haiku"
        assert policy_chain(UserTier.PREMIUM, WorkCategory.GENERATE_REPLY)[0] == "claude-sonnet"

    def test_chain_is_a_copy(self):
        """Test callers can't mutate the table."""
        chain = policy_chain(UserTier.BASIC, WorkCategory.SIMPLE_CHAT)
        chain.clear()
        assert policy_chain(UserTier.BASIC, WorkCategory.SIMPLE_CHAT)


class TestGenerationParams:
    """Test per-category defaults."""

    def test_category_defaults(self):
        """Test known category defaults."""
        assert default_params(WorkCategory.GENERATE_REPLY) == GenerationParams(0.8, 1024)
        assert default_params(WorkCategory.EVALUATE_COMMUNICATION) == GenerationParams(0.3, 1024)
        assert default_params(WorkCategory.CHECKLIST_GUIDANCE) == GenerationParams(0.5, 512)
        assert default_params(WorkCategory.QUICK_QUESTION) == GenerationParams(0.7, 2048)

    def test_invalid_params(self):
        """Test parameter validation."""
        with pytest.raises(ValueError, match="temperature"):
            GenerationParams(temperature=3.0)
        with pytest.raises(ValueError, match="max_output_tokens"):
            GenerationParams(max_output_tokens=0)


class TestResolve:
    """Test RoutingDispatcher.resolve ordering rules."""

    def _dispatcher(self, all_capabilities, unavailable=()):
        capabilities = [
            cap.bind(available=name not in unavailable) for name, cap in all_capabilities.items()
        ]
        return RoutingDispatcher(capabilities, UsageLedger())

    def test_policy_order(self, all_capabilities):
        """Test resolution follows the policy table when everything is available."""
        dispatcher = self._dispatcher(all_capabilities)
        names = [c.name for c in dispatcher.resolve(WorkCategory.GENERATE_REPLY, UserTier.BASIC)]
        assert names == policy_chain(UserTier.BASIC, WorkCategory.GENERATE_REPLY)

    def test_preferred_goes_first(self, all_capabilities):
        """Test an available preference leads the chain without duplicates."""
        dispatcher = self._dispatcher(all_capabilities)
        names = [
            c.name
            for c in dispatcher.resolve(WorkCategory.SIMPLE_CHAT, UserTier.BASIC, preferred="claude-sonnet")
        ]
        assert names[0] == "claude-sonnet"
        assert names[1:] == policy_chain(UserTier.BASIC, WorkCategory.SIMPLE_CHAT)

    def test_preferred_first_for_every_pair(self, all_capabilities):
        """Test any available preference leads the chain for every tier and category."""
        dispatcher = self._dispatcher(all_capabilities)
        for tier in UserTier:
            for category in WorkCategory:
                for preferred in CAPABILITY_CATALOG.names():
                    names = [c.name for c in dispatcher.resolve(category, tier, preferred)]
                    assert names[0] == preferred, (tier, category, preferred)
                    assert names.count(preferred) == 1

    def test_preference_case_insensitive(self, all_capabilities):
        """Test preferences are matched regardless of case and surrounding spaces."""
        dispatcher = self._dispatcher(all_capabilities)
        for preferred in ("Claude-Sonnet", " CLAUDE-SONNET "):
            chain = dispatcher.resolve(WorkCategory.SIMPLE_CHAT, UserTier.FREE, preferred)
            assert chain[0].name == "claude-sonnet"

    def test_preferred_already_in_chain_not_duplicated(self, all_capabilities):
        """Test a preference that is also in the policy appears once."""
        dispatcher = self._dispatcher(all_capabilities)
        names = [
            c.name
            for c in dispatcher.resolve(WorkCategory.GENERATE_REPLY, UserTier.BASIC, preferred="gpt-4o-mini")
        ]
        assert names[0] == "gpt-4o-mini"
        assert names.count("gpt-4o-mini") == 1

    def test_unknown_or_unavailable_preference_ignored(self, all_capabilities):
        """Test bad preferences fall through to the policy."""
        dispatcher = self._dispatcher(all_capabilities, unavailable={"claude-sonnet"})
        expected = policy_chain(UserTier.FREE, WorkCategory.SIMPLE_CHAT)

        for preferred in ("does-not-exist", "claude-sonnet"):
            names = [c.name for c in dispatcher.resolve(WorkCategory.SIMPLE_CHAT, UserTier.FREE, preferred)]
            assert names == expected

    def test_unavailable_skipped(self, all_capabilities):
        """Test unavailable capabilities are removed from the chain."""
        dispatcher = self._dispatcher(all_capabilities, unavailable={"claude-haiku"})
        names = [c.name for c in dispatcher.resolve(WorkCategory.GENERATE_REPLY, UserTier.BASIC)]
        assert "claude-haiku" not in names
        assert names[0] == "gemini-flash"

    def test_fully_unavailable_policy_uses_extras(self, all_capabilities):
        """Test remaining capabilities are appended cheapest-first for free tier."""
        dispatcher = self._dispatcher(
            all_capabilities, unavailable={"gemini-flash", "claude-haiku", "gpt-4o-mini"}
        )
        names = [c.name for c in dispatcher.resolve(WorkCategory.QUICK_QUESTION, UserTier.FREE)]
        assert names == ["gemini-pro", "claude-sonnet"]

    def test_nothing_available(self, all_capabilities):
        """Test resolution fails when no capability is available at all."""
        dispatcher = self._dispatcher(all_capabilities, unavailable=set(all_capabilities))
        with pytest.raises(CapabilityUnavailable):
            dispatcher.resolve(WorkCategory.GENERATE_REPLY, UserTier.BASIC)
