"""
Shared fixtures: scripted capabilities that stand in for provider SDKs.
"""

import asyncio
from typing import List, Optional, Sequence

import pytest

from flightdeck.core.dispatcher import Capability, CapabilityOutput
from flightdeck.core.pricing import CAPABILITY_CATALOG


class ScriptedCapability:
    """Callable invoke function that replays a script of replies or errors."""

    def __init__(
        self,
        name: str,
        replies: Sequence = ("Roger",),
        delay: float = 0.0,
        input_tokens: int = 100,
        output_tokens: int = 20,
    ):
        self.name = name
        self.replies = list(replies)
        self.delay = delay
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.calls: List[tuple] = []

    async def __call__(self, system_prompt, user_prompt, temperature, max_output_tokens):
        self.calls.append((system_prompt, user_prompt, temperature, max_output_tokens))
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, CapabilityOutput):
            return reply
        return CapabilityOutput(text=reply, input_tokens=self.input_tokens, output_tokens=self.output_tokens)

    def bind(self, available: bool = True) -> Capability:
        return Capability(
            descriptor=CAPABILITY_CATALOG.get(self.name),
            invoke=self,
            available=available,
        )


@pytest.fixture
def scripted():
    """Factory for scripted capabilities: scripted(name, replies=..., delay=...)."""
    def factory(name: str, replies: Optional[Sequence] = None, **kwargs) -> ScriptedCapability:
        return ScriptedCapability(name, replies if replies is not None else ("Roger",), **kwargs)
    return factory


@pytest.fixture
def all_capabilities(scripted):
    """One working scripted capability per catalog entry, keyed by name."""
    return {name: scripted(name, (f"reply from {name}",)) for name in CAPABILITY_CATALOG.names()}
