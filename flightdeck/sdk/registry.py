"""
Capability registry.

Binds every catalog entry to its provider adapter, using credentials from
the environment. Entries without credentials stay in the list as
unavailable capabilities so routing can skip them.
"""

import os
from typing import Dict, List, Mapping, Optional

from flightdeck.config.loader import ProviderConfig, RuntimeConfig
from flightdeck.core.dispatcher import Capability, CapabilityOutput
from flightdeck.core.errors import CapabilityUnavailable
from flightdeck.core.pricing import CAPABILITY_CATALOG, CapabilityCatalog, CapabilityDescriptor
from flightdeck.logging import get_logger

from .anthropic_client import anthropic_capability
from .openai_client import openai_capability

logger = get_logger(__name__)


def unavailable_capability(descriptor: CapabilityDescriptor, reason: str) -> Capability:
    """A capability that is skipped by routing and raises if called directly."""

    async def invoke(system_prompt: str, user_prompt: str, temperature: float, max_output_tokens: int) -> CapabilityOutput:
        raise CapabilityUnavailable(reason, capability=descriptor.name)

    return Capability(descriptor=descriptor, invoke=invoke, available=False)


def bind_capability(
    descriptor: CapabilityDescriptor,
    provider: Optional[ProviderConfig],
    environ: Mapping[str, str],
    timeout: float,
) -> Capability:
    if provider is None:
        return unavailable_capability(descriptor, f"Provider '{descriptor.provider}' is not configured")

    api_key = environ.get(provider.api_key_env, "")
    if not api_key.strip():
        return unavailable_capability(
            descriptor, f"{provider.api_key_env} is not set for {descriptor.name}"
        )

    if descriptor.provider == "anthropic":
        return anthropic_capability(descriptor, api_key, timeout=timeout)
    return openai_capability(descriptor, api_key, base_url=provider.base_url, timeout=timeout)


def build_capabilities(
    config: RuntimeConfig,
    environ: Optional[Mapping[str, str]] = None,
    catalog: CapabilityCatalog = CAPABILITY_CATALOG,
) -> List[Capability]:
    """Bind every catalog entry, reading API keys from ``environ`` (default os.environ)."""
    environ = os.environ if environ is None else environ
    capabilities = [
        bind_capability(
            descriptor,
            config.providers.get(descriptor.provider),
            environ,
            config.settings.timeout_seconds,
        )
        for descriptor in catalog.entries.values()
    ]
    availability: Dict[str, bool] = {c.name: c.available for c in capabilities}
    logger.info("capabilities_bound", **availability)
    return capabilities
