"""
Anthropic capability adapter.

Binds a Claude catalog entry to an async call through the Anthropic SDK.
"""

from typing import Optional

from anthropic import AsyncAnthropic

from ..core.dispatcher import Capability, CapabilityOutput
from ..core.pricing import CapabilityDescriptor


def anthropic_capability(
    descriptor: CapabilityDescriptor,
    api_key: str,
    timeout: float = 30.0,
    client: Optional[AsyncAnthropic] = None,
) -> Capability:
    """Create a capability that calls the Anthropic Messages API.

    Args:
        descriptor: Catalog entry with the Claude model id
        api_key: Anthropic API key (required)
        timeout: HTTP timeout in seconds
        client: Pre-built client, mainly for tests

    Raises:
        ValueError: If api_key is missing/empty
    """
    if not api_key or not api_key.strip():
        raise ValueError("api_key is required and cannot be empty")
    client = client or AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def invoke(system_prompt: str, user_prompt: str, temperature: float, max_output_tokens: int) -> CapabilityOutput:
        response = await client.messages.create(
            model=descriptor.model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
            max_tokens=max_output_tokens,
        )

        usage = response.usage
        if not usage:
            raise ValueError("Anthropic response missing usage information")
        text = response.content[0].text if response.content else ""
        if not text:
            raise ValueError("Anthropic response contains no text")

        return CapabilityOutput(
            text=text,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )

    return Capability(descriptor=descriptor, invoke=invoke, available=True)
