"""
OpenAI-compatible capability adapter.

Serves both OpenAI models and Gemini models through Google's
OpenAI-compatible endpoint.
"""

from typing import Optional

from openai import AsyncOpenAI

from ..core.dispatcher import Capability, CapabilityOutput
from ..core.pricing import CapabilityDescriptor


def openai_capability(
    descriptor: CapabilityDescriptor,
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 30.0,
    client: Optional[AsyncOpenAI] = None,
) -> Capability:
    """Create a capability that calls chat completions.

    Args:
        descriptor: Catalog entry with the model id
        api_key: API key for the endpoint (required)
        base_url: Endpoint override (Gemini's OpenAI-compatible URL for google)
        timeout: HTTP timeout in seconds
        client: Pre-built client, mainly for tests

    Raises:
        ValueError: If api_key is missing/empty
    """
    if not api_key or not api_key.strip():
        raise ValueError("api_key is required and cannot be empty")
    client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    async def invoke(system_prompt: str, user_prompt: str, temperature: float, max_output_tokens: int) -> CapabilityOutput:
        response = await client.chat.completions.create(
            model=descriptor.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
        )

        usage = response.usage
        if not usage:
            raise ValueError("OpenAI response missing usage information")
        if not response.choices or not response.choices[0].message.content:
            raise ValueError("OpenAI response contains no text")

        return CapabilityOutput(
            text=response.choices[0].message.content,
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
        )

    return Capability(descriptor=descriptor, invoke=invoke, available=True)
