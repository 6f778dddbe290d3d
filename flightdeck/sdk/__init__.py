"""
Provider adapters that turn catalog entries into callable capabilities.
"""

from .anthropic_client import anthropic_capability
from .openai_client import openai_capability
from .registry import build_capabilities

__all__ = ["anthropic_capability", "build_capabilities", "openai_capability"]
