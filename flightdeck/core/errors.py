"""
Error taxonomy for the runtime.

Capability-level failures are absorbed by the dispatcher's fallback loop;
only exhaustion, configuration and session-reference errors reach callers.
"""

from typing import List, Optional

GENERIC_DISPATCH_FAILURE = "Unable to reach instructor/controller, try again."


class FlightDeckError(Exception):
    """Base class for runtime errors."""


class CapabilityUnavailable(FlightDeckError):
    """A capability has no usable credentials or configuration."""

    def __init__(self, message: str, capability: Optional[str] = None):
        super().__init__(message)
        self.capability = capability


class CapabilityInvocationFailed(FlightDeckError):
    """One attempt against a capability failed (timeout, transport, malformed reply)."""

    def __init__(self, capability: str, cause: BaseException):
        super().__init__(f"{capability} failed: {type(cause).__name__}: {cause}")
        self.capability = capability
        self.cause = cause


class DispatchExhausted(FlightDeckError):
    """Every candidate in the resolved preference list failed."""

    user_message = GENERIC_DISPATCH_FAILURE

    def __init__(self, category: str, attempted: List[str], last_error: Optional[BaseException]):
        super().__init__(
            f"All {len(attempted)} capabilities failed for {category}: {', '.join(attempted)}"
        )
        self.category = category
        self.attempted = list(attempted)
        self.last_error = last_error


class UnknownAirport(FlightDeckError):
    """The airport directory has no record for a code."""

    def __init__(self, code: str):
        super().__init__(f"Unknown airport: {code}")
        self.code = code


class InvalidSessionReference(FlightDeckError):
    """An operation referenced a session that was never started or has ended."""

    def __init__(self, session_id: str, reason: str = "not found"):
        super().__init__(f"Invalid session {session_id}: {reason}")
        self.session_id = session_id
        self.reason = reason
