"""Domain error taxonomy."""

from typing import Optional


class LeadFunnelError(Exception):
    """Base class for funnel errors carrying an operator-facing detail."""

    error = "Lead funnel error"

    def __init__(self, details: str = "", error: Optional[str] = None) -> None:
        super().__init__(details or error or self.error)
        self.details = details
        if error:
            self.error = error


class ValidationError(LeadFunnelError):
    """Malformed input (bad phone/email format, missing required field)."""

    error = "Invalid request"


class NotFoundError(LeadFunnelError):
    """Referenced task or lead does not exist."""

    error = "Not found"


class ConfigurationError(LeadFunnelError):
    """A required setting or address could not be resolved."""

    error = "Configuration error"


class UpstreamFailure(LeadFunnelError):
    """The chat responder or conversation analyzer is unavailable."""

    error = "Upstream service unavailable"


class TransportFailure(LeadFunnelError):
    """The email transport rejected or failed to deliver a message."""

    error = "Failed to send email"


class ConflictRace(LeadFunnelError):
    """A concurrent insert already created the same lead identity."""

    error = "Lead already exists"
