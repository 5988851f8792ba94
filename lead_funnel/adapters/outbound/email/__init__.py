"""Email transport adapters."""

from lead_funnel.adapters.outbound.email.resend_email_transport import ResendEmailTransport
from lead_funnel.adapters.outbound.email.unconfigured_email_transport import (
    UnconfiguredEmailTransport,
)

__all__ = [
    "ResendEmailTransport",
    "UnconfiguredEmailTransport",
]
