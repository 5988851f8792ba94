"""Lead repository adapters."""

from lead_funnel.adapters.outbound.lead.lead_repository import InMemoryLeadRepository
from lead_funnel.adapters.outbound.lead.postgres_lead_repository import PostgresLeadRepository

__all__ = [
    "InMemoryLeadRepository",
    "PostgresLeadRepository",
]
