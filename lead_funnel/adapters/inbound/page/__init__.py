"""Visitor page inbound adapter."""

from lead_funnel.adapters.inbound.page.visitor_page import VisitorPage

__all__ = ["VisitorPage"]
