"""Funnel API gateway adapters (visitor session side)."""

from lead_funnel.adapters.outbound.funnel_api.http_funnel_gateway import HttpFunnelGateway

__all__ = ["HttpFunnelGateway"]
