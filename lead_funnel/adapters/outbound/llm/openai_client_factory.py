"""Shared OpenAI SDK client construction."""

from typing import Optional

from openai import OpenAI

from lead_funnel.infrastructure.config.settings import settings


def build_openai_client(
    api_key: Optional[str] = None, timeout_seconds: Optional[int] = None
) -> OpenAI:
    """
    Build an OpenAI SDK client.

    Args:
        api_key: OpenAI API key (defaults to settings.openai_api_key)
        timeout_seconds: Request timeout (defaults to settings.openai_timeout_seconds)

    Returns:
        Configured OpenAI client

    Raises:
        ValueError: If no API key is available
    """
    key = api_key or settings.openai_api_key
    if not key:
        raise ValueError("OpenAI API key is required")
    return OpenAI(
        api_key=key,
        timeout=timeout_seconds or settings.openai_timeout_seconds,
        max_retries=1,
    )
