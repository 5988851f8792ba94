"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    debug_mode: bool = False
    task_repository: str = "in_memory"  # in_memory or postgres
    lead_repository: str = "in_memory"  # in_memory or postgres
    conversation_repository: str = "in_memory"  # in_memory or postgres
    database_url: str = ""  # Required when any repository is set to postgres
    llm_enabled: bool = False
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 20
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    resend_from_email: str = "Magnt.AI <leads@magnt.ai>"
    email_timeout_seconds: int = 10
    site_url: str = "https://magnt.ai"
    redis_url: str = "redis://localhost:6379/0"
    notification_lock_backend: str = "memory"  # memory or redis
    notification_lock_ttl_seconds: int = 60
    analysis_min_turns: int = 4
    capture_trigger_turns: int = 2

    # Visitor session (page side)
    funnel_api_base_url: str = "http://localhost:8000"
    funnel_api_timeout_seconds: int = 30
    beacon_timeout_seconds: float = 2.0
    inactivity_timeout_seconds: float = 120.0
    hidden_confirmation_seconds: float = 5.0
    identity_cache: str = "file"  # file, redis or in_memory
    identity_cache_dir: str = ".lead_funnel/profiles"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
    )


settings = Settings()
