from __future__ import annotations
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class SlackConfig(BaseModel):
    bot_token: str = Field(default="", description="Bot user OAuth token (xoxb-...).")
    signing_secret: str = Field(default="", description="Signing secret used to verify webhook requests.")

class TenantConfig(BaseModel):
    api_key: str = Field(default="", description="Key presented by callers of /api/send for this tenant.")
    slack: SlackConfig | None = None

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CONDUIT_", env_file=".env", extra="ignore")

    # Core
    sqlite_path: str = Field(default="./data/conduit.sqlite")

    # Network
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3100)
    external_url: str = Field(default="http://localhost:3100", description="Public base URL that platforms call back.")
    metrics_path: str = Field(default="/metrics")
    health_path: str = Field(default="/healthz")

    # Delivery
    typing_delay_ms: int = Field(default=1000, description="Default simulated typing delay.")

    # Tenants (JSON in CONDUIT_TENANTS)
    tenants: dict[str, TenantConfig] = Field(default_factory=dict)

    # Logging
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

def load_settings() -> Settings:
    return Settings()
