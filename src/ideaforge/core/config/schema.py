from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class InstanceConfig(_Frozen):
    name: str = "ideaforge"


class RuntimeConfig(_Frozen):
    max_retries: int = Field(default=5, ge=0)
    base_delay_seconds: float = Field(default=0.5, ge=0.0)
    jitter_seconds: float = Field(default=0.2, ge=0.0)
    request_timeout_seconds: float = 60.0
    title_fallback_chars: int = 80


class TelemetryConfig(_Frozen):
    log_level: str = "INFO"
    json_logs: bool = True


class DatabaseConfig(_Frozen):
    url: str = "sqlite:///ideaforge.db"


class RateLimitConfig(_Frozen):
    enabled: bool = True
    api_window_seconds: int = 15 * 60
    api_max_requests: int = 100
    ai_window_seconds: int = 60
    ai_max_requests: int = 10


class ProviderConfig(_Frozen):
    enabled: bool = True
    base_url: str | None = None
    api_key_env: str | None = None
    api_key: str | None = Field(default=None, repr=False)
    model: str = ""
    temperature: float = 0.7
    timeout_seconds: float = 60.0

    def has_credential(self) -> bool:
        return bool((self.api_key or "").strip())


class ProvidersConfig(_Frozen):
    preferred: str | None = None
    local: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(model="llama3.2", temperature=0.7)
    )
    cloud_primary: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            base_url="https://generativelanguage.googleapis.com/v1beta/models",
            api_key_env="GEMINI_API_KEY",
            model="gemini-2.0-flash",
        )
    )
    cloud_secondary: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            base_url="https://api.openai.com/v1",
            api_key_env="OPENAI_API_KEY",
            model="gpt-3.5-turbo",
            temperature=0.9,
        )
    )
    tertiary: ProviderConfig = Field(
        default_factory=lambda: ProviderConfig(
            base_url="https://router.huggingface.co",
            api_key_env="HUGGINGFACE_API_KEY",
            model="gpt2",
        )
    )


class RoutingConfig(_Frozen):
    inspire: list[str] = Field(default_factory=lambda: ["local", "cloud_primary", "cloud_secondary", "tertiary"])
    synthesize: list[str] = Field(default_factory=lambda: ["cloud_primary", "local", "cloud_secondary", "tertiary"])
    critique: list[str] = Field(default_factory=lambda: ["cloud_primary", "local", "cloud_secondary", "tertiary"])
    refine_title: list[str] = Field(default_factory=lambda: ["local", "cloud_primary", "cloud_secondary", "tertiary"])


class AppConfig(_Frozen):
    instance: InstanceConfig = Field(default_factory=InstanceConfig)
    environment: str = "dev"
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)

    @property
    def production(self) -> bool:
        return self.environment.strip().lower() == "production"
