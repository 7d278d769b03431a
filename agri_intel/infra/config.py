from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_AGENT_ID = "agri-intel-primary-agent"


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    algolia_app_id: Optional[str] = Field(
        default=None, validation_alias="ALGOLIA_APP_ID"
    )
    algolia_write_key: Optional[str] = Field(
        default=None, validation_alias="ALGOLIA_WRITE_KEY"
    )
    algolia_search_key: Optional[str] = Field(
        default=None, validation_alias="ALGOLIA_SEARCH_KEY"
    )
    algolia_agent_id: Optional[str] = Field(
        default=None, validation_alias="ALGOLIA_AGENT_ID"
    )
    algolia_timeout_seconds: float = Field(
        default=10.0, validation_alias="ALGOLIA_TIMEOUT_SECONDS"
    )
    response_cache_store: str = Field(
        default="memory", validation_alias="RESPONSE_CACHE_STORE"
    )
    response_cache_ttl_seconds: int = Field(
        default=300, validation_alias="RESPONSE_CACHE_TTL_SECONDS"
    )
    admin_api_key: Optional[str] = Field(
        default=None, validation_alias="ADMIN_API_KEY"
    )
    log_path: Optional[str] = Field(default=None, validation_alias="LOG_PATH")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    fastapi_port: int = Field(default=8000, validation_alias="FASTAPI_PORT")

    otel_service_name: str = Field(
        default="agri-intel", validation_alias="OTEL_SERVICE_NAME"
    )
    otel_exporter_otlp_endpoint: Optional[str] = Field(
        default=None, validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    otel_exporter_otlp_traces_endpoint: Optional[str] = Field(
        default=None, validation_alias="OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"
    )
    otel_exporter_otlp_logs_endpoint: Optional[str] = Field(
        default=None, validation_alias="OTEL_EXPORTER_OTLP_LOGS_ENDPOINT"
    )
    otel_exporter_otlp_protocol: str = Field(
        default="grpc", validation_alias="OTEL_EXPORTER_OTLP_PROTOCOL"
    )
    otel_exporter_otlp_headers: Optional[str] = Field(
        default=None, validation_alias="OTEL_EXPORTER_OTLP_HEADERS"
    )
    otel_resource_attributes: Optional[str] = Field(
        default=None, validation_alias="OTEL_RESOURCE_ATTRIBUTES"
    )
    otel_traces_exporter: str = Field(
        default="otlp", validation_alias="OTEL_TRACES_EXPORTER"
    )
    otel_logs_exporter: str = Field(
        default="otlp", validation_alias="OTEL_LOGS_EXPORTER"
    )

    @field_validator(
        "algolia_app_id",
        "algolia_write_key",
        "algolia_search_key",
        "algolia_agent_id",
        "admin_api_key",
        "otel_exporter_otlp_endpoint",
        "otel_exporter_otlp_traces_endpoint",
        "otel_exporter_otlp_logs_endpoint",
        mode="after",
    )
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator(
        "response_cache_store", "otel_exporter_otlp_protocol", mode="after"
    )
    @classmethod
    def lowercase(cls, value: str) -> str:
        return value.strip().lower() if value else value

    @field_validator("log_level", mode="after")
    @classmethod
    def uppercase_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @property
    def search_configured(self) -> bool:
        return bool(self.algolia_app_id and self.algolia_write_key)

    @property
    def agent_studio_configured(self) -> bool:
        return bool(self.search_configured and self.algolia_agent_id)

    @property
    def agent_id(self) -> str:
        return self.algolia_agent_id or DEFAULT_AGENT_ID

    @property
    def masked_app_id(self) -> Optional[str]:
        if not self.algolia_app_id:
            return None
        return "***" + self.algolia_app_id[-4:]


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig()
