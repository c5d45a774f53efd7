"""Application settings using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Graph store (Apache AGE on PostgreSQL)
    database_url: str | None = None
    age_graph_name: str = Field(
        default="schematic",
        description="Name of the AGE graph holding the schematic designs",
    )
    store_query_timeout_seconds: float = Field(
        default=10.0,
        description="statement_timeout applied to every graph store query (seconds)",
    )

    # Search Settings
    search_limit: int = Field(
        default=10,
        description="Maximum results per namespace for plain search",
    )
    connected_search_limit: int = Field(
        default=10,
        description="Maximum nodes returned by connected search",
    )
    connected_enumeration_limit: int = Field(
        default=100,
        description="Maximum nodes returned when enumerating connected nodes",
    )

    # Traversal Settings
    path_max_paths: int = Field(
        default=10,
        description="Maximum number of paths collected by path search",
    )
    path_max_depth: int = Field(
        default=32,
        description="Maximum number of hops in a single path",
    )
    traversal_max_expansions: int = Field(
        default=20000,
        description="Maximum neighbor visits per traversal before giving up",
    )
    traversal_timeout_seconds: float = Field(
        default=5.0,
        description="Wall-clock budget for a single traversal (seconds, 0 disables)",
    )
    traversal_skip_nets: str = Field(
        default="",
        description="Comma-separated net names never traversed (e.g. 'GND,VCC')",
    )

    # OpenTelemetry
    otel_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry trace export",
    )
    otel_service_name: str = Field(
        default="netscope",
        description="Service name reported to the OTLP collector",
    )
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint",
    )
    otel_traces_sampler: str = Field(
        default="parentbased_traceidratio",
        description="Sampler: always_on, always_off, traceidratio, parentbased_traceidratio",
    )
    otel_traces_sampler_arg: float = Field(
        default=1.0,
        description="Sampling ratio for ratio based samplers",
    )

    @property
    def skip_nets(self) -> frozenset[str]:
        """Normalized set of nets excluded from traversal."""
        return frozenset(
            name.strip().upper() for name in self.traversal_skip_nets.split(",") if name.strip()
        )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
