"""Configuration management for the telemetry reporter."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "PERCONA_"
DISABLE_ENV_VAR = f"{ENV_PREFIX}TELEMETRY_DISABLE"

DEFAULT_CONFIG_FILE_PATH = Path("/usr/local/percona/telemetry_uuid")
DEFAULT_TELEMETRY_URL = "https://check-dev.percona.com/v1/telemetry/GenericReport"
DEFAULT_SEND_TIMEOUT = 10.0


def is_disabled(value: str | None) -> bool:
    """Return True when the master disable switch holds anything but ``0``."""
    if value is None:
        return False
    value = value.strip()
    return bool(value) and value != "0"


def env_var_name(field_name: str) -> str:
    """Environment variable that feeds a settings field."""
    return f"{ENV_PREFIX}{field_name.upper()}"


class Settings(BaseSettings):
    """Reporter settings loaded from ``PERCONA_*`` environment variables.

    Command-line flags are passed as init arguments and take precedence over
    the environment. Required report fields default to empty strings so that
    their absence is reported by the report builder rather than at load time.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # Report contents
    product_family: str = Field(default="", description="Product family identifier")
    product_version: str = Field(default="", description="Product version")
    operating_system: str = Field(
        default="", description="Operating system descriptor (autodetected when empty)"
    )
    deployment_method: str = Field(default="", description="Deployment method")
    instance_id: str = Field(
        default="", description="Instance UUID used when no valid one is stored"
    )

    # Storage and transport
    telemetry_config_file_path: Path = Field(
        default=DEFAULT_CONFIG_FILE_PATH,
        description="File holding the instance id and reported product families",
    )
    telemetry_url: str = Field(
        default=DEFAULT_TELEMETRY_URL, description="Telemetry collection endpoint"
    )
    send_timeout: float = Field(
        default=DEFAULT_SEND_TIMEOUT, gt=0, description="Send timeout in seconds"
    )

    # Application
    telemetry_disable: str = Field(default="0", description="Master disable switch")
    log_level: str = Field(default="WARNING", description="Logging level")

    @property
    def disabled(self) -> bool:
        """Check whether telemetry collection is switched off."""
        return is_disabled(self.telemetry_disable)

