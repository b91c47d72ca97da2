"""Process-wide settings for the ConnectWise PSA integration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConnectWiseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="CONNECTWISE_"
    )

    api_path: str = Field(
        default="/v4_6_release/apis/3.0", description="REST API root under base_url"
    )
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    search_page_size: int = Field(default=25, gt=0, le=1000)


_connectwise_settings: ConnectWiseSettings | None = None


def get_connectwise_settings() -> ConnectWiseSettings:
    global _connectwise_settings
    if _connectwise_settings is None:
        _connectwise_settings = ConnectWiseSettings()
    return _connectwise_settings


def set_connectwise_settings(settings: ConnectWiseSettings) -> None:
    global _connectwise_settings
    _connectwise_settings = settings
