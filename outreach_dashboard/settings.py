import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "https://api.instantly.ai/api/v2"


class ConfigurationError(RuntimeError):
    """Required configuration is missing. Not retryable."""


@dataclass(frozen=True)
class ClientSettings:
    # Credential used by the dashboard's own analytics client
    api_key: str
    api_base_url: str


@dataclass(frozen=True)
class ProxySettings:
    # Server-held credential; None means the proxy answers 500
    api_key: Optional[str]
    api_base_url: str


@dataclass(frozen=True)
class AppSettings:
    secret_key: str
    log_level: str
    log_dir: str


def _base_url() -> str:
    return os.getenv("INSTANTLY_API_BASE_URL", DEFAULT_API_BASE_URL).strip().rstrip("/")


def get_client_settings() -> ClientSettings:
    load_dotenv()  # reads .env if present

    api_key = os.getenv("DASHBOARD_INSTANTLY_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError(
            "DASHBOARD_INSTANTLY_API_KEY is not set in environment variables"
        )

    return ClientSettings(api_key=api_key, api_base_url=_base_url())


def get_proxy_settings() -> ProxySettings:
    load_dotenv()

    return ProxySettings(
        api_key=os.getenv("INSTANTLY_API_KEY", "").strip() or None,
        api_base_url=_base_url(),
    )


def get_app_settings() -> AppSettings:
    load_dotenv()

    return AppSettings(
        secret_key=os.getenv("DASHBOARD_SECRET_KEY", "dev-secret-key-change-in-production"),
        log_level=os.getenv("DASHBOARD_LOG_LEVEL", "INFO").strip().upper(),
        log_dir=os.getenv("DASHBOARD_LOG_DIR", "logs"),
    )
