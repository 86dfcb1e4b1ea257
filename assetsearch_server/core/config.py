import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

from .error import ConfigError
from ..models.schema import AUTH_API_KEY, AUTH_EMAIL_KEY, BackendDescriptor

FOFA = "fofa"
HUNTER = "hunter"
ALL_BACKENDS = (FOFA, HUNTER)

DEFAULT_FOFA_BASE_URL = "https://fofa.info/api/v1"
DEFAULT_HUNTER_BASE_URL = "https://hunter.qianxin.com/openApi/search"

DEFAULT_PAGE = 1
FOFA_DEFAULT_SIZE = 50
HUNTER_DEFAULT_SIZE = 20
DEFAULT_HTTP_TIMEOUT = 30.0
MIN_HTTP_TIMEOUT = 1.0


def get_fofa_base_url() -> str:
    """
    - FOFA_BASE_URL: override for the FOFA API root (default https://fofa.info/api/v1)
    """
    return (os.getenv("FOFA_BASE_URL") or "").strip().rstrip("/") or DEFAULT_FOFA_BASE_URL


def get_hunter_base_url() -> str:
    """
    - HUNTER_BASE_URL: override for the Hunter search endpoint
    """
    return (os.getenv("HUNTER_BASE_URL") or "").strip().rstrip("/") or DEFAULT_HUNTER_BASE_URL


def get_http_timeout() -> float:
    """
    Deadline for one outbound search call.
    - ASSET_SEARCH_HTTP_TIMEOUT: seconds (default 30, at least 1)
    """
    raw = (os.getenv("ASSET_SEARCH_HTTP_TIMEOUT") or "").strip()
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"ASSET_SEARCH_HTTP_TIMEOUT must be a number, got {raw!r}")
    return max(MIN_HTTP_TIMEOUT, value)


def get_log_dir() -> Path:
    """
    - ASSET_SEARCH_LOG_DIR: directory for the default log file (default: cwd)
    """
    log_dir = os.getenv("ASSET_SEARCH_LOG_DIR")
    if log_dir:
        return Path(log_dir)
    return Path.cwd()


@dataclass(frozen=True)
class ServerConfig:
    backends: Dict[str, BackendDescriptor] = field(default_factory=dict)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def _pick(value: Optional[str], env_key: str) -> str:
    if value is not None and value.strip():
        return value.strip()
    return (os.getenv(env_key) or "").strip()


def parse_backend_names(raw: Optional[str]) -> list:
    if not raw or not raw.strip():
        return list(ALL_BACKENDS)
    names = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        if name not in ALL_BACKENDS:
            raise ConfigError(f"Unknown backend {name!r}; expected one of {', '.join(ALL_BACKENDS)}")
        if name not in names:
            names.append(name)
    if not names:
        raise ConfigError("At least one backend must be enabled")
    return names


def load_server_config(
    backends: Iterable[str] = ALL_BACKENDS,
    fofa_email: Optional[str] = None,
    fofa_key: Optional[str] = None,
    hunter_key: Optional[str] = None,
) -> ServerConfig:
    """
    Build the process-wide configuration once at startup.

    Credentials given explicitly win over FOFA_EMAIL / FOFA_KEY /
    HUNTER_API_KEY from the environment. A missing credential for an
    enabled backend raises ConfigError.
    """
    descriptors: Dict[str, BackendDescriptor] = {}
    for name in backends:
        if name == FOFA:
            email = _pick(fofa_email, "FOFA_EMAIL")
            key = _pick(fofa_key, "FOFA_KEY")
            if not email or not key:
                raise ConfigError(
                    "FOFA email and key are required (--fofa-email/--fofa-key or FOFA_EMAIL/FOFA_KEY)"
                )
            descriptors[FOFA] = BackendDescriptor(
                id=FOFA,
                base_url=get_fofa_base_url(),
                auth_scheme=AUTH_EMAIL_KEY,
                credentials={"email": email, "key": key},
            )
        elif name == HUNTER:
            key = _pick(hunter_key, "HUNTER_API_KEY")
            if not key:
                raise ConfigError("Hunter API key is required (--hunter-key or HUNTER_API_KEY)")
            descriptors[HUNTER] = BackendDescriptor(
                id=HUNTER,
                base_url=get_hunter_base_url(),
                auth_scheme=AUTH_API_KEY,
                credentials={"api_key": key},
            )
        else:
            raise ConfigError(f"Unknown backend {name!r}")

    return ServerConfig(backends=descriptors, http_timeout=get_http_timeout())
