"""Where the coordination service lives."""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:3002"
DEFAULT_TIMEOUT = 30.0

URL_ENV = "MUTEX_URL"
TIMEOUT_ENV = "MUTEX_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    """Validated service address and request timeout."""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self._validate_base_url(self.base_url)
        if not 0 < self.timeout < math.inf:
            raise ConfigurationError(f"Request timeout must be a positive number, got {self.timeout!r}")

    @staticmethod
    def _validate_base_url(base_url: str) -> None:
        try:
            url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Invalid service URL {base_url!r}: {e}")
        if url.scheme not in ("http", "https"):
            raise ConfigurationError(f"Service URL must use http or https: {base_url!r}")
        if not url.host:
            raise ConfigurationError(f"Service URL has no host: {base_url!r}")

    @classmethod
    def load(
        cls,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        environ: Mapping[str, str] = None,
    ) -> "Settings":
        """Resolve settings from explicit values, then the environment, then defaults."""
        environ = os.environ if environ is None else environ

        if base_url is None:
            base_url = environ.get(URL_ENV) or DEFAULT_BASE_URL

        if timeout is None:
            raw = environ.get(TIMEOUT_ENV)
            try:
                timeout = float(raw) if raw else DEFAULT_TIMEOUT
            except ValueError:
                raise ConfigurationError(f"{TIMEOUT_ENV} must be a number, got {raw!r}")

        return cls(base_url=base_url, timeout=timeout)
