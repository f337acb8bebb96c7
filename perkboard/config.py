from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlparse

DEFAULT_API_URL = "https://provendeals.getproven.com/api/ext/v1"
DEFAULT_USER_AGENT = "perkboard/0.1 (+https://localhost; contact=local)"
PLACEHOLDER_TOKENS = frozenset({"mock_token"})


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any) -> float | None:
    text = _clean(value)
    return float(text) if text is not None else None


@dataclass(frozen=True, slots=True)
class GetProvenSettings:
    """Connection settings for the GetProven catalog API.

    A missing `api_token` is allowed here; the client refuses to send requests
    without one and raises `ConfigurationError` at call time.
    """

    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout_seconds: float | None = None
    max_retries: int = 0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"api_url must be an absolute http(s) URL (received {self.api_url!r}).")
        if self.timeout_seconds is not None:
            if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
                raise ValueError("timeout_seconds must be a positive number when set.")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0.")

    @property
    def has_token(self) -> bool:
        return bool(self.api_token) and self.api_token not in PLACEHOLDER_TOKENS

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> GetProvenSettings:
        values = payload or {}
        defaults = cls()
        token = _clean(values.get("api_token"))
        if token in PLACEHOLDER_TOKENS:
            token = None
        return cls(
            api_url=(_clean(values.get("api_url")) or defaults.api_url).rstrip("/"),
            api_token=token,
            timeout_seconds=_optional_float(values.get("timeout_seconds")),
            max_retries=int(_clean(values.get("max_retries")) or defaults.max_retries),
            user_agent=_clean(values.get("user_agent")) or defaults.user_agent,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GetProvenSettings:
        env = os.environ if environ is None else environ
        return cls.from_mapping(
            {
                "api_url": env.get("GETPROVEN_API_URL"),
                "api_token": env.get("GETPROVEN_API_TOKEN"),
                "timeout_seconds": env.get("GETPROVEN_TIMEOUT_SECONDS"),
                "max_retries": env.get("GETPROVEN_MAX_RETRIES"),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_url": self.api_url,
            "has_token": self.has_token,
            "timeout_seconds": self.timeout_seconds,
            "max_retries": self.max_retries,
            "user_agent": self.user_agent,
        }
