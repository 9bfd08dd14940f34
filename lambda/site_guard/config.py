"""Settings resolved once per invocation from the Lambda environment."""

import math
import os
from dataclasses import dataclass

from site_guard.errors import ConfigError

TRUTHY = ("on", "true", "1", "yes")


@dataclass(frozen=True)
class Settings:
    website_url: str
    instance_id: str
    request_timeout: float = 10.0
    metric_namespace: str = "WebsiteMonitoring"
    stop_wait_seconds: float = 300.0
    stop_poll_seconds: float = 5.0
    region: str = ""
    fail_on_error: bool = True


def fail_on_error(environ=None):
    """Whether a failed run should be raised to Lambda. Defaults to on."""
    if environ is None:
        environ = os.environ
    return (environ.get("FAIL_ON_ERROR") or "true").strip().lower() in TRUTHY


def _required(environ, name, fallback):
    value = (environ.get(name) or environ.get(fallback) or "").strip()
    if not value:
        raise ConfigError(f"{name} environment variable not set")
    return value


def _positive_float(environ, name, default):
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(environ=None):
    """Build ``Settings`` from ``environ`` (defaults to ``os.environ``).

    WEBSITE_URL and INSTANCE_ID are required; the TF_VAR_ names the
    Terraform module exports are accepted as fallbacks.
    """
    if environ is None:
        environ = os.environ
    website_url = _required(environ, "WEBSITE_URL", "TF_VAR_website_url")
    instance_id = _required(environ, "INSTANCE_ID", "TF_VAR_instance_id")
    return Settings(
        website_url=website_url,
        instance_id=instance_id,
        request_timeout=_positive_float(environ, "REQUEST_TIMEOUT", 10.0),
        metric_namespace=(environ.get("METRIC_NAMESPACE") or "").strip() or "WebsiteMonitoring",
        stop_wait_seconds=_positive_float(environ, "STOP_WAIT_SECONDS", 300.0),
        stop_poll_seconds=_positive_float(environ, "STOP_POLL_SECONDS", 5.0),
        region=(environ.get("REGION") or "").strip(),
        fail_on_error=fail_on_error(environ),
    )
