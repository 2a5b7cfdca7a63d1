"""
Runtime settings for pkghealth.

Settings are plain values passed into the collectors and the report
generator. ``Settings.from_env`` reads overrides from ``PKGHEALTH_*``
environment variables; the CLI exposes the same values as options.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from pkghealth import __version__
from pkghealth.core.exceptions import ValidationError

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_NPMS_URL = "https://api.npms.io/v2"
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    """Endpoints, timeouts and logging level for one analysis run."""

    registry_url: str = DEFAULT_REGISTRY_URL
    npms_url: str = DEFAULT_NPMS_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = f"pkghealth/{__version__}"
    audit_project_dir: Optional[Path] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``PKGHEALTH_*`` environment variables.

        Raises:
            ValidationError: If ``PKGHEALTH_TIMEOUT`` is not a positive number.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        timeout = settings.timeout
        if raw := env.get("PKGHEALTH_TIMEOUT"):
            try:
                timeout = float(raw)
            except ValueError:
                raise ValidationError("PKGHEALTH_TIMEOUT", raw, "must be a number of seconds")
            if timeout <= 0:
                raise ValidationError("PKGHEALTH_TIMEOUT", raw, "must be positive")

        audit_dir = env.get("PKGHEALTH_AUDIT_DIR")

        return replace(
            settings,
            registry_url=env.get("PKGHEALTH_REGISTRY_URL", settings.registry_url).rstrip("/"),
            npms_url=env.get("PKGHEALTH_NPMS_URL", settings.npms_url).rstrip("/"),
            timeout=timeout,
            audit_project_dir=Path(audit_dir) if audit_dir else None,
            log_level=env.get("PKGHEALTH_LOG_LEVEL", settings.log_level).upper(),
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with the non-None overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)
