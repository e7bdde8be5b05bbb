"""Runtime settings for report builds, resolved from YAML and environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

HOME_ENV_VAR = "SIMREPORT_HOME"
TEMP_DIR_ENV_VAR = "SIMREPORT_TEMP_DIR"
CONSOLE_ENV_VAR = "SIMREPORT_CONSOLE"
HOME_TEMP_SUBDIR = "tmp"

DEFAULT_TEMP_DIR = "/tmp/simreport"
DEFAULT_PLOT_TIMEOUT = 120.0
DEFAULT_IMAGE_FORMAT = "png"


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in {"1", "true", "yes", "on"}:
        return True
    if token in {"0", "false", "no", "off"}:
        return False
    return default


def _resolve_temp_dir(config: dict[str, Any]) -> Path:
    """Pick the temp location.

    Priority: ``SIMREPORT_TEMP_DIR``, then ``$SIMREPORT_HOME/tmp``, then the
    ``temp_dir`` config key.
    """
    explicit = os.environ.get(TEMP_DIR_ENV_VAR, "").strip()
    if explicit:
        return Path(explicit).expanduser()
    home = os.environ.get(HOME_ENV_VAR, "").strip()
    if home:
        return Path(home).expanduser() / HOME_TEMP_SUBDIR
    return Path(config.get("temp_dir") or DEFAULT_TEMP_DIR).expanduser()


@dataclass(frozen=True)
class ReportSettings:
    temp_dir: Path
    output_to_console: bool = True
    isolate_temp: bool = True
    n_jobs: int = 1
    plot_timeout: float | None = DEFAULT_PLOT_TIMEOUT
    image_format: str = DEFAULT_IMAGE_FORMAT
    attribute_catalog: Path | None = None
    log_dir: Path | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> ReportSettings:
        """Build settings from a parsed ``config.yml`` dictionary."""
        config = config or {}

        output_to_console = _as_bool(config.get("output_to_console"), True)
        env_console = os.environ.get(CONSOLE_ENV_VAR)
        if env_console is not None:
            output_to_console = _as_bool(env_console, output_to_console)

        timeout = config.get("plot_timeout", DEFAULT_PLOT_TIMEOUT)
        if timeout is not None:
            timeout = float(timeout)
            if timeout <= 0:
                timeout = None

        catalog = config.get("attribute_catalog")
        log_dir = config.get("log_dir")

        return cls(
            temp_dir=_resolve_temp_dir(config),
            output_to_console=output_to_console,
            isolate_temp=_as_bool(config.get("isolate_temp"), True),
            n_jobs=int(config.get("n_jobs", 1)),
            plot_timeout=timeout,
            image_format=str(config.get("image_format") or DEFAULT_IMAGE_FORMAT),
            attribute_catalog=Path(catalog).expanduser() if catalog else None,
            log_dir=Path(log_dir).expanduser() if log_dir else None,
        )
