"""spcalendar_expander.config_loader

Lightweight config loader for spcalendar_expander.

- Reads YAML (PyYAML) or JSON, chosen by file suffix.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# SharePoint's documented ceiling for series without an explicit end
DEFAULT_IMPLICIT_INSTANCE_CAP = 999


@dataclass
class Config:
    """Typed configuration for spcalendar_expander.

    Fields:
        implicit_instance_cap: occurrences generated for rules without an explicit end
        log_level: logging level name
    """

    implicit_instance_cap: int = DEFAULT_IMPLICIT_INSTANCE_CAP
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int; a non-positive cap falls back to
        the default. Coercions are logged as warnings.
        """
        if data is None:
            data = {}

        raw_cap = data.get("implicit_instance_cap", DEFAULT_IMPLICIT_INSTANCE_CAP)
        try:
            cap = int(raw_cap)
        except (TypeError, ValueError):
            logger.warning(
                "Config implicit_instance_cap=%r is not an int; using default %d",
                raw_cap,
                DEFAULT_IMPLICIT_INSTANCE_CAP,
            )
            cap = DEFAULT_IMPLICIT_INSTANCE_CAP
        if cap < 1:
            logger.warning("implicit_instance_cap %d below minimum; using default", cap)
            cap = DEFAULT_IMPLICIT_INSTANCE_CAP

        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(implicit_instance_cap=cap, log_level=log_level)


def _load_yaml_or_json(path: Path) -> Any:
    """Load a mapping from a YAML or JSON file.

    `yaml` is imported lazily to keep package import cost low.
    """
    text = path.read_text()
    if path.suffix.lower() == ".json":
        return json.loads(text)

    import yaml  # noqa: PLC0415

    loaded = yaml.safe_load(text)
    # safe_load returns None for empty files
    if loaded is None:
        return {}
    return loaded


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file. If not provided the default is
              ./spcalendar_expander.yaml (relative to current working dir).

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns Config() with defaults.
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    p = Path(path) if path else Path.cwd() / "spcalendar_expander.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config()

    raw = _load_yaml_or_json(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    cfg = Config.from_dict(raw)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
