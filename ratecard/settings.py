"""Engine settings — layered configuration and logging setup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ratecard.config import NORMAL_TOLERANCE_MINUTES

logger = logging.getLogger(__name__)

# Every configuration key the engine reads, with defaults
_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "RATECARD_ENV": {"default": "development", "description": "Environment profile"},
    "RATECARD_LOG_LEVEL": {"default": "INFO", "description": "Logging level for the ratecard logger"},
    "RATECARD_RULES_DB": {"default": ":memory:", "description": "SQLite rules database path"},
    "RATECARD_NORMAL_TOLERANCE": {
        "default": str(NORMAL_TOLERANCE_MINUTES),
        "description": "Minutes over the standard still graded normal",
    },
    "RATECARD_SUBSTRING_FALLBACK": {
        "default": "true",
        "description": "Allow the deprecated client substring match",
    },
    "RATECARD_HOLIDAY_COUNTRY": {"default": "CO", "description": "Country code for the holiday calendar"},
}

_PROFILES: dict[str, dict[str, str]] = {
    "development": {
        "RATECARD_ENV": "development",
        "RATECARD_LOG_LEVEL": "DEBUG",
    },
    "production": {
        "RATECARD_ENV": "production",
        "RATECARD_LOG_LEVEL": "WARNING",
        "RATECARD_RULES_DB": "rules.db",
    },
    "testing": {
        "RATECARD_ENV": "testing",
        "RATECARD_LOG_LEVEL": "DEBUG",
        "RATECARD_RULES_DB": ":memory:",
        "RATECARD_SUBSTRING_FALLBACK": "false",
    },
}

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigManager:
    """Read engine configuration from defaults, profiles, files and the environment."""

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Write ``.env.example`` listing every key with its default."""
        env_path = Path(project_path) / ".env.example"

        lines = ["# Rate card engine configuration", "# Copy to .env and adjust", ""]
        for key, info in _CONFIG_KEYS.items():
            lines.append(f"# {info['description']}")
            lines.append(f"{key}={info['default']}")
            lines.append("")

        env_path.write_text("\n".join(lines), encoding="utf-8")
        return env_path

    def load_config(self, project_path: str | Path) -> dict[str, str]:
        """Merge defaults -> profile -> .ratecard/config.json -> .env -> env vars."""
        root = Path(project_path)
        config = {key: str(info["default"]) for key, info in _CONFIG_KEYS.items()}

        env_name = os.environ.get("RATECARD_ENV", config["RATECARD_ENV"])
        config.update(_PROFILES.get(env_name, {}))

        config_json = root / ".ratecard" / "config.json"
        if config_json.is_file():
            try:
                data = json.loads(config_json.read_text(encoding="utf-8"))
                config.update({k: str(v) for k, v in data.items()})
            except (json.JSONDecodeError, OSError):
                logger.warning("Ignoring unreadable %s", config_json, exc_info=True)

        env_file = root / ".env"
        if env_file.is_file():
            for line in env_file.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                config[k.strip()] = v.strip()

        for key in _CONFIG_KEYS:
            env_val = os.environ.get(key)
            if env_val is not None:
                config[key] = env_val

        return config


class EngineSettings(BaseModel):
    """Typed view over the flat configuration dict."""

    env: str = "development"
    log_level: str = "INFO"
    rules_db: str = ":memory:"
    normal_tolerance_minutes: float = Field(default=NORMAL_TOLERANCE_MINUTES, ge=0)
    substring_fallback: bool = True
    holiday_country: str | None = "CO"
    """ISO country for Sunday/holiday surcharges; empty disables holidays."""

    @classmethod
    def from_config(cls, config: dict[str, str]) -> EngineSettings:
        return cls(
            env=config.get("RATECARD_ENV", "development"),
            log_level=config.get("RATECARD_LOG_LEVEL", "INFO").upper(),
            rules_db=config.get("RATECARD_RULES_DB", ":memory:"),
            normal_tolerance_minutes=float(
                config.get("RATECARD_NORMAL_TOLERANCE", NORMAL_TOLERANCE_MINUTES)
            ),
            substring_fallback=config.get("RATECARD_SUBSTRING_FALLBACK", "true").strip().lower() in _TRUTHY,
            holiday_country=config.get("RATECARD_HOLIDAY_COUNTRY", "CO").strip() or None,
        )

    @classmethod
    def load(cls, project_path: str | Path = ".") -> EngineSettings:
        return cls.from_config(ConfigManager().load_config(project_path))


def configure_logging(settings: EngineSettings) -> None:
    """Apply the configured level to the ``ratecard`` logger.

    Handlers are left to the host application.
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r; keeping current level", settings.log_level)
        return
    logging.getLogger("ratecard").setLevel(level)
