"""
Violin settings persistence (platformdirs + JSON).

Persisted items (schema v1):
- settings: ViolinSettings dict representation

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Unknown keys in loaded JSON are ignored with warnings
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from violinkit.utils.logging import get_logger
from violinkit.violin.settings import ViolinSettings

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1


@dataclass
class ViolinConfigData:
    """
    JSON-serializable config payload.

    Schema v1:
    - settings: Dict[str, Any] - ViolinSettings.to_dict()
    """
    schema_version: int = SCHEMA_VERSION
    settings: Dict[str, Any] = field(default_factory=lambda: ViolinSettings().to_dict())

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "settings": self.settings,
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "ViolinConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates a missing or malformed settings section
        - treats a non-integer schema_version as a version mismatch
        """
        raw_version = d.get("schema_version", -1)
        try:
            schema_version = int(raw_version)
        except (TypeError, ValueError):
            logger.warning(f"schema_version {raw_version!r} is not an integer, treating as a version mismatch")
            schema_version = -1

        settings_raw = d.get("settings", {})
        if not isinstance(settings_raw, dict):
            logger.warning("settings is not a dict, using defaults")
            settings_raw = ViolinSettings().to_dict()

        known_keys = {"schema_version", "settings"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in violin config, ignoring")

        return cls(schema_version=schema_version, settings=settings_raw)


class ViolinConfig:
    """
    Manager for loading/saving ViolinConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[ViolinConfigData] = None):
        self.path = path
        self.data = data if data is not None else ViolinConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = "violinkit",
        filename: str = "violin_config.json",
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/violinkit/violin_config.json
        Linux:   ~/.config/violinkit/violin_config.json
        Windows: %APPDATA%\\violinkit\\violin_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "violinkit",
        filename: str = "violin_config.json",
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "ViolinConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = ViolinConfigData(schema_version=schema_version)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning(f"Violin config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = ViolinConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"Violin config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    cfg = cls(path=path, data=default_data)
                    if create_if_missing:
                        cfg.save()
                    return cfg
                loaded.schema_version = int(schema_version)

            return cls(path=path, data=loaded)
        except FileNotFoundError:
            logger.debug(f"Violin config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except json.JSONDecodeError as e:
            logger.warning(f"Violin config file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path, data=default_data)
        except OSError as e:
            logger.warning(f"Error loading violin config from {path}: {e}, using defaults")
            return cls(path=path, data=default_data)

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            json_str = json.dumps(self.data.to_json_dict(), indent=2)
            self.path.write_text(json_str, encoding="utf-8")
            logger.info(f"Saved violin config to {self.path}")
        except Exception as e:
            logger.error(f"Error saving violin config to {self.path}: {e}")
            raise

    def get_settings(self) -> ViolinSettings:
        """Get ViolinSettings from config; malformed settings fall back to defaults."""
        try:
            return ViolinSettings.from_dict(self.data.settings)
        except (TypeError, ValueError) as e:
            logger.warning(f"Error deserializing ViolinSettings from config: {e}")
            return ViolinSettings()

    def set_settings(self, settings: ViolinSettings) -> None:
        self.data.settings = settings.to_dict()
