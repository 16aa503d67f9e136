"""Persistence of the global build step configuration."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from itest_runner.errors import ConfigurationError
from itest_runner.models.config import GlobalConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class GlobalConfigStore:
    """Loads and saves the global configuration as a YAML file.

    The configuration is read once at startup and only changes through an
    explicit call to ``save``.
    """

    path: Path

    def load(self) -> GlobalConfig:
        """Load the configuration, or defaults when no file was saved yet.

        Raises:
            ConfigurationError: If the file is unreadable or does not match
                the configuration schema

        """
        if not self.path.exists():
            log.info("No configuration at %s, using defaults", self.path)
            return GlobalConfig()

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read configuration: {exc}") from exc

        return parse_global_config(content, source=self.path)

    def save(self, config: GlobalConfig) -> None:
        """Write the configuration, replacing any previous file."""
        data = dump_global_config(config)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(data, sort_keys=False), encoding="utf-8"
            )
        except OSError as exc:
            raise ConfigurationError(f"Cannot save configuration: {exc}") from exc
        log.info("Saved configuration to %s", self.path)

    def update(self, changes: Mapping[str, Any]) -> GlobalConfig:
        """Apply field changes on top of the stored configuration and save."""
        data = {**dump_global_config(self.load()), **changes}
        config = validate_global_config(data)
        self.save(config)
        return config


def parse_global_config(content: str, source: Path | str = "<string>") -> GlobalConfig:
    """Parse YAML text into a configuration.

    Raises:
        ConfigurationError: For invalid YAML, an empty document or schema errors

    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {source}: {exc}") from exc

    if data is None:
        raise ConfigurationError(f"Empty configuration file: {source}")

    return validate_global_config(data)


def validate_global_config(data: Any) -> GlobalConfig:
    """Validate raw data against the configuration schema."""
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration schema: {exc}") from exc


def dump_global_config(config: GlobalConfig) -> dict[str, Any]:
    """Plain data of the configuration, with the password revealed."""
    data = config.model_dump(mode="json")
    data["db_password"] = config.db_password.get_secret_value()
    return data
