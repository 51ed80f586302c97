"""Persisted export settings for a vault."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from graph.model import SOURCE_TARGET, edge_keys


logger = logging.getLogger(__name__)

SETTINGS_FILENAME = ".graph-export.yaml"
DEFAULT_OUTPUT_PATH = "graph_data.json"


class Settings(BaseModel):
    """Export configuration, passed explicitly to the builder and exporter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    target_directory: str = Field(
        default="",
        alias="targetDirectory",
        description="Vault directory to export; empty means the whole vault",
    )
    edge_format: str = Field(
        default=SOURCE_TARGET,
        alias="edgeFormat",
        description="Edge key convention: source-target or from-to",
    )
    output_path: str = Field(
        default=DEFAULT_OUTPUT_PATH,
        alias="outputPath",
        description="Vault-relative path of the exported JSON",
    )

    @field_validator("target_directory", mode="before")
    @classmethod
    def _normalize_target(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("edge_format", mode="before")
    @classmethod
    def _check_edge_format(cls, value: Any) -> str:
        if value is None or value == "":
            return SOURCE_TARGET
        value = str(value)
        edge_keys(value)
        return value

    @field_validator("output_path", mode="before")
    @classmethod
    def _default_output(cls, value: Any) -> str:
        if value is None or value == "":
            return DEFAULT_OUTPUT_PATH
        return str(value)


class SettingsStore:
    """
    Load and save settings as YAML at the vault root.
    
    A missing file yields defaults; unknown keys are ignored.
    """

    def __init__(self, vault_root: Path, filename: str = SETTINGS_FILENAME):
        self.path = Path(vault_root) / filename

    def load(self) -> Settings:
        """Read the settings file, falling back to defaults when it is absent or empty."""
        if not self.path.is_file():
            return Settings()

        data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        if data is None:
            return Settings()
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return Settings.model_validate(data)

    def save(self, settings: Settings) -> None:
        """Write the settings file, replacing it in one step."""
        text = yaml.safe_dump(settings.model_dump(by_alias=True), sort_keys=False, allow_unicode=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info("Saved settings to %s", self.path)

    def update(
        self,
        target_directory: Optional[str] = None,
        edge_format: Optional[str] = None,
        output_path: Optional[str] = None,
    ) -> Settings:
        """Change the given fields, persist and return the new settings."""
        changes = {
            "target_directory": target_directory,
            "edge_format": edge_format,
            "output_path": output_path,
        }
        data = self.load().model_dump()
        data.update({key: value for key, value in changes.items() if value is not None})
        updated = Settings.model_validate(data)
        self.save(updated)
        return updated
