"""Generator settings, optionally loaded from a YAML file.

Example `bru2zod.yaml`:

    naming: name
    keep: true
    extension: .schema.ts
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

DEFAULT_IMPORT = 'import { z } from "zod";'


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""


class GeneratorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    naming: Literal["path", "name"] = "path"  # file/type base: method + URL path, or method + meta name
    keep: bool = False  # keep existing files in the output directory
    extension: str = ".ts"
    import_line: str = DEFAULT_IMPORT

    def with_overrides(self, **overrides) -> "GeneratorConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=values)


def load_config(path: Path | None) -> GeneratorConfig:
    """Load settings from `path`; defaults when no path is given."""
    if path is None:
        return GeneratorConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return GeneratorConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    try:
        return GeneratorConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
