from __future__ import annotations

import logging
from importlib.resources import files as resource_files
from typing import Optional

import yaml

from ..errors import ConfigError
from .settings import GenerationSettings

logger = logging.getLogger(__name__)


def load_generation_settings(path: Optional[str] = None) -> GenerationSettings:
    """Load generation settings from YAML.

    If path is None, loads the embedded default resource at
    mystery_dungeon/config/defaults.yaml.
    """
    if path is None:
        data = resource_files("mystery_dungeon.config").joinpath("defaults.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded generation settings resource")
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = f.read()
        logger.debug("Loaded generation settings from path: %s", path)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in generation settings: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Generation settings must be a mapping at the top level")

    try:
        settings = GenerationSettings.from_dict(raw)
    except (TypeError, ValueError, KeyError) as exc:
        raise ConfigError(f"Malformed generation settings: {exc}") from exc

    logger.info(
        "Generation settings: %s %dx%d caverns=%d seed=%s",
        settings.algorithm,
        settings.width,
        settings.height,
        settings.cavern.cavern_count,
        settings.seed,
    )
    return settings


def dump_generation_settings(settings: GenerationSettings) -> str:
    return yaml.safe_dump(settings.to_dict(), sort_keys=True)
