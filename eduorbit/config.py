"""
Tunable constants for layout and path search.

The defaults give the standard orbital scene. A config can be
written to / read from JSON so a run can be repeated with the same
settings (``--save-config`` / ``--config`` on the CLI).
"""

import json
import logging
import os

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

BASE_RADIUS = 15.0
LAYER_SPACING = 8.0
JITTER = 2.5
DEFAULT_ESTIMATED_TIME = 30
SEARCH_FALLBACK_TIME = 60


class OrbitConfig(BaseModel):
    """Layout geometry and search cost defaults."""

    base_radius: float = Field(default=BASE_RADIUS, ge=0)
    layer_spacing: float = Field(default=LAYER_SPACING, ge=0)
    # Half-width of the uniform y offset; 0 disables jitter.
    jitter: float = Field(default=JITTER, ge=0)
    default_estimated_time: int = Field(default=DEFAULT_ESTIMATED_TIME, gt=0)
    search_fallback_time: int = Field(default=SEARCH_FALLBACK_TIME, gt=0)


DEFAULT_CONFIG = OrbitConfig()


def save_config(config: OrbitConfig, path: str) -> None:
    """Write *config* as pretty JSON to *path*."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config.model_dump(), fh, indent=2)
    logger.info("Config saved → %s", path)


def load_config(path: str) -> OrbitConfig:
    """Load an ``OrbitConfig`` from a JSON file; unknown keys are ignored."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    config = OrbitConfig.model_validate(data)
    logger.info("Config loaded ← %s", path)
    return config
