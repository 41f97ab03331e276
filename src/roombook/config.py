#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Settings loading. Packaged defaults are merged with an optional user YAML
file and dotlist overrides (eg `slot_grid.slot_minutes=30`)."""

import logging
from pathlib import Path
from typing import Sequence

from omegaconf import DictConfig, OmegaConf

from roombook.booking.availability import SlotGridSettings
from roombook.booking.room_fit import RoomFitSettings
from roombook.constants import DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)


def load_config(
    path: Path | str | None = None, overrides: Sequence[str] | None = None
) -> DictConfig:
    cfg = OmegaConf.load(DEFAULT_CONFIG_PATH)
    if path is not None:
        logger.debug(f"Loading settings from {path}")
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    return cfg


def slot_grid_settings(cfg: DictConfig) -> SlotGridSettings:
    return SlotGridSettings(**OmegaConf.to_container(cfg.slot_grid)).validate()


def room_fit_settings(cfg: DictConfig) -> RoomFitSettings:
    return RoomFitSettings(**OmegaConf.to_container(cfg.room_fit))
