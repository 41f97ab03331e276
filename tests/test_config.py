#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import pytest

from roombook.booking.availability import SlotGridSettings
from roombook.booking.exceptions import ValidationError
from roombook.booking.room_fit import RoomFitSettings
from roombook.config import load_config, room_fit_settings, slot_grid_settings


def test_defaults():
    cfg = load_config()
    assert slot_grid_settings(cfg) == SlotGridSettings()
    assert room_fit_settings(cfg) == RoomFitSettings()
    assert cfg.store.snapshot is None
    assert cfg.logging.level == "WARNING"


def test_user_file_and_overrides(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("slot_grid:\n  start_hour: 8\nroom_fit:\n  under_utilized_ratio: 0.5\n")
    cfg = load_config(path, overrides=["slot_grid.slot_minutes=30"])
    assert slot_grid_settings(cfg) == SlotGridSettings(start_hour=8, end_hour=22, slot_minutes=30)
    assert room_fit_settings(cfg).under_utilized_ratio == 0.5


def test_invalid_slot_grid_is_rejected():
    cfg = load_config(overrides=["slot_grid.end_hour=6"])
    with pytest.raises(ValidationError):
        slot_grid_settings(cfg)
