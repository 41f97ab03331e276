#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from pathlib import Path

PACKAGE_NAME = "roombook"
CONFIGS_ROOT = Path(__file__).resolve().parent / "configs"
DEFAULT_CONFIG_PATH = CONFIGS_ROOT / "default.yaml"
DEFAULT_SNAPSHOT_PATH = Path.home() / ".cache" / PACKAGE_NAME / "store.json"
DEFAULT_SLOT_START_HOUR = 7
DEFAULT_SLOT_END_HOUR = 22
DEFAULT_SLOT_MINUTES = 60
UNDER_UTILIZED_RATIO = 0.3
MAX_OVER_CAPACITY_SUGGESTIONS = 3
MAX_UNDER_UTILIZED_SUGGESTIONS = 2
CONFLICT_REASON = "conflict"
ICS_PRODUCT_ID = "-//Meeting Room Booking//EN"
ICS_UID_DOMAIN = "meetingroom.local"
