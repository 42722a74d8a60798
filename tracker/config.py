"""Configuration settings for the tracker server."""

import os
from common.constants import TRACKER_PORT


TRACKER_HOST = os.environ.get("P2P_TRACKER_HOST", "0.0.0.0")

TRACKER_PORT = int(os.environ.get("P2P_TRACKER_PORT", str(TRACKER_PORT)))

TRACKER_RELOAD = os.environ.get("P2P_TRACKER_RELOAD", "false").lower() == "true"
