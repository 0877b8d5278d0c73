"""Message structures published by the bridge."""

import time
from typing import Any, Dict, Optional, TypedDict

# Flat record with at least an "id" key, one key per measurement
TelemetryMessage = Dict[str, Any]

STATUS_ONLINE = "online"
STATUS_UNAVAILABLE = "unavailable"


class StatusMessage(TypedDict):
    """Bridge status published to the status topics."""
    status: str
    appliances: int
    timestamp: int


def build_status_message(appliances: int, status: str = STATUS_ONLINE, timestamp: Optional[int] = None) -> StatusMessage:
    """Create a status message for the given appliance count."""
    return {
        "status": status,
        "appliances": appliances,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
    }
