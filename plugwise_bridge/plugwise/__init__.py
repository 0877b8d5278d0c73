"""Plugwise device layer.

This package talks to the Plugwise Smile gateway over its local HTTP API and
turns appliance state into telemetry messages for the MQTT bridge.
"""

from .base import BasePlugwiseClient
from .client import PlugwiseClient
from .factory import create_plugwise_client
from .messages import StatusMessage, TelemetryMessage, build_status_message
from .poller import PollingManager

__all__ = [
    "BasePlugwiseClient",
    "PlugwiseClient",
    "create_plugwise_client",
    "PollingManager",
    "StatusMessage",
    "TelemetryMessage",
    "build_status_message",
]
