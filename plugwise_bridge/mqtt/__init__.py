"""MQTT side of the Plugwise bridge.

This package matches inbound action topics, dispatches them to the Plugwise
gateway, and publishes status and telemetry to configured topics.
"""

from .bridge import PlugwiseMQTTBridge
from .handlers import ActionType, MessageHandlers
from .topics import ActionLookup, DeviceIdMatcher, TopicPattern, render_template

__all__ = [
    "PlugwiseMQTTBridge",
    "MessageHandlers",
    "ActionType",
    "ActionLookup",
    "DeviceIdMatcher",
    "TopicPattern",
    "render_template",
]
