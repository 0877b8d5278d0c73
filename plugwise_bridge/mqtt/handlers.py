"""Action handlers for inbound MQTT command messages."""

import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional

from ..errors import DeviceError, MalformedTopicError

if TYPE_CHECKING:
    from .bridge import PlugwiseMQTTBridge
    from .topics import ActionMatch


class ActionType(Enum):
    """Known action types of an action topic."""

    THERMOSTAT = "thermostat"
    SCENE = "scene"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> 'ActionType':
        """Parse an action type by exact name, mapping anything else to UNKNOWN.

        Examples:
            >>> ActionType.from_string("thermostat")
            <ActionType.THERMOSTAT: 'thermostat'>
            >>> ActionType.from_string("Thermostat")
            <ActionType.UNKNOWN: 'unknown'>
        """
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class MessageHandlers:
    """Routes matched action topics to the Plugwise device layer."""

    def __init__(self, bridge: "PlugwiseMQTTBridge"):
        """Initialize message handlers.

        Args:
            bridge: Parent MQTT bridge instance
        """
        self.bridge = bridge
        self.logger = logging.getLogger(__name__)
        self._handlers: Dict[ActionType, Callable[["ActionMatch", str, str], None]] = {
            ActionType.THERMOSTAT: self.handle_thermostat,
            ActionType.SCENE: self.handle_scene,
        }

    def handle_message(self, topic: str, payload: str) -> None:
        """Handle one inbound message.

        Topics that are not action topics are ignored. Action topics without
        an appliance ID are logged as errors and dropped.

        Args:
            topic: Topic the message arrived on
            payload: Decoded message payload
        """
        self.logger.debug(f"MQTT message received on {topic}: {payload[:100]}")
        self.bridge.count("messages_received")

        lookup = self.bridge.action_lookup
        if lookup is None:
            self.logger.debug(f"Action lookup not built yet, ignoring message on {topic}")
            return

        try:
            match = lookup.match(topic)
        except MalformedTopicError as e:
            self.bridge.count("malformed_topics")
            self.logger.error(f"{e}")
            return

        if match is None:
            return

        self.logger.info(
            f"Action topic match: {match.action_type} for appliance {match.appliance_id} on {topic}"
        )

        handler = self._handlers.get(ActionType.from_string(match.action_type))
        if handler is None:
            self.logger.debug(f"No handler for action type '{match.action_type}', ignoring")
            return

        self.bridge.count("actions_handled")
        handler(match, topic, payload)

    def handle_thermostat(self, match: "ActionMatch", topic: str, payload: str) -> None:
        """Set the thermostat and confirm the setpoint on the status topic.

        Args:
            match: Matched action topic
            topic: Topic the command arrived on
            payload: Setpoint as a decimal number
        """
        setpoint = _parse_setpoint(payload)
        success = setpoint is not None and self.bridge.plugwise_client.set_thermostat(
            match.appliance_id, setpoint
        )

        if success:
            self.bridge.publish(match.status_topic, payload)
            return

        self.bridge.count("action_errors")
        error = DeviceError(
            "Error setting thermostat",
            topic=topic,
            action_config=match.entry.config.model_dump(),
            message=payload,
        )
        self.logger.error(f"{error}")

    def handle_scene(self, match: "ActionMatch", topic: str, payload: str) -> None:
        """Mirror a scene change back to the status topic.

        The gateway has no matching scene concept; without the mirror the
        command source keeps showing the previous scene.
        """
        self.logger.debug(f"Mirroring scene '{payload}' from {topic} to {match.status_topic}")
        self.bridge.publish(match.status_topic, payload)


def _parse_setpoint(payload: str) -> Optional[float]:
    """Parse a thermostat payload, returning None for anything but a finite number."""
    try:
        value = float(payload)
    except ValueError:
        return None
    return value if math.isfinite(value) else None
