"""Exception types for the Plugwise MQTT bridge.

Every error carries the context it was raised with (topic, message,
underlying cause) so that a single log line is enough to diagnose it.
"""

from typing import Any, Optional


class BridgeError(Exception):
    """Base exception for all bridge errors.

    Attributes:
        context: Structured context rendered into the error message
        cause: Underlying exception, if any
    """

    default_message = "Bridge error"

    def __init__(self, text: Optional[str] = None, /, cause: Optional[BaseException] = None, **context: Any):
        self.cause = cause
        self.context = context
        super().__init__(text or self.default_message)

    def __str__(self) -> str:
        text = super().__str__()
        details = [f"{key}={value!r}" for key, value in self.context.items()]
        if self.cause is not None:
            details.append(f"cause={self.cause}")
        if details:
            return f"{text} ({', '.join(details)})"
        return text


class ConnectError(BridgeError):
    """Connection to the MQTT broker could not be established. Fatal."""

    default_message = "Could not connect to MQTT server"


class SubscribeError(BridgeError):
    """A topic subscription was rejected."""

    default_message = "Could not subscribe to MQTT topic"


class PublishError(BridgeError):
    """A message could not be published."""

    default_message = "Could not publish MQTT message"


class MalformedTopicError(BridgeError):
    """An action topic matched but carries no appliance identifier."""

    default_message = "No appliance found in action topic - cannot handle message"


class DeviceError(BridgeError):
    """The device layer rejected an action."""

    default_message = "Plugwise action failed"


class ShutdownError(BridgeError):
    """The MQTT connection did not close as expected."""

    default_message = "Failed closing MQTT connections"
