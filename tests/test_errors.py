"""Tests for bridge exception types."""

import pytest

from plugwise_bridge.errors import BridgeError, DeviceError, PublishError, ShutdownError


class TestBridgeError:
    """Test message text and structured context."""

    def test_default_message(self):
        assert str(ShutdownError()) == "Failed closing MQTT connections"

    def test_message_is_context(self):
        error = PublishError(topic="a/b", message="21.5", reason="x")

        assert error.context == {"topic": "a/b", "message": "21.5", "reason": "x"}
        assert str(error) == "Could not publish MQTT message (topic='a/b', message='21.5', reason='x')"

    def test_custom_text_with_message_context(self):
        error = DeviceError("Error setting thermostat", topic="t", message="21.5")

        assert str(error).startswith("Error setting thermostat (")
        assert error.context["message"] == "21.5"

    def test_cause_is_rendered(self):
        cause = OSError("connection refused")

        error = BridgeError(cause=cause, server="localhost")

        assert error.cause is cause
        assert str(error) == "Bridge error (server='localhost', cause=connection refused)"

    def test_subclasses_share_base(self):
        with pytest.raises(BridgeError):
            raise DeviceError(topic="t")
