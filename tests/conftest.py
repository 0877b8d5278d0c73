"""Pytest configuration and fixtures for Plugwise MQTT bridge tests."""

from unittest.mock import MagicMock, Mock, patch

import paho.mqtt.client as mqtt
import pytest

from plugwise_bridge.config import (
    ActionTopicConfig,
    AppConfig,
    DataTopicConfig,
    LWTConfig,
    MQTTConfig,
    PlugwiseConfig,
    StatusTopicConfig,
    TLSConfig,
    TopicsConfig,
)

APPLIANCE_ID = "3a19bccef5982bde990632fd4f5894d4"
OTHER_APPLIANCE_ID = "0123456789abcdef0123456789abcdef"

# ============================================================================
# Helper Functions for Creating Test Configurations
# ============================================================================


def create_test_topics_config(
    action: dict = None,
    status: dict = None,
    data: dict = None,
) -> TopicsConfig:
    """Create a TopicsConfig with a gBridge style layout.

    Args:
        action: Action groups (default: gbridge thermostat and scene)
        status: Status topics (default: plugwise/status)
        data: Data topics (default: complete message and ambient temperature)

    Returns:
        TopicsConfig instance ready for testing
    """
    if action is None:
        action = {
            "gbridge": {
                "thermostat": ActionTopicConfig(
                    listen="gBridge/u1/{applianceId}/thermostat",
                    status="gBridge/u1/{applianceId}/thermostat/set",
                ),
                "scene": ActionTopicConfig(
                    listen="gBridge/u1/{applianceId}/scene",
                    status="gBridge/u1/{applianceId}/scene/set",
                ),
            }
        }
    if status is None:
        status = {"bridge": StatusTopicConfig(topic="plugwise/status")}
    if data is None:
        data = {
            "complete": DataTopicConfig(topic="plugwise/{applianceId}", message="MQTT_MESSAGE_COMPLETE"),
            "temperature": DataTopicConfig(
                topic="gBridge/u1/{applianceId}/tempset-ambient/set", message="{temperature}"
            ),
        }
    return TopicsConfig(action=action, status=status, data=data)


def create_test_plugwise_config(
    host: str = "smile.local",
    port: int = 80,
    password: str = "abcdefgh",
    poll_interval: float = 60,
) -> PlugwiseConfig:
    """Create a PlugwiseConfig for testing with sensible defaults."""
    return PlugwiseConfig(host=host, port=port, password=password, poll_interval=poll_interval)


def create_test_mqtt_config(
    host: str = "localhost",
    port: int = 1883,
    username: str = None,
    password: str = None,
    client_id: str = "",
    clean_session: bool = True,
    keepalive: int = 60,
    qos: int = 0,
    dry_run: bool = False,
    tls: TLSConfig = None,
    lwt: LWTConfig = None,
    topics: TopicsConfig = None,
) -> MQTTConfig:
    """Create an MQTTConfig for testing with sensible defaults.

    Returns:
        MQTTConfig instance ready for testing
    """
    return MQTTConfig(
        host=host,
        port=port,
        username=username,
        password=password,
        client_id=client_id,
        clean_session=clean_session,
        keepalive=keepalive,
        qos=qos,
        dry_run=dry_run,
        tls=tls,
        lwt=lwt,
        topics=topics if topics is not None else create_test_topics_config(),
    )


def create_test_app_config(
    plugwise_config: PlugwiseConfig = None,
    mqtt_config: MQTTConfig = None,
    http_port: int = 8000,
    **mqtt_kwargs,
) -> AppConfig:
    """Create an AppConfig for testing with sensible defaults.

    Examples:
        >>> config = create_test_app_config()
        >>> config = create_test_app_config(dry_run=True)
    """
    if plugwise_config is None:
        plugwise_config = create_test_plugwise_config()

    if mqtt_config is None:
        mqtt_config = create_test_mqtt_config(**mqtt_kwargs)

    return AppConfig(plugwise=plugwise_config, mqtt=mqtt_config, http_port=http_port)


def create_mqtt_message(topic: str, payload: str) -> Mock:
    """Create a paho style inbound message."""
    message = Mock()
    message.topic = topic
    message.payload = payload.encode("utf-8")
    return message


# ============================================================================
# Pytest Fixtures
# ============================================================================


@pytest.fixture
def test_app_config():
    """Fixture providing a standard AppConfig for testing."""
    return create_test_app_config()


@pytest.fixture
def mock_plugwise():
    """Fixture providing a device layer that accepts every command."""
    client = Mock()
    client.set_thermostat.return_value = True
    client.get_appliances.return_value = []
    return client


@pytest.fixture
def mock_mqtt_client():
    """Fixture patching the paho client used by the bridge."""
    with patch("plugwise_bridge.mqtt.bridge.mqtt.Client") as mock_client_class:
        instance = MagicMock()
        instance.publish.return_value = Mock(rc=mqtt.MQTT_ERR_SUCCESS, mid=1)
        instance.subscribe.return_value = (mqtt.MQTT_ERR_SUCCESS, 1)
        instance.disconnect.return_value = mqtt.MQTT_ERR_SUCCESS
        instance.is_connected.return_value = True
        mock_client_class.return_value = instance
        yield instance
