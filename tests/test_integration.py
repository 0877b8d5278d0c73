"""Integration tests for end-to-end scenarios."""

import json
from unittest.mock import Mock, call

from fastapi.testclient import TestClient

from plugwise_bridge.http_api import create_app
from plugwise_bridge.mqtt import PlugwiseMQTTBridge
from plugwise_bridge.plugwise import PollingManager
from tests.conftest import APPLIANCE_ID, create_mqtt_message, create_test_app_config


class TestMQTTBridgeIntegration:
    """Integration tests for the bridge with a mocked broker and gateway."""

    def test_thermostat_command_flow(self, mock_mqtt_client, mock_plugwise):
        """Connect, receive a thermostat command and confirm it on the status topic."""
        bridge = PlugwiseMQTTBridge(create_test_app_config(), mock_plugwise, on_fatal=Mock())
        bridge.start()
        bridge._on_connect(mock_mqtt_client, None, None, 0)

        mock_mqtt_client.subscribe.assert_any_call("gBridge/u1/+/thermostat", qos=0)

        bridge._on_message(
            mock_mqtt_client, None, create_mqtt_message(f"gBridge/u1/{APPLIANCE_ID}/thermostat", "21.5")
        )

        mock_plugwise.set_thermostat.assert_called_once_with(APPLIANCE_ID, 21.5)
        mock_mqtt_client.publish.assert_called_once_with(
            f"gBridge/u1/{APPLIANCE_ID}/thermostat/set", "21.5", qos=0
        )
        assert bridge.stats["actions_handled"] == 1

    def test_poll_to_telemetry_flow(self, mock_mqtt_client, mock_plugwise):
        """A poll fans telemetry out to data topics and reports status."""
        appliance = {"id": APPLIANCE_ID, "name": "Anna", "temperature": 20.5}
        mock_plugwise.get_appliances.return_value = [appliance]
        bridge = PlugwiseMQTTBridge(create_test_app_config(), mock_plugwise, on_fatal=Mock())
        poller = PollingManager(mock_plugwise, bridge, interval_seconds=60)

        poller.poll_once()

        calls = mock_mqtt_client.publish.call_args_list
        assert calls[0] == call(f"plugwise/{APPLIANCE_ID}", json.dumps(appliance), qos=0)
        assert calls[1] == call(f"gBridge/u1/{APPLIANCE_ID}/tempset-ambient/set", "20.5", qos=0)
        assert calls[2][0][0] == "plugwise/status"
        assert json.loads(calls[2][0][1])["status"] == "online"

    def test_http_api_reflects_bridge_state(self, mock_mqtt_client, mock_plugwise):
        bridge = PlugwiseMQTTBridge(create_test_app_config(), mock_plugwise, on_fatal=Mock())
        client = TestClient(create_app(bridge))

        assert client.get("/ready").json()["status"] == "not ready"

        bridge._on_connect(mock_mqtt_client, None, None, 0)
        data = client.get("/metrics").json()

        assert client.get("/ready").json()["status"] == "ready"
        assert data["action_topics"] == 2

    def test_shutdown_is_idempotent(self, mock_mqtt_client, mock_plugwise):
        bridge = PlugwiseMQTTBridge(create_test_app_config(), mock_plugwise, on_fatal=Mock())

        bridge.shutdown()
        bridge.shutdown()

        mock_mqtt_client.disconnect.assert_called_once()
