#!/usr/bin/env python3
"""Helper script to send thermostat and scene commands to the Plugwise MQTT Bridge."""

import argparse
import json
import time
from typing import Optional

import paho.mqtt.client as mqtt


class PlugwiseCommandSender:
    """Sends action topic commands and prints whatever comes back."""

    def __init__(self, broker_host: str = "localhost", broker_port: int = 1883,
                 username: Optional[str] = None, password: Optional[str] = None,
                 watch: Optional[str] = None):
        """Initialize the sender.

        Args:
            broker_host: MQTT broker host
            broker_port: MQTT broker port
            username: MQTT username (optional)
            password: MQTT password (optional)
            watch: Topic filter to print replies from, e.g. gBridge/u1/+/thermostat/set
        """
        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        self.watch = watch

        if username and password:
            self.client.username_pw_set(username, password)

        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

        try:
            self.client.connect(broker_host, broker_port, 60)
            self.client.loop_start()
            print(f"Connected to MQTT broker at {broker_host}:{broker_port}")
        except Exception as e:
            print(f"Failed to connect to MQTT broker: {e}")
            raise

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code == 0:
            if self.watch:
                client.subscribe(self.watch)
        else:
            print(f"Failed to connect: {reason_code}")

    def _on_message(self, client, userdata, message):
        payload = message.payload.decode("utf-8")
        print(f"Reply on {message.topic}:")
        try:
            print(json.dumps(json.loads(payload), indent=2))
        except json.JSONDecodeError:
            print(payload)

    def send(self, topic: str, payload: str):
        """Publish a raw command."""
        self.client.publish(topic, payload)
        print(f"Sent '{payload}' to {topic}")

    def set_thermostat(self, topic_template: str, appliance_id: str, setpoint: float):
        """Send a thermostat setpoint to an appliance."""
        self.send(topic_template.replace("{applianceId}", appliance_id), str(setpoint))

    def set_scene(self, topic_template: str, appliance_id: str, scene: str):
        """Send a scene change to an appliance."""
        self.send(topic_template.replace("{applianceId}", appliance_id), scene)

    def disconnect(self):
        """Disconnect from MQTT broker."""
        self.client.loop_stop()
        self.client.disconnect()
        print("Disconnected from MQTT broker")


def main():
    """Main function with CLI interface."""
    parser = argparse.ArgumentParser(description="Plugwise MQTT Bridge command sender")
    parser.add_argument("--host", default="localhost", help="MQTT broker host")
    parser.add_argument("--port", type=int, default=1883, help="MQTT broker port")
    parser.add_argument("--username", help="MQTT username")
    parser.add_argument("--password", help="MQTT password")
    parser.add_argument("--appliance", required=True, help="32 character appliance ID")
    parser.add_argument("--thermostat", type=float, help="Thermostat setpoint to send")
    parser.add_argument("--thermostat-topic", default="gBridge/u1/{applianceId}/thermostat",
                        help="Thermostat listen topic template")
    parser.add_argument("--scene", help="Scene to send (e.g. heat, off)")
    parser.add_argument("--scene-topic", default="gBridge/u1/{applianceId}/scene",
                        help="Scene listen topic template")
    parser.add_argument("--watch", default="gBridge/u1/+/+/set",
                        help="Topic filter to print status replies from")
    parser.add_argument("--wait", type=float, default=2, help="Seconds to wait for replies")

    args = parser.parse_args()

    try:
        sender = PlugwiseCommandSender(args.host, args.port, args.username, args.password, args.watch)
        time.sleep(1)  # Allow connection to establish
    except Exception as e:
        print(f"Failed to initialize sender: {e}")
        return 1

    try:
        if args.thermostat is not None:
            sender.set_thermostat(args.thermostat_topic, args.appliance, args.thermostat)

        if args.scene:
            sender.set_scene(args.scene_topic, args.appliance, args.scene)

        print("Waiting for replies...")
        time.sleep(args.wait)
    finally:
        sender.disconnect()

    return 0


if __name__ == "__main__":
    exit(main())
