"""MQTT bridge between action/data topics and the Plugwise gateway."""

import json
import logging
import ssl
import threading
from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence, Tuple

import paho.mqtt.client as mqtt

from ..errors import ConnectError, PublishError, ShutdownError, SubscribeError
from ..utils import send_sigterm
from .handlers import MessageHandlers
from .topics import ActionLookup, render_template

if TYPE_CHECKING:
    from ..config import AppConfig, LWTConfig, TLSConfig
    from ..plugwise import BasePlugwiseClient, StatusMessage, TelemetryMessage


class PlugwiseMQTTBridge:
    """MQTT bridge translating action topics to Plugwise calls and back.

    Construct exactly one per process and pass it to whatever needs it.
    """

    def __init__(
        self,
        config: "AppConfig",
        plugwise_client: "BasePlugwiseClient",
        on_fatal: Callable[[], None] = send_sigterm,
    ):
        """Initialize the MQTT bridge.

        Args:
            config: Application configuration object (use AppConfig.from_env())
            plugwise_client: Device layer receiving thermostat commands
            on_fatal: Called when the broker refuses the connection
        """
        self.config = config
        self.plugwise_client = plugwise_client
        self.on_fatal = on_fatal
        self.logger = logging.getLogger(__name__)

        # Built once the first connection is established
        self.action_lookup: Optional[ActionLookup] = None

        self.stats: Dict[str, int] = {}
        self._stats_lock = threading.Lock()
        self._pending_publishes: Dict[int, Tuple[str, str]] = {}
        self._pending_subscriptions: Dict[int, str] = {}
        self._publish_lock = threading.Lock()
        self._closed = False

        self.mqtt_client = self._create_mqtt_client()
        self.handlers = MessageHandlers(self)

    def _create_mqtt_client(self) -> mqtt.Client:
        """Create and configure MQTT client.

        Returns:
            Configured MQTT client instance
        """
        client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.config.mqtt.client_id or "",
            clean_session=self.config.mqtt.clean_session,
        )

        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect
        client.on_subscribe = self._on_subscribe
        client.on_publish = self._on_publish

        if self.config.mqtt.username and self.config.mqtt.password:
            client.username_pw_set(self.config.mqtt.username, self.config.mqtt.password)

        if self.config.mqtt.tls:
            self._configure_tls(client, self.config.mqtt.tls)

        if self.config.mqtt.lwt:
            self._configure_lwt(client, self.config.mqtt.lwt)

        return client

    def _configure_tls(self, client: mqtt.Client, tls_config: "TLSConfig") -> None:
        """Configure TLS/SSL for MQTT connection.

        Raises:
            Exception: If TLS configuration fails
        """
        try:
            client.tls_set(
                ca_certs=tls_config.ca_certs,
                certfile=tls_config.certfile,
                keyfile=tls_config.keyfile,
                cert_reqs=ssl.CERT_REQUIRED,
                tls_version=ssl.PROTOCOL_TLS_CLIENT,
                ciphers=None,
            )
            self.logger.info("TLS/SSL configured successfully")

            if tls_config.insecure:
                client.tls_insecure_set(True)
                self.logger.warning("TLS certificate verification DISABLED - insecure mode active")
        except Exception as e:
            self.logger.error(f"Failed to configure TLS/SSL: {e}")
            raise

    def _configure_lwt(self, client: mqtt.Client, lwt_config: "LWTConfig") -> None:
        """Configure Last Will and Testament for MQTT connection.

        Raises:
            Exception: If LWT configuration fails
        """
        try:
            client.will_set(lwt_config.topic, lwt_config.payload, lwt_config.qos, lwt_config.retain)
            self.logger.info(f"Last Will and Testament configured: {lwt_config.topic}")
        except Exception as e:
            self.logger.error(f"Failed to configure LWT: {e}")
            raise

    def count(self, key: str, amount: int = 1) -> None:
        """Increment a counter reported by the metrics endpoint."""
        with self._stats_lock:
            self.stats[key] = self.stats.get(key, 0) + amount

    def is_connected(self) -> bool:
        return self.mqtt_client.is_connected()

    def connect(self) -> None:
        """Connect to the broker.

        Raises:
            ConnectError: If the broker cannot be reached
        """
        host, port = self.config.mqtt.host, self.config.mqtt.port
        self.logger.info(f"Connecting to MQTT server at {host}:{port}")

        try:
            self.mqtt_client.connect(host, port, self.config.mqtt.keepalive)
        except Exception as e:
            error = ConnectError(server=host, port=port, cause=e)
            self.logger.error(f"{error}")
            raise error from e

    def start(self) -> None:
        """Connect and run the network loop in a background thread.

        Raises:
            ConnectError: If the broker cannot be reached
        """
        self.connect()
        self.mqtt_client.loop_start()

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Callback for when MQTT client connects.

        Args:
            client: MQTT client instance
            userdata: User data set in client
            flags: Connection flags
            reason_code: Connection result code
            properties: MQTT v5 properties
        """
        if reason_code != 0:
            self.logger.error(
                f"{ConnectError(server=self.config.mqtt.host, port=self.config.mqtt.port, reason=str(reason_code))}"
            )
            self.on_fatal()
            return

        self.logger.info(
            f"Connected to MQTT server {self.config.mqtt.host}:{self.config.mqtt.port}"
        )

        if self.action_lookup is None:
            self.action_lookup = ActionLookup.from_config(self.config.mqtt.topics)
            self.logger.info(f"Built action lookup with {len(self.action_lookup)} action topic(s)")

        self._subscribe_to_topics(client)

    def _subscribe_to_topics(self, client: mqtt.Client) -> None:
        """Subscribe to the listen and status filters of every action."""
        qos = self.config.mqtt.qos

        for topic in self.action_lookup.subscriptions:
            try:
                result, mid = client.subscribe(topic, qos=qos)
            except ValueError as e:
                self.logger.error(f"{SubscribeError(topic=topic, cause=e)}")
                continue

            if result != mqtt.MQTT_ERR_SUCCESS:
                self.logger.error(f"{SubscribeError(topic=topic, reason=mqtt.error_string(result))}")
                continue

            with self._publish_lock:
                self._pending_subscriptions[mid] = topic
            self.logger.debug(f"Subscribing to {topic} with QoS {qos}")

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties=None):
        """Callback for when the broker answers a subscription."""
        with self._publish_lock:
            topic = self._pending_subscriptions.pop(mid, None)

        for reason_code in reason_code_list:
            if reason_code.is_failure:
                self.logger.error(f"{SubscribeError(topic=topic, reason=str(reason_code))}")
            else:
                self.logger.info(f"MQTT subscribed to {topic} (granted: {reason_code})")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Callback for when MQTT client disconnects."""
        if reason_code != 0:
            self.logger.warning(f"Unexpected disconnection from MQTT broker: {reason_code}")
        else:
            self.logger.info("Disconnected from MQTT broker")

    def _on_message(self, client, userdata, message):
        """Handle incoming MQTT messages.

        Args:
            client: MQTT client instance
            userdata: User data set in client
            message: MQTT message
        """
        topic = message.topic

        try:
            payload = message.payload.decode("utf-8")
            self.handlers.handle_message(topic, payload)
        except Exception as e:
            self.logger.error(f"Error handling message on {topic}: {e}", exc_info=True)

    def publish(self, topic: str, payload: str) -> bool:
        """Publish a message without waiting for delivery.

        Delivery failures reported later by the broker are logged from the
        publish callback.

        Args:
            topic: Destination topic
            payload: Message payload

        Returns:
            True if the message was handed to the client, False otherwise
        """
        try:
            info = self.mqtt_client.publish(topic, payload, qos=self.config.mqtt.qos)
        except (ValueError, TypeError) as e:
            self._log_publish_error(PublishError(topic=topic, message=payload, cause=e))
            return False

        if info.rc == mqtt.MQTT_ERR_NO_CONN and self.config.mqtt.qos > 0:
            # paho keeps QoS 1/2 messages and sends them after reconnecting
            self.logger.warning(f"MQTT not connected; message to {topic} queued for delivery")
            self.count("messages_queued")
            with self._publish_lock:
                self._pending_publishes[info.mid] = (topic, payload)
            return True

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._log_publish_error(
                PublishError(topic=topic, message=payload, reason=mqtt.error_string(info.rc))
            )
            return False

        self.count("messages_published")
        # QoS 0 has no broker acknowledgement to wait for
        if self.config.mqtt.qos > 0:
            with self._publish_lock:
                self._pending_publishes[info.mid] = (topic, payload)
        return True

    def _on_publish(self, client, userdata, mid, reason_code, properties=None):
        """Callback for when a published message has been delivered or rejected."""
        with self._publish_lock:
            topic, payload = self._pending_publishes.pop(mid, (None, None))

        if reason_code.is_failure:
            self._log_publish_error(
                PublishError(topic=topic, message=payload, reason=str(reason_code))
            )

    def _log_publish_error(self, error: PublishError) -> None:
        self.count("publish_errors")
        self.logger.error(f"{error}")

    def publish_status(self, status: "StatusMessage") -> None:
        """Publish the bridge status to every configured status topic.

        Args:
            status: Status message, sent as JSON
        """
        payload = json.dumps(status)

        for topic_config in self.config.mqtt.topics.status.values():
            self.publish(topic_config.topic, payload)

    def publish_telemetry(self, messages: Sequence["TelemetryMessage"]) -> None:
        """Publish Plugwise messages to every configured data topic.

        Topic and message templates receive every field of the message plus
        ``applianceId``. A data topic whose message is MQTT_MESSAGE_COMPLETE
        receives the whole message as JSON.

        Args:
            messages: Telemetry messages from the gateway
        """
        if not messages:
            return

        self.logger.info(f"{len(messages)} message(s) ready to send")
        self.count("telemetry_messages", len(messages))

        for message in messages:
            values = {"applianceId": message.get("id"), **message}

            for topic_config in self.config.mqtt.topics.data.values():
                topic = render_template(topic_config.topic, values)

                if topic_config.is_complete_message:
                    payload = json.dumps(message)
                else:
                    payload = render_template(topic_config.message, values)

                if self.config.mqtt.dry_run:
                    self.logger.info(f"Dry run enabled; not publishing to {topic}: {payload}")
                    continue

                self.logger.debug(f"Publishing to {topic}: {payload}")
                self.publish(topic, payload)

    def shutdown(self) -> None:
        """Close the MQTT connection.

        Calling it again after it completed does nothing.

        Raises:
            ShutdownError: If the connection did not close cleanly
        """
        if self._closed:
            self.logger.debug("MQTT connections already closed")
            return
        self._closed = True

        result = self.mqtt_client.disconnect()
        self.mqtt_client.loop_stop()

        if result != mqtt.MQTT_ERR_SUCCESS:
            error = ShutdownError(reason=mqtt.error_string(result))
            self.logger.error(f"{error}")
            raise error

        self.logger.info("MQTT connections closed")
