"""Configuration models using Pydantic for type safety and validation."""

import json
import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Data topic message value that publishes the whole telemetry object
COMPLETE_MESSAGE_TEMPLATE = "MQTT_MESSAGE_COMPLETE"


def is_complete_message_template(message: str) -> bool:
    """Check whether a data topic message is the pass-through marker."""
    return message == COMPLETE_MESSAGE_TEMPLATE


class TLSConfig(BaseModel):
    """TLS/SSL configuration for MQTT connection."""

    enabled: bool = True
    ca_certs: Optional[str] = Field(None, description="Path to CA certificate file")
    certfile: Optional[str] = Field(None, description="Path to client certificate file")
    keyfile: Optional[str] = Field(None, description="Path to client key file")
    insecure: bool = Field(False, description="Skip certificate verification (INSECURE)")

    @field_validator('ca_certs', 'certfile', 'keyfile')
    @classmethod
    def validate_cert_paths(cls, v: Optional[str]) -> Optional[str]:
        """Validate that certificate paths exist if provided."""
        if v and not os.path.exists(v):
            raise ValueError(f"Certificate file not found: {v}")
        return v

    @model_validator(mode='after')
    def validate_tls_config(self) -> 'TLSConfig':
        """Validate TLS configuration consistency."""
        if self.enabled and not self.ca_certs:
            raise ValueError("ca_certs is required when TLS is enabled")

        if self.certfile and not self.keyfile:
            raise ValueError("keyfile is required when certfile is provided")
        if self.keyfile and not self.certfile:
            raise ValueError("certfile is required when keyfile is provided")

        return self


class LWTConfig(BaseModel):
    """Last Will and Testament configuration for MQTT."""

    topic: str = Field(..., description="LWT topic")
    payload: str = Field("offline", description="LWT payload")
    qos: int = Field(0, ge=0, le=2, description="LWT QoS level (0-2)")
    retain: bool = Field(True, description="LWT retain flag")


class ActionTopicConfig(BaseModel):
    """Command topic and matching status topic for one action type."""

    listen: str = Field(..., description="Topic template receiving commands")
    status: str = Field(..., description="Topic template the command result is mirrored to")


class StatusTopicConfig(BaseModel):
    """Destination for bridge status messages."""

    topic: str


class DataTopicConfig(BaseModel):
    """Destination for Plugwise telemetry."""

    topic: str = Field(..., description="Topic template")
    message: str = Field(
        COMPLETE_MESSAGE_TEMPLATE,
        description=f"Message template, or {COMPLETE_MESSAGE_TEMPLATE} to send the whole message",
    )

    @property
    def is_complete_message(self) -> bool:
        return is_complete_message_template(self.message)


class TopicsConfig(BaseModel):
    """Topic layout of the bridge.

    ``action`` maps a group name (one device class) to its action types,
    e.g. ``{"gbridge": {"thermostat": {"listen": ..., "status": ...}}}``.
    """

    action: Dict[str, Dict[str, ActionTopicConfig]] = Field(default_factory=dict)
    status: Dict[str, StatusTopicConfig] = Field(default_factory=dict)
    data: Dict[str, DataTopicConfig] = Field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str) -> 'TopicsConfig':
        """Load the topic layout from a JSON file."""
        if not os.path.exists(path):
            raise ValueError(f"Topics configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            return cls.model_validate(json.load(f))


class MQTTConfig(BaseModel):
    """MQTT broker configuration."""

    host: str = Field("localhost", description="MQTT broker hostname")
    port: int = Field(1883, ge=1, le=65535, description="MQTT broker port")
    username: Optional[str] = Field(None, description="MQTT username")
    password: Optional[str] = Field(None, description="MQTT password")
    client_id: str = Field("", description="MQTT client ID (auto-generated if empty)")
    clean_session: bool = Field(True, description="Clean session flag")
    keepalive: int = Field(3600, ge=1, description="Keep-alive interval in seconds")
    qos: int = Field(0, ge=0, le=2, description="Default QoS level (0-2)")
    dry_run: bool = Field(False, description="Log telemetry instead of publishing it")
    tls: Optional[TLSConfig] = Field(None, description="TLS/SSL configuration")
    lwt: Optional[LWTConfig] = Field(None, description="Last Will and Testament configuration")
    topics: TopicsConfig = Field(default_factory=TopicsConfig, description="Topic layout")


class PlugwiseConfig(BaseModel):
    """Plugwise Smile gateway configuration."""

    host: str = Field("smile.local", description="Gateway hostname")
    port: int = Field(80, ge=1, le=65535, description="Gateway HTTP port")
    username: str = Field("smile", description="Gateway username")
    password: Optional[str] = Field(None, description="Gateway password (the Smile ID)")
    timeout: float = Field(10, gt=0, description="HTTP timeout in seconds")
    poll_interval: float = Field(60, gt=0, description="Seconds between telemetry polls")

    @model_validator(mode='after')
    def validate_password(self) -> 'PlugwiseConfig':
        """Validate that the gateway password is provided."""
        if not self.password:
            raise ValueError("Plugwise password must be provided")
        return self


class AppConfig(BaseModel):
    """Main application configuration."""

    plugwise: PlugwiseConfig = Field(..., description="Plugwise configuration")
    mqtt: MQTTConfig = Field(default_factory=MQTTConfig, description="MQTT configuration")
    http_port: int = Field(8000, ge=1, le=65535, description="HTTP API port")
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log_level: '{v}'. Valid options: {', '.join(sorted(valid_levels))}")
        return v_upper

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        load_dotenv()

        def parse_bool(value: Optional[str], default: bool = False) -> bool:
            if value is None:
                return default
            return value.lower() in ('true', '1', 'yes', 'on')

        tls_config = None
        if parse_bool(os.getenv("MQTT_TLS_ENABLED")):
            tls_config = TLSConfig(
                enabled=True,
                ca_certs=os.getenv("MQTT_TLS_CA_CERTS"),
                certfile=os.getenv("MQTT_TLS_CERTFILE"),
                keyfile=os.getenv("MQTT_TLS_KEYFILE"),
                insecure=parse_bool(os.getenv("MQTT_TLS_INSECURE"), False)
            )

        lwt_config = None
        lwt_topic = os.getenv("MQTT_LWT_TOPIC")
        if lwt_topic:
            lwt_config = LWTConfig(
                topic=lwt_topic,
                payload=os.getenv("MQTT_LWT_PAYLOAD", "offline"),
                qos=int(os.getenv("MQTT_LWT_QOS", "0")),
                retain=parse_bool(os.getenv("MQTT_LWT_RETAIN"), True)
            )

        topics_file = os.getenv("TOPICS_CONFIG_FILE")
        topics_config = TopicsConfig.from_file(topics_file) if topics_file else TopicsConfig()

        mqtt_config = MQTTConfig(
            host=os.getenv("MQTT_BROKER_HOST", "localhost"),
            port=int(os.getenv("MQTT_BROKER_PORT", "1883")),
            username=os.getenv("MQTT_USERNAME"),
            password=os.getenv("MQTT_PASSWORD"),
            client_id=os.getenv("MQTT_CLIENT_ID", ""),
            clean_session=parse_bool(os.getenv("MQTT_CLEAN_SESSION"), True),
            keepalive=int(os.getenv("MQTT_KEEPALIVE", "3600")),
            qos=int(os.getenv("MQTT_QOS", "0")),
            dry_run=parse_bool(os.getenv("MQTT_DRY_RUN"), False),
            tls=tls_config,
            lwt=lwt_config,
            topics=topics_config
        )

        plugwise_config = PlugwiseConfig(
            host=os.getenv("PLUGWISE_HOST", "smile.local"),
            port=int(os.getenv("PLUGWISE_PORT", "80")),
            username=os.getenv("PLUGWISE_USERNAME", "smile"),
            password=os.getenv("PLUGWISE_PASSWORD"),
            timeout=float(os.getenv("PLUGWISE_TIMEOUT", "10")),
            poll_interval=float(os.getenv("PLUGWISE_POLL_INTERVAL", "60"))
        )

        return cls(
            plugwise=plugwise_config,
            mqtt=mqtt_config,
            http_port=int(os.getenv("HTTP_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO")
        )
