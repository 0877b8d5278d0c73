"""Plugwise Smile gateway HTTP API client implementation."""

import logging
import math
import xml.etree.ElementTree as ET
from typing import List, Optional, Union

import requests

from .base import BasePlugwiseClient
from .messages import TelemetryMessage


class PlugwiseClient(BasePlugwiseClient):
    """Client for the Plugwise Smile (Anna/Adam) local HTTP API."""

    DOMAIN_OBJECTS_PATH = "/core/domain_objects"
    THERMOSTAT_PATH = "/core/appliances;id={appliance_id}/thermostat"

    def __init__(
        self,
        host: str,
        password: str,
        username: str = "smile",
        port: int = 80,
        timeout: float = 10,
    ):
        """Initialize the Plugwise client.

        Args:
            host: Gateway hostname or IP address
            password: Gateway password (the Smile ID printed on the device)
            username: Gateway username (default: smile)
            port: Gateway HTTP port
            timeout: Request timeout in seconds
        """
        self.base_url = f"http://{host}:{port}"
        self.auth = (username, password)
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.logger.info(f"Initialized Plugwise client for {self.base_url}")

    def set_thermostat(self, appliance_id: str, value: float) -> bool:
        """Change the thermostat setpoint of an appliance.

        Args:
            appliance_id: 32 character appliance ID
            value: Setpoint in degrees Celsius

        Returns:
            True if the gateway accepted the setpoint, False otherwise
        """
        if not math.isfinite(value):
            self.logger.error(f"Refusing non-finite thermostat setpoint {value} for {appliance_id}")
            return False

        url = self.base_url + self.THERMOSTAT_PATH.format(appliance_id=appliance_id)
        body = f"<thermostat_functionality><setpoint>{value}</setpoint></thermostat_functionality>"

        try:
            self.logger.info(f"Setting thermostat of {appliance_id} to {value}")
            response = requests.put(
                url,
                auth=self.auth,
                data=body,
                headers={"Content-Type": "text/xml"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return True

        except requests.RequestException as e:
            return self._handle_request_error(e, f"setting thermostat of {appliance_id}")

    def read_domain_objects(self) -> Optional[ET.Element]:
        """Read the domain objects document from the gateway.

        Returns:
            Parsed XML root element, or None if error
        """
        try:
            self.logger.debug("Reading domain objects from Plugwise")
            response = requests.get(
                self.base_url + self.DOMAIN_OBJECTS_PATH,
                auth=self.auth,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return ET.fromstring(response.content)

        except requests.RequestException as e:
            self._handle_request_error(e, "reading domain objects")
            return None
        except ET.ParseError as e:
            self.logger.error(f"Invalid domain objects XML from Plugwise: {e}")
            return None

    def get_appliances(self) -> Optional[List[TelemetryMessage]]:
        """Read every appliance as a flat telemetry message.

        Each message holds the appliance ``id``, ``name`` and ``type``, the
        latest value of every point log keyed by its type, and the
        thermostat ``setpoint`` when the appliance has one.

        Returns:
            List of telemetry messages, or None if the gateway could not be read
        """
        root = self.read_domain_objects()
        if root is None:
            return None

        messages = [self._appliance_to_message(appliance) for appliance in root.iter("appliance")]
        self.logger.debug(f"Read {len(messages)} appliance(s) from Plugwise")
        return messages

    def _appliance_to_message(self, appliance: ET.Element) -> TelemetryMessage:
        message: TelemetryMessage = {
            "id": appliance.get("id", ""),
            "name": appliance.findtext("name", ""),
            "type": appliance.findtext("type", ""),
        }

        for point_log in appliance.iter("point_log"):
            log_type = point_log.findtext("type")
            measurement = point_log.findtext("period/measurement")
            if log_type and measurement is not None:
                message[log_type] = _parse_value(measurement)

        setpoint = appliance.findtext("actuator_functionalities/thermostat_functionality/setpoint")
        if setpoint is not None:
            message["setpoint"] = _parse_value(setpoint)

        return message

    def _handle_request_error(self, error: requests.RequestException, action: str) -> bool:
        """Log a request error.

        Returns:
            False (indicating failure)
        """
        self.logger.error(f"Error {action}: {error}")

        if getattr(error, "response", None) is not None:
            self.logger.error(f"HTTP Status: {error.response.status_code}")

        return False


def _parse_value(text: str) -> Union[float, str]:
    """Convert a measurement to a finite float where possible.

    NaN and infinite readings are kept as strings.
    """
    try:
        value = float(text)
    except ValueError:
        return text.strip()

    if not math.isfinite(value):
        return text.strip()
    return value
