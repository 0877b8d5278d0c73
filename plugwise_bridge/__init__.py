"""Bridge between an MQTT broker and a Plugwise home heating gateway."""

__version__ = "1.0.0"
