"""UDP to MQTT gateway."""

__version__ = "1.0.0"
