"""Broker session management."""

from .mqtt_config import MqttConnectOptions
from .reason_codes import classify_connect_failure
from .session import MQTTSession
from .tls import build_tls_context

__all__ = ["MQTTSession", "MqttConnectOptions", "build_tls_context", "classify_connect_failure"]
