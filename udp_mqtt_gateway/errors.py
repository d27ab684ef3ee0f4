"""Exception types raised by the gateway components."""

from typing import List, Optional


class GatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigError(GatewayError):
    """The configuration could not be loaded."""


class ConfigFileError(ConfigError):
    """The configuration file could not be opened or read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to open config file {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigSyntaxError(ConfigError):
    """A configuration line is malformed or has an invalid enumerated value."""

    def __init__(self, line: int, message: str, key: Optional[str] = None):
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.key = key


class ConfigArgumentError(ConfigError):
    """An integer value in the configuration file could not be parsed."""

    def __init__(self, line: int, key: str, value: str):
        super().__init__(f"line {line}: invalid integer for {key}: {value!r}")
        self.line = line
        self.key = key
        self.value = value


class ConfigValidationError(ConfigError):
    """The parsed configuration violates one or more constraints."""

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = list(problems)


class GatewayConnectionError(GatewayError):
    """A transport could not be set up."""


class SocketBindError(GatewayConnectionError):
    """The inbound UDP socket could not be created or bound."""

    def __init__(self, port: int, reason: str):
        super().__init__(f"Could not bind UDP socket to port {port}: {reason}")
        self.port = port


class BrokerConnectError(GatewayConnectionError):
    """The broker refused or never acknowledged the connection."""

    def __init__(self, reason_code: Optional[int], classification: str):
        if reason_code is None:
            message = f"Failed to connect to MQTT broker: {classification}"
        else:
            message = f"Failed to connect to MQTT broker, error {reason_code}: {classification}"
        super().__init__(message)
        self.reason_code = reason_code
        self.classification = classification


class PublishError(GatewayError):
    """A single publish did not complete. The session stays usable."""

    def __init__(self, topic: str, reason: str):
        super().__init__(f"Failed to publish MQTT message to {topic}: {reason}")
        self.topic = topic
        self.reason = reason


class DatagramReceiveError(GatewayError):
    """Receiving from the inbound UDP socket failed."""
