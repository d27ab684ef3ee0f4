"""Configuration model for the gateway."""

import enum
from dataclasses import dataclass, field, fields
from typing import Optional
from urllib.parse import urlsplit

DEFAULT_CONFIG_PATH = "/etc/udpmqttgw.conf"

DEFAULT_QOS = 0
DEFAULT_KEEP_ALIVE = 20  # seconds
DEFAULT_RETRY_INTERVAL = 1000  # milliseconds
DEFAULT_CONNECTION_TIMEOUT = 1000  # milliseconds
DEFAULT_CONNECT_ATTEMPTS = 1

TLS_SCHEMES = ("ssl", "mqtts", "wss")
DEFAULT_PORTS = {
    "tcp": 1883,
    "mqtt": 1883,
    "ssl": 8883,
    "mqtts": 8883,
    "ws": 80,
    "wss": 443,
}


class MqttVersion(enum.Enum):
    DEFAULT = "default"
    V3_1 = "3.1"
    V3_1_1 = "3.1.1"
    V5 = "5"


class TlsVersion(enum.Enum):
    DEFAULT = "default"
    TLS_1_0 = "1.0"
    TLS_1_1 = "1.1"
    TLS_1_2 = "1.2"


@dataclass(frozen=True)
class BrokerAddress:
    """Host, port and transport parsed from the broker URL."""

    scheme: str
    host: str
    port: int
    path: str = ""

    @property
    def transport(self) -> str:
        return "websockets" if self.scheme in ("ws", "wss") else "tcp"

    @property
    def uses_tls(self) -> bool:
        return self.scheme in TLS_SCHEMES


def parse_broker_url(url: str) -> BrokerAddress:
    """Split a broker URL such as ``tcp://localhost:1883`` into its parts.

    Raises ValueError for an unsupported scheme or a missing host.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ValueError(f"unsupported broker URL scheme {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError(f"broker URL {url!r} has no host")
    port = parts.port or DEFAULT_PORTS[scheme]
    return BrokerAddress(scheme=scheme, host=parts.hostname, port=port, path=parts.path)


@dataclass(frozen=True)
class TlsConfig:
    """Optional TLS settings. ``None`` means the key was not in the file."""

    enable_server_cert_auth: Optional[bool] = None
    version: Optional[TlsVersion] = None
    verify: Optional[bool] = None
    trust_store: Optional[str] = None
    key_store: Optional[str] = None
    private_key: Optional[str] = None
    private_key_password: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        """True when at least one TLS key was set."""
        return any(getattr(self, f.name) is not None for f in fields(self))

    @property
    def server_cert_auth(self) -> bool:
        return True if self.enable_server_cert_auth is None else self.enable_server_cert_auth

    @property
    def tls_version(self) -> TlsVersion:
        return self.version or TlsVersion.DEFAULT

    @property
    def verify_hostname(self) -> bool:
        return bool(self.verify)


@dataclass(frozen=True)
class GatewayConfig:
    """Validated, read-only runtime configuration."""

    input_udp_port: int
    mqtt_url: str
    mqtt_topic: str
    mqtt_client_id: str
    mqtt_username: str = ""
    mqtt_password: str = ""
    mqtt_version: MqttVersion = MqttVersion.DEFAULT
    mqtt_qos: int = DEFAULT_QOS
    mqtt_keep_alive: int = DEFAULT_KEEP_ALIVE
    mqtt_retry_interval: int = DEFAULT_RETRY_INTERVAL
    mqtt_connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    mqtt_connect_attempts: int = DEFAULT_CONNECT_ATTEMPTS
    tls: TlsConfig = field(default_factory=TlsConfig)
    verbosity: int = 0
    config_path: str = DEFAULT_CONFIG_PATH

    @property
    def broker(self) -> BrokerAddress:
        return parse_broker_url(self.mqtt_url)

    @property
    def tls_enabled(self) -> bool:
        return self.tls.is_configured or self.broker.uses_tls

    @property
    def connection_timeout_s(self) -> float:
        return self.mqtt_connection_timeout / 1000.0

    @property
    def retry_interval_s(self) -> float:
        return self.mqtt_retry_interval / 1000.0
