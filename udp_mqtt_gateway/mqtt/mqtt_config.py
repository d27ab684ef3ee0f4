from dataclasses import dataclass
from typing import Optional

import paho.mqtt.client as mqtt

from udp_mqtt_gateway.config.gateway_config import GatewayConfig, MqttVersion

PROTOCOLS = {
    MqttVersion.DEFAULT: mqtt.MQTTv311,
    MqttVersion.V3_1: mqtt.MQTTv31,
    MqttVersion.V3_1_1: mqtt.MQTTv311,
    MqttVersion.V5: mqtt.MQTTv5,
}

MAX_RECONNECT_DELAY = 60  # seconds


@dataclass(frozen=True)
class MqttConnectOptions:
    """Connection parameters derived from the gateway configuration"""

    host: str
    port: int
    transport: str
    websocket_path: str
    client_id: str
    protocol: int
    keep_alive: int
    connect_timeout: float
    retry_interval: float
    clean_session: bool = True
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_v5(self) -> bool:
        return self.protocol == mqtt.MQTTv5

    @property
    def reconnect_min_delay(self) -> int:
        return max(1, round(self.retry_interval))

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "MqttConnectOptions":
        broker = config.broker
        username = password = None
        if config.mqtt_username:
            username = config.mqtt_username
            password = config.mqtt_password
        return cls(
            host=broker.host,
            port=broker.port,
            transport=broker.transport,
            websocket_path=broker.path or "/mqtt",
            client_id=config.mqtt_client_id,
            protocol=PROTOCOLS[config.mqtt_version],
            keep_alive=config.mqtt_keep_alive,
            connect_timeout=config.connection_timeout_s,
            retry_interval=config.retry_interval_s,
            username=username,
            password=password,
        )
