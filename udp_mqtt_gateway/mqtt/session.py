"""MQTT broker session used to publish forwarded datagrams."""

import logging
import ssl
import threading
import time
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from udp_mqtt_gateway.config.gateway_config import GatewayConfig
from udp_mqtt_gateway.errors import BrokerConnectError, PublishError
from udp_mqtt_gateway.mqtt.mqtt_config import MAX_RECONNECT_DELAY, MqttConnectOptions
from udp_mqtt_gateway.mqtt.reason_codes import classify_connect_failure
from udp_mqtt_gateway.mqtt.tls import build_tls_context

logger = logging.getLogger(__name__)


def _reason_value(reason_code) -> int:
    return int(getattr(reason_code, "value", reason_code))


def _is_failure(reason_code) -> bool:
    failure = getattr(reason_code, "is_failure", None)
    if failure is None:
        return _reason_value(reason_code) != 0
    return bool(failure)


class MQTTSession:
    """Owns the single outbound broker connection.

    ``connect`` blocks until the broker acknowledged the session, and
    ``publish`` blocks until one message completed. Only one publish may
    be outstanding at a time; callers are expected to serialize.
    """

    def __init__(
        self,
        config: GatewayConfig,
        client_factory: Callable[..., mqtt.Client] = mqtt.Client,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.options = MqttConnectOptions.from_config(config)
        self.topic = config.mqtt_topic
        self.qos = config.mqtt_qos
        self.publish_timeout = config.connection_timeout_s

        self._client_factory = client_factory
        self._sleep = sleep
        self._client: Optional[mqtt.Client] = None
        self._connack = threading.Event()
        self._connect_result = None
        self.connected = False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _create_client(self, tls_context: Optional[ssl.SSLContext]) -> mqtt.Client:
        opts = self.options
        kwargs = {
            "callback_api_version": mqtt.CallbackAPIVersion.VERSION2,
            "client_id": opts.client_id,
            "protocol": opts.protocol,
            "transport": opts.transport,
        }
        # MQTT 5 replaces clean session with clean start on connect
        if not opts.is_v5:
            kwargs["clean_session"] = opts.clean_session
        client = self._client_factory(**kwargs)

        if opts.transport == "websockets":
            client.ws_set_options(path=opts.websocket_path)
        if opts.username is not None:
            client.username_pw_set(opts.username, opts.password)
        if tls_context is not None:
            client.tls_set_context(tls_context)

        client.connect_timeout = opts.connect_timeout
        # at most one unacknowledged message may stay inside the client
        client.max_queued_messages_set(1)
        client.reconnect_delay_set(min_delay=opts.reconnect_min_delay, max_delay=MAX_RECONNECT_DELAY)

        client.on_connect = self._on_connect
        client.on_connect_fail = self._on_connect_fail
        client.on_disconnect = self._on_disconnect
        return client

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Callback when the broker answered the connect request."""
        self._connect_result = reason_code
        if _is_failure(reason_code):
            self.connected = False
        else:
            if self._connack.is_set():
                logger.info("[MQTT] Reconnected to broker at %s:%d", self.options.host, self.options.port)
            self.connected = True
        self._connack.set()

    def _on_connect_fail(self, client, userdata):
        """Callback when the network loop could not reach the broker."""
        logger.warning("[MQTT] Connection attempt to %s:%d failed", self.options.host, self.options.port)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        """Callback when disconnected from broker."""
        self.connected = False
        if _is_failure(reason_code):
            logger.warning("[MQTT] Unexpected disconnect from broker (%s), reconnecting", reason_code)
        else:
            logger.info("[MQTT] Disconnected from broker")

    def _abort_connect(self) -> None:
        """Close the half-open broker socket and stop the network loop."""
        self._client.disconnect()
        self._client.loop_stop()
        self.connected = False

    def _connect_once(self) -> None:
        opts = self.options
        self._connack.clear()
        self._connect_result = None

        connect_kwargs = {"keepalive": opts.keep_alive}
        if opts.is_v5:
            connect_kwargs["clean_start"] = opts.clean_session

        logger.info("[MQTT] Connecting to %s:%d as %s", opts.host, opts.port, opts.client_id)
        try:
            self._client.connect(opts.host, opts.port, **connect_kwargs)
        except OSError as e:
            logger.debug("[MQTT] Socket error while connecting: %s", e)
            raise BrokerConnectError(None, "Server unavailable") from e

        self._client.loop_start()
        if not self._connack.wait(opts.connect_timeout):
            self._abort_connect()
            raise BrokerConnectError(None, "Connection timed out")

        if _is_failure(self._connect_result):
            self._abort_connect()
            code = _reason_value(self._connect_result)
            raise BrokerConnectError(code, classify_connect_failure(code))

    def connect(self) -> None:
        """Connect to the broker, retrying up to the configured attempts.

        The default of one attempt gives up on the first failure. Later
        attempts back off starting at the retry interval, doubling each time.
        """
        try:
            tls_context = build_tls_context(self.config)
        except (OSError, ValueError) as e:
            raise BrokerConnectError(None, f"TLS setup failed: {e}") from e
        self._client = self._create_client(tls_context)

        attempts = self.config.mqtt_connect_attempts
        delay = self.options.retry_interval
        for attempt in range(1, attempts + 1):
            try:
                self._connect_once()
                break
            except BrokerConnectError as e:
                if attempt >= attempts:
                    raise
                logger.warning(
                    "[MQTT] %s (attempt %d/%d), retrying in %.1fs", e, attempt, attempts, delay
                )
                self._sleep(delay)
                delay *= 2

        logger.info("[MQTT] Connected to broker at %s:%d", self.options.host, self.options.port)

    def publish(self, payload: bytes) -> None:
        """Publish one payload and wait until it completed or timed out."""
        if self._client is None or not self.connected:
            raise PublishError(self.topic, "not connected")

        info = self._client.publish(self.topic, payload, qos=self.qos, retain=False)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(self.topic, mqtt.error_string(info.rc))

        try:
            info.wait_for_publish(self.publish_timeout)
        except (RuntimeError, ValueError) as e:
            raise PublishError(self.topic, str(e)) from e

        if not info.is_published():
            raise PublishError(self.topic, f"timed out after {self.config.mqtt_connection_timeout} ms")

    def close(self) -> None:
        """Disconnect from the broker and stop the network loop."""
        if self._client is None:
            return
        self._client.disconnect()
        self._client.loop_stop()
        self._client = None
        self.connected = False
