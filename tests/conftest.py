"""Pytest configuration and shared fixtures for gateway tests."""

import socket
import sys
from pathlib import Path
from typing import List

import pytest

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from udp_mqtt_gateway.config import GatewayConfig  # noqa: E402

SAMPLE_CONFIG = """\
# sample gateway configuration
InputUdpPort 9000
MqttUrl tcp://localhost:1883
MqttTopic test/topic
MqttClientID gw1
"""


class FakeMessageInfo:
    """Stands in for paho's MQTTMessageInfo."""

    def __init__(self, rc=0, published=True, wait_error=None):
        self.rc = rc
        self.published = published
        self.wait_error = wait_error
        self.wait_timeout = None

    def wait_for_publish(self, timeout=None):
        self.wait_timeout = timeout
        if self.wait_error is not None:
            raise self.wait_error

    def is_published(self):
        return self.published


class FakeMqttClient:
    """Records the calls the session makes on a paho client.

    ``connack_codes`` are answered in order, one per connect; ``None``
    means the broker never answers. ``publish_results`` likewise.
    """

    def __init__(self, connack_codes=None, connect_error=None, publish_results=None, **kwargs):
        self.init_kwargs = kwargs
        self.connack_codes = list(connack_codes if connack_codes is not None else [0])
        self.connect_error = connect_error
        self.publish_results = list(publish_results or [])
        self.connect_calls = []
        self.published = []
        self.events = []
        self.credentials = None
        self.tls_context = None
        self.ws_options = None
        self.reconnect_delay = None
        self.connect_timeout = None
        self.max_queued = None
        self.on_connect = None
        self.on_connect_fail = None
        self.on_disconnect = None

    def username_pw_set(self, username, password=None):
        self.credentials = (username, password)

    def tls_set_context(self, context=None):
        self.tls_context = context

    def ws_set_options(self, path="/mqtt", headers=None):
        self.ws_options = path

    def reconnect_delay_set(self, min_delay=1, max_delay=120):
        self.reconnect_delay = (min_delay, max_delay)

    def max_queued_messages_set(self, queue_size):
        self.max_queued = queue_size

    def connect(self, host, port=1883, keepalive=60, **kwargs):
        self.connect_calls.append({"host": host, "port": port, "keepalive": keepalive, **kwargs})
        if self.connect_error is not None:
            raise self.connect_error
        return 0

    def loop_start(self):
        self.events.append("loop_start")
        code = self.connack_codes.pop(0) if self.connack_codes else 0
        if code is not None:
            self.on_connect(self, None, None, code, None)
        return 0

    def loop_stop(self):
        self.events.append("loop_stop")
        return 0

    def disconnect(self):
        self.events.append("disconnect")
        return 0

    def publish(self, topic, payload=None, qos=0, retain=False):
        self.published.append({"topic": topic, "payload": payload, "qos": qos, "retain": retain})
        if self.publish_results:
            return self.publish_results.pop(0)
        return FakeMessageInfo()


class FakeClientFactory:
    """Callable passed as ``client_factory``; keeps every client it built."""

    def __init__(self, **behaviour):
        self.behaviour = behaviour
        self.clients: List[FakeMqttClient] = []

    def __call__(self, **kwargs):
        client = FakeMqttClient(**self.behaviour, **kwargs)
        self.clients.append(client)
        return client

    @property
    def client(self) -> FakeMqttClient:
        return self.clients[-1]


@pytest.fixture
def free_port():
    """Find and return a free UDP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind(("", 0))
        port = s.getsockname()[1]
    return port


@pytest.fixture
def sample_config_text():
    return SAMPLE_CONFIG


@pytest.fixture
def write_config(tmp_path):
    """Write configuration text to a file and return its path."""

    def _write(text, name="udpmqttgw.conf"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)

    return _write


@pytest.fixture
def make_config():
    """Build a GatewayConfig with the sample required fields."""

    def _make(**overrides):
        values = {
            "input_udp_port": 9000,
            "mqtt_url": "tcp://localhost:1883",
            "mqtt_topic": "test/topic",
            "mqtt_client_id": "gw1",
        }
        values.update(overrides)
        return GatewayConfig(**values)

    return _make


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def timeout():
    """Standard timeout for socket tests (seconds)."""
    return 5.0


@pytest.fixture
def make_client_factory():
    """Build a fake client factory with custom connect/publish behaviour."""
    return FakeClientFactory


@pytest.fixture
def message_info():
    return FakeMessageInfo
