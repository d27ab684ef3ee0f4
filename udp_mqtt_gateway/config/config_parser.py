"""Parser for the line-oriented ``KEY value`` configuration file."""

import logging
from typing import Dict, Iterable, List, Optional

from udp_mqtt_gateway.config.gateway_config import (
    DEFAULT_CONFIG_PATH,
    GatewayConfig,
    MqttVersion,
    TlsConfig,
    TlsVersion,
    parse_broker_url,
)
from udp_mqtt_gateway.errors import (
    ConfigArgumentError,
    ConfigFileError,
    ConfigSyntaxError,
    ConfigValidationError,
)

logger = logging.getLogger(__name__)

WHITESPACE = " \t\r\n"

# file key -> (field name, value kind)
GATEWAY_KEYS = {
    "InputUdpPort": ("input_udp_port", "int"),
    "MqttUrl": ("mqtt_url", "str"),
    "MqttTopic": ("mqtt_topic", "str"),
    "MqttClientID": ("mqtt_client_id", "str"),
    "MqttUsername": ("mqtt_username", "str"),
    "MqttPassword": ("mqtt_password", "str"),
    "MqttVersion": ("mqtt_version", "mqtt_version"),
    "MqttQosLevel": ("mqtt_qos", "int"),
    "MqttKeepAliveInterval": ("mqtt_keep_alive", "int"),
    "MqttRetryInterval": ("mqtt_retry_interval", "int"),
    "MqttConnectionTimeout": ("mqtt_connection_timeout", "int"),
    "MqttConnectAttempts": ("mqtt_connect_attempts", "int"),
}

TLS_KEYS = {
    "MqttSslEnableServerCertAuth": ("enable_server_cert_auth", "flag"),
    "MqttSslVersion": ("version", "tls_version"),
    "MqttSslVerify": ("verify", "flag"),
    "MqttSslTrustStore": ("trust_store", "str"),
    "MqttSslKeyStore": ("key_store", "str"),
    "MqttSslPrivateKey": ("private_key", "str"),
    "MqttSslPrivateKeyPasswd": ("private_key_password", "str"),
}

REQUIRED_KEYS = ("MqttUrl", "MqttTopic", "MqttClientID")


def strip_line(line: str) -> str:
    """Drop everything from the first ``#`` and trim surrounding whitespace."""
    return line.split("#", 1)[0].strip(WHITESPACE)


def _convert(value: str, kind: str, key: str, line_num: int):
    if kind == "str":
        return value
    if kind == "mqtt_version":
        try:
            return MqttVersion(value)
        except ValueError:
            raise ConfigSyntaxError(line_num, f"Invalid value for {key}: {value!r}", key) from None
    if kind == "tls_version":
        try:
            return TlsVersion(value)
        except ValueError:
            raise ConfigSyntaxError(line_num, f"Invalid value for {key}: {value!r}", key) from None
    try:
        number = int(value)
    except ValueError:
        raise ConfigArgumentError(line_num, key, value) from None
    if kind == "flag":
        return number != 0
    return number


def parse_config_lines(lines: Iterable[str]) -> Dict[str, dict]:
    """Parse configuration lines into raw gateway and TLS settings.

    Structural problems abort at the offending line. Returns a dict with
    ``gateway`` and ``tls`` keyword dicts, not yet validated.
    """
    gateway: Dict[str, object] = {}
    tls: Dict[str, object] = {}

    for line_num, raw_line in enumerate(lines, start=1):
        line = strip_line(raw_line)
        if not line:
            continue

        key, sep, value = line.partition(" ")
        if not sep:
            raise ConfigSyntaxError(line_num, "Invalid parameter in .conf file")

        if key in GATEWAY_KEYS:
            name, kind = GATEWAY_KEYS[key]
            gateway[name] = _convert(value, kind, key, line_num)
        elif key in TLS_KEYS:
            name, kind = TLS_KEYS[key]
            tls[name] = _convert(value, kind, key, line_num)
        else:
            logger.debug("[CONFIG] Ignoring unknown key %s at line %d", key, line_num)

    return {"gateway": gateway, "tls": tls}


def validate_settings(gateway: Dict[str, object], tls: Optional[Dict[str, object]] = None) -> List[str]:
    """Return every problem found in the raw gateway and TLS settings."""
    problems = []

    for key in REQUIRED_KEYS:
        name = GATEWAY_KEYS[key][0]
        if not gateway.get(name):
            problems.append(f"{key} must be set in the configuration file")

    port = gateway.get("input_udp_port", 0)
    if not port:
        problems.append("InputUdpPort must be set in the configuration file")
    elif not 0 < port < 65536:
        problems.append(f"InputUdpPort {port} is not a valid port number")

    if gateway.get("mqtt_username") and not gateway.get("mqtt_password"):
        problems.append("MqttPassword must be set when a username is given")

    url = gateway.get("mqtt_url")
    if url:
        try:
            parse_broker_url(url)
        except ValueError as e:
            problems.append(f"MqttUrl is invalid: {e}")

    qos = gateway.get("mqtt_qos", 0)
    if qos not in (0, 1, 2):
        problems.append(f"MqttQosLevel must be 0, 1 or 2, got {qos}")

    for key in ("MqttKeepAliveInterval", "MqttRetryInterval", "MqttConnectionTimeout", "MqttConnectAttempts"):
        name = GATEWAY_KEYS[key][0]
        if name in gateway and gateway[name] <= 0:
            problems.append(f"{key} must be greater than zero")

    tls = tls or {}
    if tls.get("private_key") and not tls.get("key_store"):
        problems.append("MqttSslKeyStore must be set when a private key is given")

    return problems


def build_config(
    lines: Iterable[str], verbosity: int = 0, config_path: str = DEFAULT_CONFIG_PATH
) -> GatewayConfig:
    """Parse and validate configuration lines into a GatewayConfig."""
    settings = parse_config_lines(lines)
    problems = validate_settings(settings["gateway"], settings["tls"])
    if problems:
        raise ConfigValidationError(problems)

    return GatewayConfig(
        tls=TlsConfig(**settings["tls"]),
        verbosity=verbosity,
        config_path=config_path,
        **settings["gateway"],
    )


def load_config(path: str = DEFAULT_CONFIG_PATH, verbosity: int = 0) -> GatewayConfig:
    """Load and validate the configuration file at ``path``."""
    try:
        with open(path, "rb") as f:
            raw_lines = f.readlines()
    except OSError as e:
        raise ConfigFileError(path, e.strerror or str(e)) from e

    lines = []
    for line_num, raw in enumerate(raw_lines, start=1):
        try:
            lines.append(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise ConfigSyntaxError(line_num, f"Invalid UTF-8 in .conf file: {e.reason}") from e

    return build_config(lines, verbosity=verbosity, config_path=path)


def format_config(config: GatewayConfig) -> str:
    """Render the resolved configuration for the verbose startup dump.

    Credentials are printed in plain text.
    """
    tls = config.tls
    out = [
        "Configuration:",
        f"- Input UDP Port:       {config.input_udp_port}",
        f"- MQTT URL:             {config.mqtt_url}",
        f"- MQTT Topic:           {config.mqtt_topic}",
        f"- MQTT Client ID:       {config.mqtt_client_id}",
    ]
    if config.mqtt_username:
        out.append(f"- MQTT User Name:       {config.mqtt_username}")
        out.append(f"- MQTT Password:        {config.mqtt_password}")

    out.append("")
    out.append(f"- MQTT Version:         {config.mqtt_version.value}")
    out.append(f"- MQTT QOS Level:       {config.mqtt_qos}")
    out.append(f"- MQTT Keep Alive Int.: {config.mqtt_keep_alive}")
    out.append(f"- MQTT Retry Int.:      {config.mqtt_retry_interval}")
    out.append(f"- MQTT Conn. Timeout:   {config.mqtt_connection_timeout}")
    out.append(f"- MQTT Conn. Attempts:  {config.mqtt_connect_attempts}")

    out.append(f"- TLS Enabled:          {int(config.tls_enabled)}")
    out.append(f"- TLS Server Cert Auth: {int(tls.server_cert_auth)}")
    out.append(f"- TLS Version:          {tls.tls_version.value}")
    out.append(f"- TLS Verify:           {int(tls.verify_hostname)}")
    if tls.trust_store:
        out.append(f"- TLS Trust Store:      {tls.trust_store}")
    if tls.key_store:
        out.append(f"- TLS Key Store:        {tls.key_store}")
    if tls.private_key:
        out.append(f"- TLS Private Key:      {tls.private_key}")
        out.append(f"- TLS Priv. Key Passwd: {tls.private_key_password or ''}")

    return "\n".join(out) + "\n"
