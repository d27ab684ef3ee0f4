"""Configuration model: CLI options, config file parsing and validation."""

from .cli import CliOptions, parse_args
from .config_parser import build_config, format_config, load_config
from .gateway_config import (
    DEFAULT_CONFIG_PATH,
    BrokerAddress,
    GatewayConfig,
    MqttVersion,
    TlsConfig,
    TlsVersion,
    parse_broker_url,
)

__all__ = [
    "BrokerAddress",
    "CliOptions",
    "DEFAULT_CONFIG_PATH",
    "GatewayConfig",
    "MqttVersion",
    "TlsConfig",
    "TlsVersion",
    "build_config",
    "format_config",
    "load_config",
    "parse_args",
    "parse_broker_url",
]
