"""Main entry point for the UDP MQTT gateway."""

import logging
import signal
import sys
import threading
from typing import Callable, List, Optional

from udp_mqtt_gateway import __version__
from udp_mqtt_gateway.config import GatewayConfig, format_config, load_config, parse_args
from udp_mqtt_gateway.errors import (
    ConfigError,
    ConfigValidationError,
    DatagramReceiveError,
    GatewayConnectionError,
)
from udp_mqtt_gateway.forwarder import Forwarder
from udp_mqtt_gateway.mqtt.session import MQTTSession
from udp_mqtt_gateway.network.datagram_receiver import DatagramReceiver

logger = logging.getLogger(__name__)


class Gateway:
    """Coordinates the UDP receiver, the broker session and the forwarding loop."""

    def __init__(
        self,
        config: GatewayConfig,
        receiver_factory: Callable[..., DatagramReceiver] = DatagramReceiver,
        session_factory: Callable[..., MQTTSession] = MQTTSession,
    ):
        self.config = config
        self.receiver_factory = receiver_factory
        self.session_factory = session_factory
        self.stop_event = threading.Event()
        self.forwarder: Optional[Forwarder] = None

    def start(self):
        """Open the UDP port, connect to the broker and forward until stopped.

        Both transports are closed on every exit path.
        """
        with self.receiver_factory(self.config.input_udp_port) as receiver:
            if self.config.verbosity >= 1:
                logger.info("[GATEWAY] Successfully opened UDP port")

            with self.session_factory(self.config) as session:
                if self.config.verbosity >= 1:
                    logger.info("[GATEWAY] Successfully connected to MQTT broker")

                self.forwarder = Forwarder(
                    receiver,
                    session,
                    verbosity=self.config.verbosity,
                    stop_event=self.stop_event,
                )
                self.forwarder.run()

        logger.info("[GATEWAY] Gateway stopped.")

    def stop(self):
        """Stop the gateway after the datagram currently in flight."""
        self.stop_event.set()

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Handle interrupt signal."""
        logger.info("[GATEWAY] Interrupt signal (%d) received.", sig)
        self.stop()


def configure_logging(verbosity: int):
    logging.basicConfig(
        level=logging.DEBUG if verbosity >= 2 else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    options = parse_args(argv)
    configure_logging(options.verbosity)

    logger.info("UDP MQTT Gateway, Version %s", __version__)
    logger.info("Using configuration file: %s", options.config_path)

    try:
        config = load_config(options.config_path, verbosity=options.verbosity)
    except ConfigValidationError as e:
        for problem in e.problems:
            logger.error("[CONFIG] %s", problem)
        logger.info("Exiting, because of invalid configuration")
        return 1
    except ConfigError as e:
        logger.error("[CONFIG] %s", e)
        logger.info("Exiting, because of an error parsing configuration")
        return 1

    if config.verbosity >= 1:
        print(format_config(config))

    gateway = Gateway(config)
    gateway.install_signal_handlers()
    try:
        gateway.start()
    except GatewayConnectionError as e:
        logger.error("[GATEWAY] %s", e)
        return 1
    except DatagramReceiveError as e:
        logger.error("[GATEWAY] %s", e)
        return 1

    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
