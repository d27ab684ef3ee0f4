"""Forwarding loop: one datagram in, one publish out."""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from udp_mqtt_gateway.errors import PublishError
from udp_mqtt_gateway.mqtt.session import MQTTSession
from udp_mqtt_gateway.network.datagram_receiver import DatagramReceiver

logger = logging.getLogger(__name__)


@dataclass
class ForwarderStats:
    received: int = 0
    published: int = 0
    failed: int = 0


class Forwarder:
    """Moves datagrams from the receiver to the broker session in arrival order.

    The next datagram is not read before the previous publish completed or
    failed, so at most one datagram is in flight. Publish failures are
    logged and the datagram is dropped; receive failures propagate.
    """

    def __init__(
        self,
        receiver: DatagramReceiver,
        session: MQTTSession,
        verbosity: int = 0,
        stop_event: Optional[threading.Event] = None,
    ):
        self.receiver = receiver
        self.session = session
        self.verbosity = verbosity
        self.stop_event = stop_event or threading.Event()
        self.stats = ForwarderStats()

    def stop(self):
        """Request the loop to end after the current iteration."""
        self.stop_event.set()

    def forward_one(self) -> bool:
        """Receive and publish a single datagram.

        Returns True when a datagram was published, False when none arrived
        within the poll interval or the publish failed.
        """
        datagram = self.receiver.receive()
        if datagram is None:
            return False

        self.stats.received += 1
        if self.verbosity >= 2:
            logger.debug(
                "[GATEWAY] Got a new message (%d bytes from %s:%d)",
                len(datagram.payload),
                *datagram.sender,
            )

        try:
            self.session.publish(datagram.payload)
        except PublishError as e:
            self.stats.failed += 1
            logger.error("[GATEWAY] %s", e)
            return False

        self.stats.published += 1
        if self.verbosity >= 2:
            logger.debug("[GATEWAY] Successfully published message to MQTT")
        return True

    def run(self):
        """Forward datagrams until the stop event is set."""
        logger.info("[GATEWAY] Forwarding UDP port %d to topic %s", self.receiver.port, self.session.topic)
        while not self.stop_event.is_set():
            self.forward_one()

        logger.info(
            "[GATEWAY] Forwarding stopped: %d received, %d published, %d failed",
            self.stats.received,
            self.stats.published,
            self.stats.failed,
        )
