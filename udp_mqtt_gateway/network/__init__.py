"""Inbound UDP transport."""

from .datagram_receiver import UDP_BUFFER_SIZE, Datagram, DatagramReceiver

__all__ = ["UDP_BUFFER_SIZE", "Datagram", "DatagramReceiver"]
