"""PMOD echo package.

Serial port diagnostic: pick a UART port, send a message and wait for the
device to answer, using pyserial.
"""

__all__ = [
    "Comm",
    "PollSettings",
    "PortDescriptor",
    "TransportConfig",
    "choose_port",
    "get_available_ports",
    "resolve_selection",
]

__version__ = "0.1.0"

from .comm import Comm, PollSettings, TransportConfig
from .discovery import PortDescriptor, choose_port, get_available_ports, resolve_selection
