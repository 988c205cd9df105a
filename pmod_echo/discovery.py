"""
Serial port enumeration and interactive port selection.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from serial.tools import list_ports  # type: ignore

_INDEX_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class PortDescriptor:
    """
    A serial device as reported by the OS.
    USB fields are None for non-USB devices (e.g. /dev/ttyS0).
    """
    device: str
    vid: Optional[int] = None
    pid: Optional[int] = None
    serial_number: Optional[str] = None
    product: Optional[str] = None

    @property
    def is_usb(self) -> bool:
        return self.vid is not None

    @classmethod
    def from_port_info(cls, info) -> "PortDescriptor":
        """Build from a pyserial ListPortInfo."""
        return cls(
            device=info.device,
            vid=info.vid,
            pid=info.pid,
            serial_number=info.serial_number,
            product=info.product,
        )

    def describe(self) -> str:
        """One line for the selection list, without the index."""
        if not self.is_usb:
            return self.device
        vid = f"{self.vid:04X}"
        pid = f"{self.pid:04X}" if self.pid is not None else ""
        return (f"{self.device} (USB VID:{vid} PID:{pid} "
                f"Serial:{self.serial_number or ''} Product:{self.product or ''})")


def get_available_ports() -> List[PortDescriptor]:
    """
    Get the serial ports visible to the OS, sorted by device name.
    Raises:
        OSError: If the platform enumeration fails
    """
    ports = [PortDescriptor.from_port_info(p) for p in list_ports.comports()]
    return sorted(ports, key=lambda p: p.device)


def format_port_list(ports: Sequence[PortDescriptor]) -> List[str]:
    return [f"{i}. {p.describe()}" for i, p in enumerate(ports, start=1)]


def resolve_selection(ports: Sequence[PortDescriptor], choice: str) -> Tuple[str, bool]:
    """
    Turn user input into a port name.

    An integer in [1, len(ports)] picks that entry of the list. Any other
    input, out-of-range integers included, is taken as a literal device name.

    Args:
        ports: The list that was shown to the user
        choice: Raw input line
    Returns:
        (name, listed): The resolved name and whether it is one of ``ports``.
        The name is empty if the user entered nothing.
    """
    choice = choice.strip()
    if _INDEX_RE.fullmatch(choice):
        index = int(choice)
        if 1 <= index <= len(ports):
            return ports[index - 1].device, True
    listed = any(p.device == choice for p in ports)
    return choice, listed


def choose_port(
    ports: Sequence[PortDescriptor],
    prompt: Callable[[str], str],
    echo: Callable[[str], None] = print,
) -> str:
    """
    Show the numbered list, ask for a selection and resolve it.

    Names missing from the list only produce a warning; the caller still
    tries to open them.

    Returns:
        str: The chosen port name, possibly empty
    """
    echo("")
    echo("Dostępne porty szeregowe:")
    for line in format_port_list(ports):
        echo(line)
    choice = prompt(f"Wybierz numer portu (1-{len(ports)}) lub wpisz nazwę portu ręcznie: ")
    name, listed = resolve_selection(ports, choice)
    if name and not listed:
        echo(f"Ostrzeżenie: Podana nazwa portu '{name}' nie znajduje się na liście "
             "wykrytych portów. Mimo to spróbuję otworzyć.")
    return name
