from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Final, Optional

import serial

DEFAULT_BAUDRATE: Final[int] = 9600
DEFAULT_MESSAGE: Final[str] = "Witaj PMOD!\n"


@dataclass(frozen=True)
class TransportConfig:
    """
    Framing parameters for opening a port.
    Only the baud rate is configurable; framing is fixed at 8/N/1.
    """
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = serial.EIGHTBITS
    parity: str = serial.PARITY_NONE
    stopbits: float = serial.STOPBITS_ONE

    def __post_init__(self) -> None:
        if self.baudrate <= 0:
            raise ValueError("baudrate must be positive")


@dataclass(frozen=True)
class PollSettings:
    """
    Timing of the read phase.
    Fields:
        settle: seconds to wait after the write, before the first read
        attempts: number of reads before giving up
        interval: seconds to wait after each empty read
        buffer_size: bytes requested per read
    """
    settle: float = 0.5
    attempts: int = 10
    interval: float = 0.5
    buffer_size: int = 100

    @property
    def window(self) -> float:
        """Seconds spent in the read loop when nothing arrives."""
        return self.attempts * self.interval


class Comm:
    """
    One open serial channel.

    The port is opened non-blocking (timeout=0), so ``read`` returns whatever
    is already buffered, possibly nothing. Errors from pyserial propagate to
    the caller unchanged.
    """

    _serial: serial.Serial
    port: str
    config: TransportConfig

    def __init__(self, port: str, config: TransportConfig = TransportConfig()) -> None:
        """
        Open the port.
        Args:
            port (str): Device name, e.g. /dev/ttyUSB0 or COM3
            config (TransportConfig): Baud rate and framing
        Raises:
            serial.SerialException: If the port cannot be opened
        """
        self.port = port
        self.config = config
        self._serial = serial.Serial(
            port=port,
            baudrate=config.baudrate,
            bytesize=config.bytesize,
            parity=config.parity,
            stopbits=config.stopbits,
            timeout=0,
        )

    def close(self) -> None:
        """
        Close the serial port.
        """
        self._serial.close()

    def __enter__(self) -> "Comm":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write(self, data: bytes) -> int:
        """
        Write raw bytes in a single call.
        Returns:
            int: Number of bytes written
        """
        written = self._serial.write(bytes(data))
        # pyserial backends may return None for a complete write
        return len(data) if written is None else written

    def read(self, size: int) -> bytes:
        """
        Read up to ``size`` bytes that are already available.
        """
        return self._serial.read(size)

    def poll(self, settings: PollSettings = PollSettings(),
             on_settled: Optional[Callable[[], None]] = None) -> Optional[bytes]:
        """
        Wait for a reply after a write.

        Sleeps ``settings.settle`` seconds, then reads up to
        ``settings.attempts`` times, sleeping ``settings.interval`` after every
        empty read. The first non-empty read is returned as-is; nothing is
        accumulated across attempts.

        Args:
            settings: Timing of the read phase
            on_settled: Called once after the settle delay, before the first read
        Returns:
            bytes or None: Received data, or None if every attempt was empty
        """
        time.sleep(settings.settle)
        if on_settled is not None:
            on_settled()
        for _ in range(settings.attempts):
            data = self.read(settings.buffer_size)
            if data:
                return data
            time.sleep(settings.interval)
        return None
