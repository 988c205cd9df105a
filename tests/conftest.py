from __future__ import annotations

from types import SimpleNamespace
from typing import List, Optional

import pytest
import serial  # type: ignore

from pmod_echo import comm as comm_module
from pmod_echo import discovery


class FakeSerial:
    """
    Stands in for serial.Serial. Replies are served one per read() call.
    Class attributes preset the behavior of the next instance, for code that
    opens the port itself.
    """

    instances: List["FakeSerial"] = []
    open_error: Optional[Exception] = None
    next_replies: List[bytes] = []
    next_write_error: Optional[Exception] = None
    next_read_error: Optional[Exception] = None

    def __init__(self, **kwargs) -> None:
        if FakeSerial.open_error is not None:
            raise FakeSerial.open_error
        self.kwargs = kwargs
        self.written: List[bytes] = []
        self.replies: List[bytes] = list(FakeSerial.next_replies)
        self.read_sizes: List[int] = []
        self.write_error = FakeSerial.next_write_error
        self.read_error = FakeSerial.next_read_error
        self.closed = False
        FakeSerial.instances.append(self)

    def write(self, data: bytes) -> int:
        if self.write_error is not None:
            raise self.write_error
        self.written.append(bytes(data))
        return len(data)

    def read(self, size: int) -> bytes:
        self.read_sizes.append(size)
        if self.read_error is not None:
            raise self.read_error
        if self.replies:
            return self.replies.pop(0)[:size]
        return b""

    def close(self) -> None:
        self.closed = True


def _reset() -> None:
    FakeSerial.instances = []
    FakeSerial.open_error = None
    FakeSerial.next_replies = []
    FakeSerial.next_write_error = None
    FakeSerial.next_read_error = None


@pytest.fixture
def fake_serial(monkeypatch):
    _reset()
    monkeypatch.setattr(serial, "Serial", FakeSerial)
    yield FakeSerial
    _reset()


@pytest.fixture
def sleeps(monkeypatch):
    """Record time.sleep calls made by the comm module instead of sleeping."""
    calls: List[float] = []
    monkeypatch.setattr(comm_module.time, "sleep", calls.append)
    return calls


class FakeComports:
    """Replaces list_ports.comports and counts how often it is called."""

    def __init__(self) -> None:
        self.ports: list = []
        self.calls = 0
        self.error: Optional[Exception] = None

    def add(self, device, vid=None, pid=None, serial_number=None, product=None) -> None:
        self.ports.append(SimpleNamespace(device=device, vid=vid, pid=pid,
                                          serial_number=serial_number, product=product))

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.ports)


@pytest.fixture
def comports(monkeypatch):
    fake = FakeComports()
    monkeypatch.setattr(discovery.list_ports, "comports", fake)
    return fake
