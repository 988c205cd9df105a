from __future__ import annotations

from typing import List, Optional

import click
import serial  # type: ignore

from . import __version__
from .comm import DEFAULT_BAUDRATE, DEFAULT_MESSAGE, Comm, PollSettings, TransportConfig
from .config import ConfigError, get_option_defaults, load_config
from .discovery import PortDescriptor, choose_port, format_port_list, get_available_ports

_DEFAULT_POLL = PollSettings()


def _apply_config(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> None:
    # Eager, so the file's values become defaults before the other options are read
    if value is None:
        return
    try:
        defaults = get_option_defaults(load_config(value))
    except ConfigError as e:
        raise click.ClickException(f"Nie można wczytać pliku konfiguracyjnego {value}: {e}")
    ctx.default_map = {**(ctx.default_map or {}), **defaults}


def _scan_ports() -> List[PortDescriptor]:
    try:
        ports = get_available_ports()
    except OSError as e:
        raise click.ClickException(f"Błąd podczas listowania portów: {e}")
    if not ports:
        raise click.ClickException(
            "Nie znaleziono żadnych portów szeregowych! Upewnij się, że PMOD jest podłączony.")
    return ports


def _prompt_line(text: str) -> str:
    try:
        return click.prompt(text, default="", show_default=False, prompt_suffix="")
    except click.Abort:
        # EOF on stdin counts as an empty answer
        click.echo()
        return ""


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config", type=click.Path(exists=True, dir_okay=False), is_eager=True,
              expose_value=False, callback=_apply_config,
              help="TOML file with [serial] and [poll] defaults")
@click.option("-port", "--port", "port", default="",
              help="Serial port (e.g. /dev/ttyUSB0, COM1). If empty, lists ports and asks.")
@click.option("-baud", "--baudrate", "baudrate", type=click.IntRange(min=1),
              default=DEFAULT_BAUDRATE, show_default=True, help="Baud rate")
@click.option("-msg", "--message", "message", default=DEFAULT_MESSAGE,
              help='Message to send [default: "Witaj PMOD!\\n"]')
@click.option("--settle", type=click.FloatRange(min=0), default=_DEFAULT_POLL.settle,
              show_default=True, help="Seconds to wait after sending")
@click.option("--attempts", type=click.IntRange(min=1), default=_DEFAULT_POLL.attempts,
              show_default=True, help="Read attempts before giving up")
@click.option("--interval", type=click.FloatRange(min=0), default=_DEFAULT_POLL.interval,
              show_default=True, help="Seconds between read attempts")
@click.option("--buffer-size", type=click.IntRange(min=1), default=_DEFAULT_POLL.buffer_size,
              show_default=True, help="Bytes requested per read")
@click.option("--list", "list_only", is_flag=True, help="List serial ports and exit")
@click.version_option(__version__, prog_name="pmod-echo")
def main(port: str, baudrate: int, message: str, settle: float, attempts: int,
         interval: float, buffer_size: int, list_only: bool) -> None:
    """Send a message to a serial device and wait for its echo.

    Without -port the detected ports are listed and one is chosen
    interactively, by number or by name.

    Examples:

      # Choose the port from a list
      pmod-echo

      # Specific port and baud rate
      pmod-echo -port /dev/ttyUSB1 -baud 115200 -msg "PING"

      # Only show what is connected
      pmod-echo --list
    """
    if list_only:
        for line in format_port_list(_scan_ports()):
            click.echo(line)
        return

    if not port:
        click.echo("Skanowanie dostępnych portów szeregowych...")
        port = choose_port(_scan_ports(), prompt=_prompt_line, echo=click.echo)
        if not port:
            raise click.ClickException("Nie wybrano portu. Program zostanie zakończony.")

    click.echo(f"Wybrany port: {port}")

    settings = PollSettings(settle=settle, attempts=attempts, interval=interval,
                            buffer_size=buffer_size)
    try:
        comm = Comm(port, TransportConfig(baudrate=baudrate))
    except (serial.SerialException, ValueError) as e:
        raise click.ClickException(
            f"Błąd podczas otwierania portu {port}: {e}\n"
            "Upewnij się, że nazwa portu jest poprawna i masz do niego uprawnienia.")

    with comm:
        click.echo(f"Pomyślnie otwarto port szeregowy {port} z prędkością {baudrate} baud.")

        # argv bytes that are not valid UTF-8 arrive surrogate-escaped; send them unchanged
        payload = message.encode("utf-8", errors="surrogateescape")
        try:
            written = comm.write(payload)
        except (serial.SerialException, OSError) as e:
            raise click.ClickException(f"Błąd podczas wysyłania danych: {e}")
        sent = payload.decode("utf-8", errors="replace")
        click.echo(f'Wysłano {written} bajtów: "{sent}"')

        def waiting() -> None:
            click.echo(f"Oczekiwanie na dane z PMOD (max {settings.window:g} sekund)...")

        try:
            data = comm.poll(settings, on_settled=waiting)
        except (serial.SerialException, OSError) as e:
            raise click.ClickException(f"Błąd podczas odczytu danych: {e}")

        if data is None:
            click.echo("Nie odebrano danych w określonym czasie.")
        else:
            text = data.decode("utf-8", errors="replace")
            click.echo(f'Odebrano {len(data)} bajtów: "{text}"')

    click.echo("Program zakończony.")
