"""Nextion HMI display link: command framing, event parsing and a serial listener."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "BUF_SIZE",
    "COMMAND_TERMINATOR",
    "TIMEOUT_S",
    "NextionActionType",
    "NextionEvent",
    "NextionDisplay",
    "encode_command",
    "parse_frame",
]

log = logging.getLogger(__name__)

BUF_SIZE = 1024
TIMEOUT_S = 1.0
COMMAND_TERMINATOR = b"\xff\xff\xff"
_MAX_COMMAND_BYTES = 127
_COMMAND_DELAY_S = 0.03


class NextionActionType(IntEnum):
    """Action codes the display firmware sends in ``~[code]data`` frames."""

    START_STOP = 0
    RAMP_TIME = 1
    RAMP_PRESSURE = 2
    HUMID_LEVEL = 3
    EASY_BREATH_PERCENT = 4
    BRIGHTNESS = 5
    SCREEN_SLEEP_TIME = 6
    MASK_OFF_ALARM = 7
    OTO_RAMP_OFF = 8


@dataclass(frozen=True)
class NextionEvent:
    """One action reported by the display."""

    action_type: int
    action_data: str


def encode_command(command: str) -> bytes:
    """Frame a command for the wire: terminator, command text, terminator."""
    if command is None:
        raise ValueError("command is missing")
    return COMMAND_TERMINATOR + command.encode("utf-8") + COMMAND_TERMINATOR


def _atoi(text: str) -> int:
    text = text.lstrip(" \t\n\r\v\f")
    sign = 1
    if text[:1] in ("+", "-"):
        if text[0] == "-":
            sign = -1
        text = text[1:]
    digits = ""
    for char in text:
        if not ("0" <= char <= "9"):
            break
        digits += char
    return sign * int(digits) if digits else 0


def parse_frame(frame) -> NextionEvent | None:
    """Parse ``~[action_type]action_data``; return ``None`` for anything else."""
    if isinstance(frame, str):
        raw = frame.encode("utf-8")
    else:
        raw = bytes(frame)
    raw = raw.split(b"\x00", 1)[0]
    if not raw.startswith(b"~["):
        return None
    text = raw.decode("utf-8", errors="replace")
    start = text.find("[")
    end = text.find("]")
    if start < 0 or end <= start:
        return None
    action_type = _atoi(text[start + 1 : end]) & 0xFF
    action_data = text[end + 1 :][:BUF_SIZE]
    return NextionEvent(action_type, action_data)


class NextionDisplay:
    """A display attached to a serial port.

    ``port`` needs ``write(bytes)`` and, for listening, ``read(size) -> bytes``.
    ``handler`` is called with each parsed :class:`NextionEvent`.
    """

    def __init__(self, port, handler: Callable[[NextionEvent], None] | None = None) -> None:
        if port is None:
            raise ValueError("port is missing")
        self._port = port
        self.handler = handler
        self.command_delay = _COMMAND_DELAY_S
        self.last_event: NextionEvent | None = None
        self._tx_lock = threading.Lock()

    @property
    def port(self):
        return self._port

    def send_command(self, command: str) -> None:
        """Send one command and give the display a moment to process it."""
        frame = encode_command(command)
        if not self._tx_lock.acquire(timeout=TIMEOUT_S):
            raise TimeoutError("could not acquire the transmit lock")
        try:
            self._port.write(frame)
        finally:
            self._tx_lock.release()
        log.debug("command sent: %s", command)
        if self.command_delay > 0:
            time.sleep(self.command_delay)

    def set_text(self, component_id: str, text: str) -> None:
        if component_id is None or text is None:
            raise ValueError("component id or text is missing")
        command = f'{component_id}.txt="{text}"'
        self.send_command(_clip(command))

    def set_value(self, component_id: str, value: int) -> None:
        if component_id is None:
            raise ValueError("component id is missing")
        self.send_command(_clip(f"{component_id}.val={int(value)}"))

    def handle_frame(self, frame) -> NextionEvent | None:
        """Parse an incoming frame and pass any event to the handler."""
        event = parse_frame(frame)
        if event is None:
            return None
        self.last_event = event
        log.debug("parsed action %d with data %r", event.action_type, event.action_data)
        if self.handler is not None:
            self.handler(event)
        return event

    def listen(self, stop_event: threading.Event) -> None:
        """Read frames from the port until ``stop_event`` is set."""
        log.info("display listener started")
        while not stop_event.is_set():
            data = self._port.read(BUF_SIZE)
            if data:
                self.handle_frame(data)
            else:
                stop_event.wait(0.01)
        log.info("display listener stopped")


def _clip(command: str) -> str:
    raw = command.encode("utf-8")
    if len(raw) <= _MAX_COMMAND_BYTES:
        return command
    return raw[:_MAX_COMMAND_BYTES].decode("utf-8", errors="ignore")