"""Helpers for the FTP daemon: path handling, replies, PORT/PASV addresses and listings."""

from __future__ import annotations

import ipaddress
import re
import time
from datetime import datetime
from typing import Iterable, Iterator

PASV_FALLBACK = "127,0,0,1"
FAKE_USER = "user"
FAKE_GROUP = "group"
LINK_COUNT = 1
BLOCK_SIZE = 1024
MAX_COMMAND = 39

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_SEPARATORS = re.compile(r"[\\/]")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class LineBuffer:
    """Accumulates control-connection text and hands out complete lines."""

    def __init__(self) -> None:
        self._data = ""

    def feed(self, data: str) -> None:
        """Append newly received text."""
        self._data += data

    @property
    def pending(self) -> str:
        """Text received but not yet part of a complete line."""
        return self._data

    def lines(self) -> Iterator[str]:
        """Yield complete lines, without their line ending, removing them from the buffer."""
        while True:
            end = self._data.find("\n")
            if end < 0:
                return
            line = self._data[:end]
            self._data = self._data[end + 1:]
            if line.endswith("\r"):
                line = line[:-1]
            yield line

    def push_front(self, line: str) -> None:
        """Put a line back at the front so that it is handled again later."""
        self._data = f"{line}\r\n{self._data}"


def canonical_path(path: str) -> str:
    """Resolve '.', '..' and repeated (back)slashes; the result starts and ends with '/'."""
    stack: list[str] = []
    for part in _SEPARATORS.split(path):
        if part in ("", "."):
            continue
        if part == "..":
            if stack:
                stack.pop()
        else:
            stack.append(part)
    return "/" + "".join(f"{part}/" for part in stack)


def dir_concat(cwd: str, cd_into: str | None) -> str:
    """Return the directory reached by changing from ``cwd`` into ``cd_into``."""
    if cd_into is None:
        return cwd
    if cd_into.startswith(("/", "\\")):
        return canonical_path(cd_into)
    return canonical_path(cwd + cd_into)


def server_message(code: int, message: str | None) -> str:
    """Format a (possibly multi-line) reply: 'code-' on continuation lines, 'code ' on the last."""
    if not message:
        return f"{code}  \r\n"
    *head, last = (line.rstrip("\r") for line in message.split("\n"))
    return "".join(f"{code}-{line}\r\n" for line in head) + f"{code} {last}\r\n"


def _atol(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_host_port(text: str) -> tuple[str, int]:
    """Decode the six comma-separated numbers of a PORT argument into (host, port)."""
    fields = text.split(",")
    if len(fields) != 6:
        raise ValueError(f"expected 6 comma-separated numbers, got {len(fields)}")
    values = [_atol(field) for field in fields]
    host = ".".join(str(value & 0xFF) for value in values[:4])
    port = (values[4] * 256 + values[5]) & 0xFFFF
    return host, port


def format_host_port(host: str, port: int) -> str:
    """Encode an address as six comma-separated numbers, as a PASV reply carries it."""
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port {port} out of range")
    address = ipaddress.IPv4Address(host or "0.0.0.0")
    prefix = PASV_FALLBACK if int(address) == 0 else ",".join(str(b) for b in address.packed)
    return f"{prefix},{port >> 8},{port & 0xFF}"


def parse_command(line: str | None) -> tuple[str, str] | None:
    """Split a control line into an upper-case command and its argument text."""
    if not line:
        return None
    command, sep, args = line.partition(" ")
    if not sep:
        return line[:MAX_COMMAND].upper(), ""
    return command.upper(), args


def _format_date(date: int | float | datetime) -> str:
    if isinstance(date, datetime):
        month, day, year = date.month, date.day, date.year
    else:
        local = time.localtime(date)
        month, day, year = local.tm_mon, local.tm_mday, local.tm_year
    return f"{_MONTHS[month - 1]} {day:02d}  {year}"


def format_listing_line(kind: str, date: int | float | datetime, name: str) -> str:
    """Return one `ls -l` style line; ``kind`` is '-' for a file or 'd' for a directory."""
    if len(kind) != 1:
        raise ValueError(f"kind must be a single character, got {kind!r}")
    return (f"{kind}r-xr-xr-x {LINK_COUNT:3d} {FAKE_USER:<8} {FAKE_GROUP:<8} "
            f"{BLOCK_SIZE:8d} {_format_date(date):>12} {name}\r\n")


def format_listing(entries: Iterable[tuple[str, int | float | datetime, str]]) -> str:
    """Return a full listing: a 'total' line followed by one line per (kind, date, name)."""
    lines = [format_listing_line(kind, date, name) for kind, date, name in entries]
    total = len(lines) * BLOCK_SIZE // 1024
    return f"total {total:05d}\r\n" + "".join(lines)