"""Send a one-shot HTML e-mail over SMTP from a card-image job description."""

from __future__ import annotations

import re
import socket
import sys
from dataclasses import dataclass
from typing import IO

DEFAULT_PORT = 25
BUFFER_SIZE = 4096
RECORD_LENGTH = 80
WIRE_ENCODING = "latin-1"

BAD_PARAMETERS = -1
UNEXPECTED_RESPONSE = -2
UNKNOWN_SENDER = -3
UNKNOWN_RECIPIENT = -4

_HEADER_ERRORS = (
    "No SMTP address:port.",
    "No send from email address.",
    "No send to email address.",
    "No subject.",
)


class SmtpError(Exception):
    """The mail could not be delivered; ``code`` matches the classic return values."""

    def __init__(self, code: int, message: str, response: str = "") -> None:
        super().__init__(f"{message}\n{response}" if response else message)
        self.code = code
        self.message = message
        self.response = response


@dataclass
class MailJob:
    """Everything needed to send one message."""

    smtp: str
    sender: str
    recipient: str
    subject: str
    body: str


def _records(stream: IO) -> "iter[str]":
    while True:
        chunk = stream.read(RECORD_LENGTH)
        if len(chunk) != RECORD_LENGTH:
            return
        if isinstance(chunk, bytes):
            chunk = chunk.decode(WIRE_ENCODING)
        yield chunk.rstrip(" ")


def read_sysin(stream: IO) -> MailJob:
    """Read 80-column records: server, sender, recipient, subject, then body lines."""
    records = _records(stream)
    header = []
    for error in _HEADER_ERRORS:
        value = next(records, None)
        if value is None:
            raise ValueError(error)
        header.append(value)
    body = "".join(f"{line}\r\n" for line in records)
    return MailJob(*header, body=body)


def build_message(sender: str, recipient: str, subject: str, body: str) -> str:
    """Return the DATA section, terminated by the lone-dot line."""
    return (
        f"From: MVS38j <{sender}>\r\n"
        f"To: <{recipient}>\r\n"
        f"Subject: {subject}\r\n"
        "Content-Type: text/html\r\n"
        "\r\n"
        "<HTML><BODY>\r\n"
        f"{body}"
        "</BODY></HTML>\r\n\r\n"
        ".\r\n"
    )


def _split_address(smtp: str) -> tuple[str, int]:
    host, sep, port_text = smtp.partition(":")
    if not sep:
        return host, DEFAULT_PORT
    match = re.match(r"\s*([+-]?\d+)", port_text)
    port = int(match.group(1)) & 0xFFFF if match else 0
    return host, port


def _expect(sock: socket.socket, code: str, error: int, message: str) -> None:
    reply = sock.recv(BUFFER_SIZE)
    text = reply.decode(WIRE_ENCODING)
    if len(reply) < 3 or not text.startswith(code):
        raise SmtpError(error, message, text)


def _command(sock: socket.socket, line: str, code: str, error: int, message: str) -> None:
    sock.sendall(line.encode(WIRE_ENCODING))
    _expect(sock, code, error, message)


def send_mail(smtp: str, sender: str, recipient: str, subject: str, body: str) -> None:
    """Deliver one message through the server at ``host[:port]``."""
    if None in (smtp, sender, recipient, subject, body):
        raise SmtpError(BAD_PARAMETERS, "input parameters failed.")
    host, port = _split_address(smtp)
    try:
        sock = socket.create_connection((host, port))
    except socket.gaierror as exc:
        raise SmtpError(BAD_PARAMETERS, "gethostbyname failed.") from exc
    with sock:
        _expect(sock, "220", UNEXPECTED_RESPONSE, "Initial-Wait Failed.")
        _command(sock, "helo 127.0.0.1\r\n", "250", UNEXPECTED_RESPONSE, "HELO Failed.")
        _command(sock, f"MAIL FROM: <{sender}>\r\n", "250", UNKNOWN_SENDER,
                 "MAIL FROM: Failed.")
        _command(sock, f"RCPT TO: <{recipient}>\r\n", "250", UNKNOWN_RECIPIENT,
                 "RCPT TO: Failed, check the correct email address.")
        _command(sock, "DATA\r\n", "354", UNEXPECTED_RESPONSE, "DATA Failed.")
        _command(sock, build_message(sender, recipient, subject, body), "250",
                 UNEXPECTED_RESPONSE, "Transmit Message Failed.")
        _command(sock, "QUIT\r\n", "221", UNEXPECTED_RESPONSE, "Quit Failed.")


def main(argv: list[str] | None = None) -> int:
    """Read a job from the file named in ``argv`` (or standard input) and send it."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        if argv:
            with open(argv[0], "rb") as stream:
                job = read_sysin(stream)
        else:
            job = read_sysin(sys.stdin.buffer)
    except OSError:
        print("No SYSIN.")
        return 1
    except ValueError as exc:
        print(exc)
        return 1
    try:
        send_mail(job.smtp, job.sender, job.recipient, job.subject, job.body)
    except SmtpError as exc:
        print(exc)
        return exc.code
    except OSError as exc:
        print(f"connect failed: {exc}")
        return exc.errno or 1
    return 0