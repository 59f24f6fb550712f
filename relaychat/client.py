"""Terminal chat client: reads lines from the keyboard and relays them to a server."""

from __future__ import annotations

import ipaddress
import queue
import re
import selectors
import socket
import sys
import threading
from dataclasses import dataclass
from typing import TextIO

from relaychat.message import (
    MESSAGE_SIZE,
    NO_MESSAGE,
    USERNAME_SIZE,
    ChatMessage,
    deserialize,
    serialize,
)

USAGE = "Usage: relaychat-client <port> <ip>"
PROMPT = "What do you want to be called: "
EXIT_COMMAND = "EXIT"
# Moves the cursor up one line, clears it and returns to column zero.
CLEAR_LINE = "\033[A\033[2K\r"
# Every outgoing frame is padded with NUL bytes to this size.
FRAME_SIZE = MESSAGE_SIZE + USERNAME_SIZE
RECV_SIZE = MESSAGE_SIZE


@dataclass(frozen=True)
class ClientInput:
    """One line typed by the user: either a chat message or a command."""

    message: str = ""
    command: str = ""

    @property
    def exit_requested(self) -> bool:
        return self.command == EXIT_COMMAND


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) & 0xFFFF if match else 0


def _truncate(text: str, limit: int) -> str:
    return text.encode("utf-8")[:limit].decode("utf-8", errors="ignore")


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def parse_args(argv: list[str]) -> tuple[int, str]:
    """Return ``(port, ip)`` from ``[port, ip]``; exit with usage otherwise."""
    if len(argv) != 2:
        raise SystemExit(USAGE)
    port_text, host = argv
    return _atoi(port_text), host


def prompt_username(stdin: TextIO, stdout: TextIO) -> str:
    """Ask for a username and return it without its newline, cut to size."""
    stdout.write(PROMPT)
    stdout.flush()
    line = stdin.readline()
    if not line:
        raise EOFError("no username given")
    return _truncate(_strip_newline(line), USERNAME_SIZE)


def parse_input(line: str) -> ClientInput:
    """Turn a typed line into a message, or into the EXIT command."""
    text = _strip_newline(line)
    if text == EXIT_COMMAND:
        return ClientInput(command=EXIT_COMMAND)
    return ClientInput(message=_truncate(text, MESSAGE_SIZE))


def format_incoming(message: ChatMessage) -> str | None:
    """Return the display line for a received message, or None if it is empty."""
    if message.message == NO_MESSAGE:
        return None
    return f"{message.username}: {message.message}"


def _frame(username: str, message: str) -> bytes:
    return serialize(username, message)[:FRAME_SIZE].ljust(FRAME_SIZE, b"\0")


def _pump_lines(stdin: TextIO, lines: queue.Queue, wake: socket.socket) -> None:
    """Feed typed lines to the main loop; a final None marks end of input."""
    try:
        for line in iter(stdin.readline, ""):
            lines.put(line)
            wake.send(b"\0")
    except (OSError, ValueError):
        pass
    finally:
        lines.put(None)
        try:
            wake.send(b"\0")
        except OSError:
            pass


def _connect(host: str, port: int) -> socket.socket:
    try:
        ipaddress.IPv4Address(host)
    except ValueError as exc:
        raise ValueError("Error! Wrong IP") from exc
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((host, port))
    except OSError as exc:
        sock.close()
        raise ConnectionError("Error, can't connect to the server") from exc
    return sock


def run_client(
    host: str,
    port: int,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Connect to a chat server and relay lines until EXIT, end of input or hang-up."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    with _connect(host, port) as sock:
        username = prompt_username(stdin, stdout)
        lines: queue.Queue = queue.Queue()
        wake_reader, wake_writer = socket.socketpair()
        pump = threading.Thread(
            target=_pump_lines, args=(stdin, lines, wake_writer), daemon=True
        )
        pump.start()
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(sock, selectors.EVENT_READ, "server")
                selector.register(wake_reader, selectors.EVENT_READ, "keyboard")
                running = True
                while running:
                    for key, _ in selector.select():
                        if key.data == "server":
                            running = _handle_incoming(sock, stdout)
                        else:
                            wake_reader.recv(1)
                            running = _handle_typed(sock, lines.get(), username, stdout)
                        if not running:
                            break
        finally:
            wake_reader.close()
            wake_writer.close()


def _handle_incoming(sock: socket.socket, stdout: TextIO) -> bool:
    try:
        data = sock.recv(RECV_SIZE)
    except ConnectionError:
        data = b""
    if not data:
        return False
    text = format_incoming(deserialize(data))
    if text is not None:
        stdout.write(text + "\n")
        stdout.flush()
    return True


def _handle_typed(
    sock: socket.socket, line: str | None, username: str, stdout: TextIO
) -> bool:
    if line is None:
        return False
    stdout.write(f"{CLEAR_LINE}{username}: {line}")
    stdout.flush()
    entry = parse_input(line)
    sock.sendall(_frame(username, entry.message))
    return not entry.exit_requested


def main(argv: list[str] | None = None) -> int:
    """Run the chat client from the command line."""
    if argv is None:
        argv = sys.argv[1:]
    port, host = parse_args(argv)
    try:
        run_client(host, port)
    except (ValueError, OSError, EOFError) as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())