"""Chat relay server: forwards every message to all other connected clients."""

from __future__ import annotations

import re
import selectors
import socket
import sys
import threading
from typing import TextIO

from relaychat.message import MESSAGE_SIZE

IP = "0.0.0.0"
BACKLOG = 5
RECV_SIZE = MESSAGE_SIZE - 1
USAGE = "Usage: relaychat-server <port>"


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) & 0xFFFF if match else 0


def parse_args(argv: list[str]) -> int:
    """Return the port from ``[port]``; exit with usage otherwise."""
    if len(argv) != 1:
        raise SystemExit(USAGE)
    return _atoi(argv[0])


class ChatServer:
    """A select-driven server that relays each client's data to every other client."""

    def __init__(self, host: str = IP, port: int = 0, out: TextIO | None = None):
        self._out = out if out is not None else sys.stdout
        self._stop = threading.Event()
        self._serving = False
        self._closed = False
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.bind((host, port))
        except OSError as exc:
            listener.close()
            raise OSError(exc.errno, f"Failed to bind to socket: {exc.strerror}") from exc
        try:
            listener.listen(BACKLOG)
        except OSError as exc:
            listener.close()
            raise OSError(exc.errno, f"Failed to listen to client: {exc.strerror}") from exc
        self._listener = listener
        self._selector = selectors.DefaultSelector()
        self._selector.register(listener, selectors.EVENT_READ, None)

    @property
    def address(self) -> tuple[str, int]:
        """The address the server listens on."""
        return self._listener.getsockname()

    def __enter__(self) -> ChatServer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _say(self, text: str) -> None:
        self._out.write(text + "\n")
        self._out.flush()

    def _clients(self):
        return [
            key.fileobj
            for key in self._selector.get_map().values()
            if key.fileobj is not self._listener
        ]

    def _accept(self) -> None:
        conn, (client_ip, _) = self._listener.accept()
        self._say(f"Connected: {client_ip}")
        self._selector.register(conn, selectors.EVENT_READ, client_ip)

    def _disconnect(self, conn: socket.socket, client_ip: str) -> None:
        self._selector.unregister(conn)
        conn.close()
        self._say(f"Disconnected from {client_ip}")

    def _relay(self, conn: socket.socket, client_ip: str) -> None:
        try:
            data = conn.recv(RECV_SIZE)
        except ConnectionError:
            data = b""
        if not data:
            self._disconnect(conn, client_ip)
            return
        payload = data.split(b"\0", 1)[0]
        if not payload:
            return
        for peer in self._clients():
            if peer is conn:
                continue
            try:
                peer.sendall(payload)
            except OSError:
                pass

    def poll(self, timeout: float | None = None) -> int:
        """Wait for activity once, handle it, and return the number of ready sockets."""
        events = self._selector.select(timeout)
        for key, _ in events:
            if key.fileobj is self._listener:
                self._accept()
            else:
                self._relay(key.fileobj, key.data)
        return len(events)

    def serve_forever(self) -> None:
        """Relay messages until close() is called."""
        self._serving = True
        try:
            while not self._stop.is_set():
                self.poll(0.2)
        finally:
            self._serving = False
            self._shutdown()

    def close(self) -> None:
        """Stop serving and close every connection."""
        self._stop.set()
        if not self._serving:
            self._shutdown()

    def _shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for conn in self._clients():
            self._selector.unregister(conn)
            conn.close()
        self._selector.unregister(self._listener)
        self._selector.close()
        self._listener.close()


def main(argv: list[str] | None = None) -> int:
    """Run the chat server from the command line."""
    if argv is None:
        argv = sys.argv[1:]
    port = parse_args(argv)
    try:
        with ChatServer(IP, port) as server:
            server.serve_forever()
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())