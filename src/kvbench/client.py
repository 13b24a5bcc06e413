# =============================================================================
# TCP client for the key-value protocol.
#
# Every client type exposes the same two calls:
#   execute_one(request)        one round trip
#   execute_pipeline(requests)  write all, then read all, in order
# Only the "tcp" type is implemented.
# =============================================================================

import logging
import socket

from kvbench.errors import TransportError, UnknownOperation
from kvbench.protocol import Response, decode_response, encode_request

logger = logging.getLogger(__name__)

DEFAULT_PORT = 12346


class Request:
    """
    One command issued by a worker. For GET, `expected` holds the value the
    worker would have written for this key; `outcome` is filled after the
    request runs and stays None if it was never sent.
    """

    __slots__ = ("op", "key", "value", "expected", "outcome")

    def __init__(self, op, key, value=None, expected=None):
        self.op = op
        self.key = key
        self.value = value
        self.expected = expected
        self.outcome = None

    def __repr__(self):
        return f"Request(op={self.op!r}, key={self.key!r}, outcome={self.outcome!r})"


class TcpClient:
    def __init__(self, host, port=DEFAULT_PORT, timeout=None):
        self.host = host
        self.port = port
        try:
            self.sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            raise TransportError(f"failed to connect to {host}:{port}: {e}") from e
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        self.reader = self.sock.makefile("rb")

    # --- Send / Receive ---

    def _send(self, data, request, prefix="tcp-cli"):
        """Send failures are logged, not raised, so the matching read still happens."""
        try:
            self.sock.sendall(data)
        except OSError as e:
            err = TransportError(
                f"failed to send {request.op} req(key={request.key}): {e}"
            )
            logger.error("[%s] %s", prefix, err)

    def _recv(self):
        try:
            return decode_response(self.reader)
        except OSError as e:
            raise TransportError(f"failed to read response: {e}") from e

    # --- Execution ---

    def execute_one(self, request):
        data = encode_request(request)
        logger.debug("req-%s: key=%s", request.op, request.key)
        self._send(data, request)
        request.outcome = self._recv()
        logger.debug("recv: %r", request.outcome)

    def execute_pipeline(self, requests):
        """
        Writes the whole batch before reading anything. Unknown operations are
        logged and skipped here, unlike execute_one where they are fatal; a
        skipped request gets no response and keeps outcome None.
        """
        if not requests:
            return
        sent = []
        for request in requests:
            try:
                data = encode_request(request)
            except UnknownOperation as e:
                logger.error("[pipeline] %s", e)
                continue
            logger.debug("[pipeline] req-%s: key=%s", request.op, request.key)
            self._send(data, request, prefix="pipeline")
            sent.append(request)

        logger.debug("[pipeline] %d requests written, reading responses", len(sent))
        # one read per written request, not per batch entry: a skipped request gets no reply
        for request in sent:
            request.outcome = self._recv()
            logger.debug("[pipeline] resp: %r", request.outcome)

    def close(self):
        try:
            self.reader.close()
        finally:
            self.sock.close()


# --- Factory ---

CLIENT_TYPES = {
    "tcp": TcpClient,
    "redis": None,
    "http": None,
}


def new_client(kind, host, port=DEFAULT_PORT, timeout=None):
    if kind not in CLIENT_TYPES:
        raise ValueError(f"unknown client type: {kind}")
    factory = CLIENT_TYPES[kind]
    if factory is None:
        raise NotImplementedError(f"client type '{kind}' is not implemented")
    return factory(host, port, timeout=timeout)


__all__ = ["DEFAULT_PORT", "Request", "Response", "TcpClient", "new_client"]
