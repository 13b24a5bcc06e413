# =============================================================================
# In-process key-value server speaking the length-prefixed protocol, used as
# the target for connection, driver and CLI tests.
# =============================================================================

import socketserver
import threading

import pytest

from kvbench.client import TcpClient


def _read_token(rfile):
    buf = b""
    while True:
        ch = rfile.read(1)
        if not ch:
            raise EOFError("client closed mid-request")
        if ch == b" ":
            return int(buf)
        buf += ch


def _read_exact(rfile, length):
    data = rfile.read(length)
    if len(data) != length:
        raise EOFError("client closed mid-request")
    return data


def _value_reply(value):
    return str(len(value)).encode() + b" " + value


def _error_reply(message):
    return b"- " + _value_reply(message)


class KVHandler(socketserver.StreamRequestHandler):
    def handle(self):
        server = self.server
        while True:
            op = self.rfile.read(1)
            if not op:
                return
            try:
                klen = _read_token(self.rfile)
                vlen = _read_token(self.rfile) if op == b"S" else 0
                key = _read_exact(self.rfile, klen)
                value = _read_exact(self.rfile, vlen)
            except EOFError:
                return

            with server.lock:
                server.requests.append((op, key))
                if op == b"S":
                    server.store[key] = value
                    reply = _value_reply(b"")
                elif op == b"G":
                    if key in server.errors:
                        reply = _error_reply(server.errors[key])
                    else:
                        reply = _value_reply(server.overrides.get(key, server.store.get(key, b"")))
                elif op == b"D":
                    server.store.pop(key, None)
                    reply = _value_reply(b"")
                else:
                    reply = _error_reply(b"unknown op")
            self.wfile.write(reply)


class KVServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address):
        super().__init__(address, KVHandler)
        self.lock = threading.Lock()
        self.store = {}
        self.overrides = {}   # key -> bytes returned by GET regardless of store
        self.errors = {}      # key -> error content returned by GET
        self.requests = []

    @property
    def host(self):
        return self.server_address[0]

    @property
    def port(self):
        return self.server_address[1]


@pytest.fixture
def kv_server():
    server = KVServer(("127.0.0.1", 0))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def client(kv_server):
    cli = TcpClient(kv_server.host, kv_server.port, timeout=5)
    yield cli
    cli.close()
